import logging
import os
from boto3 import resource

from luxestay.common.repository.booking_repo import BookingRepository
from luxestay.common.repository.room_repo import RoomRepository
from luxestay.common.services.booking_service import BookingService
from luxestay.common.utils.constants import AWS_REGION
from luxestay.common.utils.custom_exceptions import HotelError
from luxestay.common.utils.custom_response import send_custom_response, send_error_response
from luxestay.common.utils.request_context import get_caller, get_path_param
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

booking_service = BookingService(
    booking_repo=BookingRepository(table),
    room_repo=RoomRepository(table),
)


def cancel_booking(event, context):
    user_id, role = get_caller(event)
    if not user_id:
        return send_custom_response(401, "Unauthorized")

    booking_id = get_path_param(event, "booking_id")
    if not booking_id:
        return send_custom_response(400, "booking_id is required in the path")

    try:
        booking = booking_service.cancel_booking(
            booking_id, requester_id=user_id, requester_role=role
        )
        return send_custom_response(
            200, "Booking cancelled successfully", {"booking": booking.to_dict()}
        )
    except HotelError as err:
        return send_error_response(err)
    except ClientError as err:
        logger.error(f"AWS client error cancelling booking {booking_id}: {err}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error cancelling booking %s", booking_id)
        return send_custom_response(500, "Internal server error")
