import logging
import os
from boto3 import resource

from luxestay.common.repository.booking_repo import BookingRepository
from luxestay.common.repository.room_repo import RoomRepository
from luxestay.common.services.booking_service import BookingService
from luxestay.common.utils.constants import AWS_REGION
from luxestay.common.utils.custom_exceptions import HotelError
from luxestay.common.utils.custom_response import send_custom_response, send_error_response
from luxestay.common.utils.request_context import get_path_param

logger = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

room_repo = RoomRepository(table)
booking_service = BookingService(
    booking_repo=BookingRepository(table),
    room_repo=room_repo,
)


def find_booking(event, context):
    code = get_path_param(event, "confirmation_code")
    if not code:
        return send_custom_response(400, "confirmation_code is required in the path")

    try:
        booking = booking_service.find_by_confirmation_code(code)
        data = {"booking": booking.to_dict()}
        room = room_repo.get_room_by_id(booking.room_id)
        if room is not None:
            data["room"] = room.to_dict()
        return send_custom_response(200, "successful", data)
    except HotelError as err:
        return send_error_response(err)
    except Exception:
        logger.exception("Unhandled error finding booking by code")
        return send_custom_response(500, "Internal server error")
