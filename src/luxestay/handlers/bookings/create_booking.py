import logging
import os
from boto3 import resource

from luxestay.common.repository.booking_repo import BookingRepository
from luxestay.common.repository.user_repo import UserRepository
from luxestay.common.repository.room_repo import RoomRepository
from luxestay.common.services.booking_service import BookingService
from luxestay.common.schemas.bookings import BookingRequest
from luxestay.common.utils.constants import AWS_REGION
from luxestay.common.utils.custom_exceptions import HotelError
from luxestay.common.utils.custom_response import send_custom_response, send_error_response
from luxestay.common.utils.request_context import format_validation_error, get_caller
from botocore.exceptions import ClientError
from pydantic import ValidationError

logger = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

booking_repo = BookingRepository(table)
user_repo = UserRepository(table)
room_repo = RoomRepository(table)

booking_service = BookingService(
    booking_repo=booking_repo,
    room_repo=room_repo,
    user_repo=user_repo,
)


def create_booking(event, context):
    if not event.get("body"):
        return send_custom_response(400, "Request body is required")

    try:
        request_body = BookingRequest.model_validate_json(event["body"])
    except ValidationError as e:
        return send_custom_response(400, format_validation_error(e))

    user_id, _ = get_caller(event)
    if not user_id:
        return send_custom_response(401, "Unauthorized")

    try:
        booking = booking_service.reserve(
            room_id=request_body.room_id,
            user_id=user_id,
            check_in=request_body.check_in,
            check_out=request_body.check_out,
            adults=request_body.adults,
            children=request_body.children,
        )
        return send_custom_response(
            200,
            "Booking created successfully",
            {
                "booking_confirmation_code": booking.confirmation_code,
                "booking": booking.to_dict(),
            },
        )

    except HotelError as err:
        return send_error_response(err)

    except ClientError as err:
        logger.error(f"AWS client error creating booking: {err}")
        return send_custom_response(500, "Internal server error")

    except Exception:
        logger.exception("Unhandled error creating booking")
        return send_custom_response(500, "Internal server error")
