import logging
import os
from boto3 import resource

from luxestay.common.repository.booking_repo import BookingRepository
from luxestay.common.repository.user_repo import UserRepository
from luxestay.common.repository.room_repo import RoomRepository
from luxestay.common.services.booking_service import BookingService
from luxestay.common.models.users import UserRole
from luxestay.common.utils.constants import AWS_REGION
from luxestay.common.utils.custom_exceptions import HotelError
from luxestay.common.utils.custom_response import send_custom_response, send_error_response
from luxestay.common.utils.request_context import get_caller, get_query_params

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


def get_user_bookings(event, context):
    try:
        user_id, role = get_caller(event)
        if not user_id:
            return send_custom_response(401, "Unauthorized")

        requested_user_id = get_query_params(event).get("user_id", user_id)

        if role != UserRole.ADMIN and requested_user_id != user_id:
            return send_custom_response(403, "Forbidden")

        bookings = booking_service.get_user_bookings(requested_user_id)
        result = [b.to_dict() for b in bookings]

        return send_custom_response(
            200,
            "Bookings retrieved successfully",
            {"count": len(result), "bookings": result},
        )

    except HotelError as err:
        return send_error_response(err)

    except Exception:
        logger.exception("Unhandled error retrieving user bookings")
        return send_custom_response(500, "Internal server error")


def get_all_bookings(event, context):
    try:
        user_id, role = get_caller(event)
        if not user_id:
            return send_custom_response(401, "Unauthorized")
        if role != UserRole.ADMIN:
            return send_custom_response(403, "Only admins can list all bookings")

        bookings = booking_service.list_all_bookings()
        result = [b.to_dict() for b in bookings]
        return send_custom_response(
            200,
            "Bookings retrieved successfully",
            {"count": len(result), "bookings": result},
        )

    except Exception:
        logger.exception("Unhandled error listing bookings")
        return send_custom_response(500, "Internal server error")
