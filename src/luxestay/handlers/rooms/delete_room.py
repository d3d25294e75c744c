import logging
import os
from boto3 import resource
from luxestay.common.repository.booking_repo import BookingRepository
from luxestay.common.repository.room_repo import RoomRepository
from luxestay.common.services.room_service import RoomService
from luxestay.common.models.users import UserRole
from luxestay.common.utils.constants import AWS_REGION
from luxestay.common.utils.custom_exceptions import HotelError
from luxestay.common.utils.custom_response import send_custom_response, send_error_response
from luxestay.common.utils.request_context import get_caller, get_path_param
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

room_service = RoomService(
    room_repo=RoomRepository(table),
    booking_repo=BookingRepository(table),
)


def delete_room(event, context):
    user_id, role = get_caller(event)
    if not user_id:
        return send_custom_response(401, "Unauthorized")
    if role != UserRole.ADMIN:
        return send_custom_response(403, "Only admins can delete rooms")

    room_id = get_path_param(event, "room_id")
    if not room_id:
        return send_custom_response(400, "room_id is required in the path")

    try:
        room_service.delete_room(room_id)
        return send_custom_response(200, f"Room {room_id} deleted successfully")
    except HotelError as err:
        return send_error_response(err)
    except ClientError as err:
        logger.error(f"AWS client error deleting room {room_id}: {err}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error deleting room %s", room_id)
        return send_custom_response(500, "Internal server error")
