import logging
import os
from boto3 import resource

from luxestay.common.repository.booking_repo import BookingRepository
from luxestay.common.repository.user_repo import UserRepository
from luxestay.common.services.user_service import UserService
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

user_service = UserService(
    user_repo=UserRepository(table),
    booking_repo=BookingRepository(table),
)


def list_users(event, context):
    user_id, role = get_caller(event)
    if not user_id:
        return send_custom_response(401, "Unauthorized")
    if role != UserRole.ADMIN:
        return send_custom_response(403, "Only admins can list users")

    try:
        users = user_service.list_users()
        return send_custom_response(
            200,
            "Successful",
            {"count": len(users), "users": [u.to_public_dict() for u in users]},
        )
    except Exception:
        logger.exception("Unhandled error listing users")
        return send_custom_response(500, "Internal server error")


def get_user(event, context):
    user_id, role = get_caller(event)
    if not user_id:
        return send_custom_response(401, "Unauthorized")
    if role != UserRole.ADMIN:
        return send_custom_response(403, "Only admins can view other users")

    target_id = get_path_param(event, "user_id")
    if not target_id:
        return send_custom_response(400, "user_id is required in the path")

    try:
        user = user_service.get_user_by_id(target_id)
        return send_custom_response(200, "Successful", user.to_public_dict())
    except HotelError as err:
        return send_error_response(err)
    except Exception:
        logger.exception("Unhandled error retrieving user %s", target_id)
        return send_custom_response(500, "Internal server error")


def delete_user(event, context):
    user_id, role = get_caller(event)
    if not user_id:
        return send_custom_response(401, "Unauthorized")
    if role != UserRole.ADMIN:
        return send_custom_response(403, "Only admins can delete users")

    target_id = get_path_param(event, "user_id")
    if not target_id:
        return send_custom_response(400, "user_id is required in the path")

    try:
        user_service.delete_user(target_id)
        return send_custom_response(200, f"User {target_id} deleted successfully")
    except HotelError as err:
        return send_error_response(err)
    except ClientError as err:
        logger.error(f"AWS client error deleting user {target_id}: {err}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error deleting user %s", target_id)
        return send_custom_response(500, "Internal server error")


def get_my_profile(event, context):
    user_id, _ = get_caller(event)
    if not user_id:
        return send_custom_response(401, "Unauthorized")

    try:
        user, bookings = user_service.get_profile(user_id)
        return send_custom_response(
            200,
            "Successful",
            {
                "user": user.to_public_dict(),
                "bookings": [b.to_dict() for b in bookings],
            },
        )
    except HotelError as err:
        return send_error_response(err)
    except Exception:
        logger.exception("Unhandled error retrieving profile of %s", user_id)
        return send_custom_response(500, "Internal server error")
