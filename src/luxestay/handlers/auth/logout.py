import logging
import os
from luxestay.common.repository.token_repo import TokenRepository
from luxestay.common.repository.user_repo import UserRepository
from luxestay.common.services.user_service import UserService
from luxestay.common.utils.constants import AWS_REGION
from luxestay.common.utils.custom_exceptions import HotelError
from luxestay.common.utils.custom_response import send_custom_response, send_error_response
from luxestay.common.utils.jwt_service import strip_bearer
from luxestay.common.utils.request_context import get_bearer_token
from boto3 import resource
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("TABLE_NAME")
dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

service = UserService(user_repo=UserRepository(table), token_repo=TokenRepository(table))


def logout_handler(event, context):
    token = strip_bearer(get_bearer_token(event))
    if not token:
        return send_custom_response(401, "Unauthorized")
    try:
        service.logout(token)
        return send_custom_response(200, "logout successful")
    except HotelError as e:
        return send_error_response(e)
    except ClientError as e:
        logger.error(f"Logout failed: {e}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error during logout")
        return send_custom_response(500, "Internal server error")
