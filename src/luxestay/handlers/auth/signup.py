import logging
import os
from luxestay.common.models.users import UserRole
from luxestay.common.repository.user_repo import UserRepository
from luxestay.common.services.user_service import UserService
from luxestay.common.schemas.users import SignupRequest
from luxestay.common.utils.constants import AWS_REGION
from luxestay.common.utils.custom_exceptions import HotelError
from luxestay.common.utils.custom_response import send_custom_response, send_error_response
from luxestay.common.utils.request_context import format_validation_error, get_caller
from boto3 import resource
from pydantic import ValidationError
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("TABLE_NAME")
dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

user_repo = UserRepository(table=table)
service = UserService(user_repo=user_repo)


def signup_handler(event, context):
    if not event.get("body"):
        return send_custom_response(400, "Request body is required")
    try:
        request_body = SignupRequest.model_validate_json(event["body"])
    except ValidationError as e:
        return send_custom_response(400, format_validation_error(e))

    # only an authenticated admin may create another admin
    _, caller_role = get_caller(event)
    if request_body.role == UserRole.ADMIN and caller_role != UserRole.ADMIN:
        return send_custom_response(403, "Only admins can register admin users")

    try:
        result = service.signup(
            request_body.email,
            request_body.name,
            request_body.password,
            request_body.phone_number,
            request_body.role,
        )
        return send_custom_response(
            status_code=200, message="signup successful", data=result.to_dict()
        )
    except HotelError as e:
        return send_error_response(e)
    except ClientError as e:
        logger.error(f"Signup failed: {e}")
        return send_custom_response(status_code=500, message="Internal server error")
    except Exception:
        logger.exception("Unhandled error during signup")
        return send_custom_response(status_code=500, message="Internal server error")
