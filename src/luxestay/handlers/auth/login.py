import logging
import os
from luxestay.common.repository.user_repo import UserRepository
from luxestay.common.services.user_service import UserService
from luxestay.common.schemas.users import LoginRequest
from luxestay.common.utils.constants import AWS_REGION
from luxestay.common.utils.custom_exceptions import AuthError
from luxestay.common.utils.custom_response import send_custom_response
from luxestay.common.utils.request_context import format_validation_error
from pydantic import ValidationError
from botocore.exceptions import ClientError
from boto3 import resource

logger = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("TABLE_NAME")
dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)
repo = UserRepository(table=table)
service = UserService(user_repo=repo)


def login_handler(event, context):
    if not event.get("body"):
        return send_custom_response(400, "Request body is required")
    try:
        request_body = LoginRequest.model_validate_json(event["body"])
    except ValidationError as e:
        return send_custom_response(400, format_validation_error(e))
    try:
        result = service.login(request_body.email, request_body.password)
        return send_custom_response(
            status_code=200, message="login successful", data=result.to_dict()
        )
    except AuthError as e:
        return send_custom_response(status_code=e.status_code, message=str(e))
    except ClientError as e:
        logger.error(f"Login failed: {e}")
        return send_custom_response(status_code=500, message="Internal server error")
    except Exception:
        logger.exception("Unhandled error during login")
        return send_custom_response(status_code=500, message="Internal server error")
