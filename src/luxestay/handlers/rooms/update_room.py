import logging
import os
from boto3 import resource
from luxestay.common.repository.room_repo import RoomRepository
from luxestay.common.schemas.rooms import RoomUpdateRequest
from luxestay.common.services.room_service import RoomService
from luxestay.common.models.users import UserRole
from luxestay.common.utils.constants import AWS_REGION
from luxestay.common.utils.custom_exceptions import HotelError
from luxestay.common.utils.custom_response import send_custom_response, send_error_response
from luxestay.common.utils.request_context import (
    decode_photo,
    format_validation_error,
    get_caller,
    get_path_param,
)
from botocore.exceptions import ClientError
from pydantic import ValidationError

logger = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

room_repo = RoomRepository(table)
room_service = RoomService(room_repo=room_repo)


def update_room(event, context):
    try:
        user_id, role = get_caller(event)
        if not user_id:
            return send_custom_response(401, "Unauthorized")

        if role != UserRole.ADMIN:
            return send_custom_response(403, "Only admins can update rooms")

        room_id = get_path_param(event, "room_id")
        if not room_id:
            return send_custom_response(400, "room_id is required in the path")

        if not event.get("body"):
            return send_custom_response(400, "Request body is required")

        try:
            request_body = RoomUpdateRequest.model_validate_json(event["body"])
        except ValidationError as e:
            return send_custom_response(400, format_validation_error(e))

        room = room_service.update_room(
            room_id=room_id,
            room_type=request_body.room_type,
            price=request_body.price,
            description=request_body.description,
            photo=decode_photo(request_body.photo_base64),
            photo_content_type=request_body.photo_content_type,
        )

        return send_custom_response(200, "Room updated successfully", room.to_dict())

    except HotelError as err:
        return send_error_response(err)
    except ClientError as err:
        logger.error(f"AWS client error updating room: {err}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error updating room")
        return send_custom_response(500, "Internal server error")
