import logging
import os
from boto3 import resource

from luxestay.common.repository.room_repo import RoomRepository
from luxestay.common.schemas.ai import ChatRequest, RecommendationRequest
from luxestay.common.services.concierge_service import ConciergeService
from luxestay.common.utils.constants import AWS_REGION
from luxestay.common.utils.custom_response import send_custom_response
from luxestay.common.utils.request_context import format_validation_error
from pydantic import ValidationError

logger = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

room_repo = RoomRepository(table)
concierge = ConciergeService()


def chat(event, context):
    if not event.get("body"):
        return send_custom_response(400, "Request body is required")
    try:
        request_body = ChatRequest.model_validate_json(event["body"])
    except ValidationError as e:
        return send_custom_response(400, format_validation_error(e))

    try:
        answer = concierge.chat(request_body.message)
        return send_custom_response(200, answer)
    except Exception:
        logger.exception("Unhandled error in concierge chat")
        return send_custom_response(500, "Internal server error")


def recommend_rooms(event, context):
    if not event.get("body"):
        return send_custom_response(400, "Request body is required")
    try:
        request_body = RecommendationRequest.model_validate_json(event["body"])
    except ValidationError as e:
        return send_custom_response(400, format_validation_error(e))

    try:
        rooms = room_repo.list_rooms()
        recommendations = concierge.recommend_rooms(request_body.query, rooms)
        return send_custom_response(200, "successful", recommendations)
    except Exception:
        logger.exception("Unhandled error recommending rooms")
        return send_custom_response(500, "Internal server error")
