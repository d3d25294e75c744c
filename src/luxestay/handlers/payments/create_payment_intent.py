import logging

from luxestay.common.schemas.payments import PaymentIntentRequest
from luxestay.common.services.payment_service import PaymentService
from luxestay.common.utils.custom_exceptions import HotelError
from luxestay.common.utils.custom_response import send_custom_response, send_error_response
from luxestay.common.utils.request_context import format_validation_error, get_caller
from pydantic import ValidationError

logger = logging.getLogger(__name__)

payment_service = PaymentService()


def create_payment_intent(event, context):
    user_id, _ = get_caller(event)
    if not user_id:
        return send_custom_response(401, "Unauthorized")

    if not event.get("body"):
        return send_custom_response(400, "Request body is required")
    try:
        request_body = PaymentIntentRequest.model_validate_json(event["body"])
    except ValidationError as e:
        return send_custom_response(400, format_validation_error(e))

    try:
        client_secret = payment_service.create_intent(request_body.amount)
        return send_custom_response(
            200, "Payment Intent Created", {"client_secret": client_secret}
        )
    except HotelError as err:
        return send_error_response(err)
    except Exception:
        logger.exception("Unhandled error creating payment intent")
        return send_custom_response(500, "Internal server error")
