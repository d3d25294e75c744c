import logging
import os
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

import stripe
from stripe import StripeClient

from luxestay.common.utils.custom_exceptions import InvalidRequest, PaymentError

logger = logging.getLogger(__name__)

STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY")
PAYMENT_CURRENCY = os.environ.get("PAYMENT_CURRENCY", "inr")


def to_minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentService:
    """Creates Stripe payment intents.

    Payment is independent from the reservation ledger: an intent is created
    for an amount and nothing here touches booking records.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        currency: str = PAYMENT_CURRENCY,
        client: Optional[StripeClient] = None,
    ):
        self.api_key = api_key or STRIPE_SECRET_KEY
        self.currency = currency
        self._client = client

    def _get_client(self) -> StripeClient:
        if self._client is None:
            if not self.api_key:
                raise PaymentError("Payment gateway is not configured")
            self._client = StripeClient(self.api_key)
        return self._client

    def create_intent(self, amount: Decimal) -> str:
        amount_minor = to_minor_units(amount)
        if amount_minor <= 0:
            raise InvalidRequest("amount must be greater than zero")

        try:
            intent = self._get_client().payment_intents.create(
                params={
                    "amount": amount_minor,
                    "currency": self.currency,
                    "automatic_payment_methods": {"enabled": True},
                }
            )
        except stripe.StripeError as e:
            logger.error(
                "Stripe payment intent creation failed: %s (code: %s)",
                str(e),
                getattr(e, "code", None),
            )
            raise PaymentError(f"Error creating payment intent: {e}") from e

        logger.info("Payment intent %s created for %s %s", intent.id, amount_minor, self.currency)
        return intent.client_secret
