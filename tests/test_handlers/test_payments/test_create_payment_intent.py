import unittest
from decimal import Decimal
from unittest.mock import patch

from handler_support import body_of, make_event
from luxestay.common.utils.custom_exceptions import PaymentError
import luxestay.handlers.payments.create_payment_intent as mod


class CreatePaymentIntentTests(unittest.TestCase):
    def setUp(self):
        self.p_create = patch.object(mod.payment_service, "create_intent")
        self.mock_create = self.p_create.start()

    def tearDown(self):
        self.p_create.stop()

    def test_requires_login(self):
        resp = mod.create_payment_intent(make_event({"amount": 10}, user_id=None), None)
        self.assertEqual(401, resp["statusCode"])

    def test_success(self):
        self.mock_create.return_value = "pi_1_secret"

        resp = mod.create_payment_intent(make_event({"amount": "250.50"}), None)

        self.assertEqual(200, resp["statusCode"])
        self.assertEqual("pi_1_secret", body_of(resp)["data"]["client_secret"])
        self.mock_create.assert_called_once_with(Decimal("250.50"))

    def test_non_positive_amount(self):
        resp = mod.create_payment_intent(make_event({"amount": 0}), None)

        self.assertEqual(400, resp["statusCode"])
        self.mock_create.assert_not_called()

    def test_gateway_error(self):
        self.mock_create.side_effect = PaymentError("Error creating payment intent: declined")

        resp = mod.create_payment_intent(make_event({"amount": 10}), None)

        self.assertEqual(502, resp["statusCode"])


if __name__ == "__main__":
    unittest.main()
