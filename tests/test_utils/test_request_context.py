import base64
import unittest

from pydantic import ValidationError

from luxestay.common.models.users import UserRole
from luxestay.common.schemas.bookings import BookingRequest
from luxestay.common.utils.custom_exceptions import InvalidRequest
from luxestay.common.utils.request_context import (
    decode_photo,
    format_validation_error,
    get_caller,
    get_path_param,
    parse_json_body,
)


class TestRequestContext(unittest.TestCase):
    def test_get_caller(self):
        event = {"requestContext": {"authorizer": {"user_id": "u1", "role": "admin"}}}

        self.assertEqual(("u1", UserRole.ADMIN), get_caller(event))

    def test_get_caller_without_authorizer(self):
        self.assertEqual((None, None), get_caller({}))
        self.assertEqual(
            ("u1", None),
            get_caller({"requestContext": {"authorizer": {"user_id": "u1", "role": "ghost"}}}),
        )

    def test_get_path_param(self):
        event = {"pathParameters": {"booking_id": " b1 ", "empty": "  "}}

        self.assertEqual("b1", get_path_param(event, "booking_id"))
        self.assertIsNone(get_path_param(event, "empty"))
        self.assertIsNone(get_path_param({}, "booking_id"))

    def test_parse_json_body(self):
        self.assertEqual({"a": 1}, parse_json_body({"body": '{"a": 1}'}))
        for event in ({}, {"body": "{not json"}, {"body": "[1, 2]"}):
            with self.assertRaises(InvalidRequest):
                parse_json_body(event)

    def test_decode_photo(self):
        raw = b"\x89PNG fake"
        encoded = base64.b64encode(raw).decode()

        self.assertEqual(raw, decode_photo(encoded))
        self.assertEqual(raw, decode_photo(f"data:image/png;base64,{encoded}"))
        self.assertIsNone(decode_photo(None))
        with self.assertRaises(InvalidRequest):
            decode_photo("***")

    def test_format_validation_error(self):
        with self.assertRaises(ValidationError) as ctx:
            BookingRequest.model_validate({"room_id": "r1", "check_in": "nope", "check_out": "2030-01-02"})

        message = format_validation_error(ctx.exception)

        self.assertIn("check_in", message)


if __name__ == "__main__":
    unittest.main()
