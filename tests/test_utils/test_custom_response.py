import json
import unittest

from luxestay.common.utils.custom_exceptions import (
    AlreadyCancelled,
    RoomNotFound,
    StorageBusy,
    TokenExpired,
)
from luxestay.common.utils.custom_response import send_custom_response, send_error_response


class TestCustomResponse(unittest.TestCase):
    def test_envelope(self):
        resp = send_custom_response(200, "ok", data={"room_id": "r1"})

        self.assertEqual(200, resp["statusCode"])
        self.assertEqual("application/json", resp["headers"]["Content-Type"])
        self.assertEqual(
            {"status_code": 200, "message": "ok", "data": {"room_id": "r1"}},
            json.loads(resp["body"]),
        )

    def test_data_omitted_when_none(self):
        body = json.loads(send_custom_response(204, "deleted")["body"])

        self.assertNotIn("data", body)

    def test_error_status_codes(self):
        cases = [
            (RoomNotFound("r9"), 404),
            (AlreadyCancelled("already cancelled"), 409),
            (TokenExpired("token has expired"), 401),
            (StorageBusy("busy"), 503),
            (RuntimeError("boom"), 500),
        ]
        for err, status in cases:
            resp = send_error_response(err)
            self.assertEqual(status, resp["statusCode"])
            self.assertEqual(str(err), json.loads(resp["body"])["message"])

    def test_not_found_message(self):
        body = json.loads(send_error_response(RoomNotFound("r9"))["body"])

        self.assertIn("r9", body["message"])


if __name__ == "__main__":
    unittest.main()
