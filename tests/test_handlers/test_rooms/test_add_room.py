import base64
import unittest
from decimal import Decimal
from unittest.mock import patch

from handler_support import HandlerTestCase, body_of, make_event
from luxestay.common.models.rooms import Room
from luxestay.common.utils.custom_exceptions import UploadError


class AddRoomTests(HandlerTestCase):
    module_name = "luxestay.handlers.rooms.add_room"

    def setUp(self):
        self.p_add = patch.object(self.mod.room_service, "add_room")
        self.mock_add = self.p_add.start()
        self.mock_add.return_value = Room("r1", "Suite", Decimal("199.99"), "Sea view")

    def tearDown(self):
        self.p_add.stop()

    def test_requires_login(self):
        resp = self.mod.add_room(make_event({"room_type": "Suite", "price": 1}, user_id=None), None)
        self.assertEqual(401, resp["statusCode"])

    def test_requires_admin(self):
        resp = self.mod.add_room(make_event({"room_type": "Suite", "price": 1}), None)
        self.assertEqual(403, resp["statusCode"])
        self.mock_add.assert_not_called()

    def test_negative_price(self):
        resp = self.mod.add_room(
            make_event({"room_type": "Suite", "price": -5}, role="ADMIN"), None
        )
        self.assertEqual(400, resp["statusCode"])

    def test_success_with_photo(self):
        photo = base64.b64encode(b"jpeg-bytes").decode()

        resp = self.mod.add_room(
            make_event(
                {"room_type": "Suite", "price": "199.99", "description": "Sea view", "photo_base64": photo},
                role="ADMIN",
            ),
            None,
        )

        self.assertEqual(200, resp["statusCode"])
        self.assertEqual("199.99", body_of(resp)["data"]["price"])
        _, kwargs = self.mock_add.call_args
        self.assertEqual(b"jpeg-bytes", kwargs["photo"])
        self.assertEqual(Decimal("199.99"), kwargs["price"])

    def test_invalid_photo(self):
        resp = self.mod.add_room(
            make_event({"room_type": "Suite", "price": 10, "photo_base64": "@@@"}, role="ADMIN"),
            None,
        )
        self.assertEqual(400, resp["statusCode"])

    def test_upload_failure(self):
        self.mock_add.side_effect = UploadError("Unable to upload image: denied")

        resp = self.mod.add_room(
            make_event({"room_type": "Suite", "price": 10}, role="ADMIN"), None
        )
        self.assertEqual(502, resp["statusCode"])


if __name__ == "__main__":
    unittest.main()
