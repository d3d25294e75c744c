import unittest
from unittest.mock import MagicMock
from decimal import Decimal
from botocore.exceptions import ClientError

from luxestay.common.repository.room_repo import RoomRepository, type_key
from luxestay.common.models.rooms import Room
from luxestay.common.utils.custom_exceptions import RoomNotFound, RoomVersionConflict


def cancelled(*reasons):
    return ClientError(
        error_response={
            "Error": {"Code": "TransactionCanceledException"},
            "CancellationReasons": list(reasons),
        },
        operation_name="TransactWriteItems",
    )


class TestRoomRepository(unittest.TestCase):

    def setUp(self):
        self.table = MagicMock()
        self.table.name = "test-table"
        self.client = MagicMock()

        self.table.meta.client = self.client
        self.repo = RoomRepository(self.table, self.client)
        self.room = Room("r1", "Deluxe Suite", Decimal("199.99"), "Sea view", booking_version=2)

    def test_type_key_is_case_insensitive(self):
        self.assertEqual("ROOMTYPE#deluxe suite", type_key("  Deluxe Suite "))

    def test_get_room_by_id_success(self):
        self.table.get_item.return_value = {
            "Item": {
                "pk": "ROOM#r1",
                "sk": "DETAILS",
                "room_type": "Deluxe Suite",
                "price": Decimal("199.99"),
                "description": "Sea view",
                "booking_version": Decimal("7"),
            }
        }

        room = self.repo.get_room_by_id("r1")

        self.table.get_item.assert_called_once_with(
            Key={"pk": "ROOM#r1", "sk": "DETAILS"}, ConsistentRead=True
        )
        self.assertIsInstance(room, Room)
        self.assertEqual("r1", room.room_id)
        self.assertEqual(Decimal("199.99"), room.price)
        self.assertEqual(7, room.booking_version)
        self.assertIsNone(room.photo_url)

    def test_get_room_by_id_not_found(self):
        self.table.get_item.return_value = {}

        self.assertIsNone(self.repo.get_room_by_id("nope"))

    def test_get_room_by_id_client_error(self):
        self.table.get_item.side_effect = ClientError(
            error_response={"Error": {"Message": "boom"}},
            operation_name="GetItem",
        )

        with self.assertRaises(ClientError):
            self.repo.get_room_by_id("r1")

    def test_add_room_writes_details_and_type_index(self):
        self.repo.add_room(self.room)

        _, kwargs = self.client.transact_write_items.call_args
        details, type_item = kwargs["TransactItems"]
        self.assertEqual("ROOM#r1", details["Put"]["Item"]["pk"])
        self.assertEqual("ROOM", details["Put"]["Item"]["entity"])
        self.assertEqual(Decimal("199.99"), details["Put"]["Item"]["price"])
        self.assertEqual(2, details["Put"]["Item"]["booking_version"])
        self.assertEqual("ROOMTYPE#deluxe suite", type_item["Put"]["Item"]["pk"])
        self.assertEqual("ROOM#r1", type_item["Put"]["Item"]["sk"])

    def test_get_room_ids_by_type(self):
        self.table.query.return_value = {
            "Items": [
                {"pk": "ROOMTYPE#deluxe suite", "sk": "ROOM#r1"},
                {"pk": "ROOMTYPE#deluxe suite", "sk": "ROOM#r2"},
            ]
        }

        self.assertEqual(["r1", "r2"], self.repo.get_room_ids_by_type("DELUXE SUITE"))

    def test_list_rooms(self):
        self.table.scan.return_value = {
            "Items": [{"pk": "ROOM#r1", "sk": "DETAILS", "room_type": "Single", "price": 50}]
        }

        rooms = self.repo.list_rooms()

        self.assertEqual(1, len(rooms))
        self.assertEqual(Decimal("50"), rooms[0].price)
        self.assertEqual(0, rooms[0].booking_version)

    def test_update_room_same_type(self):
        self.repo.update_room(self.room, previous_type="deluxe suite")

        _, kwargs = self.client.transact_write_items.call_args
        self.assertEqual(1, len(kwargs["TransactItems"]))

    def test_update_room_moves_type_index(self):
        self.repo.update_room(self.room, previous_type="Standard")

        _, kwargs = self.client.transact_write_items.call_args
        items = kwargs["TransactItems"]
        self.assertEqual(3, len(items))
        self.assertEqual(
            {"pk": "ROOMTYPE#standard", "sk": "ROOM#r1"}, items[1]["Delete"]["Key"]
        )
        self.assertEqual("ROOMTYPE#deluxe suite", items[2]["Put"]["Item"]["pk"])

    def test_update_missing_room(self):
        self.client.transact_write_items.side_effect = cancelled({"Code": "ConditionalCheckFailed"})

        with self.assertRaises(RoomNotFound):
            self.repo.update_room(self.room, previous_type="Deluxe Suite")

    def test_delete_room_checks_version(self):
        self.repo.delete_room(self.room)

        _, kwargs = self.client.transact_write_items.call_args
        delete = kwargs["TransactItems"][0]["Delete"]
        self.assertEqual("booking_version = :expected", delete["ConditionExpression"])
        self.assertEqual(2, delete["ExpressionAttributeValues"][":expected"])

    def test_delete_room_missing(self):
        self.client.transact_write_items.side_effect = cancelled(
            {"Code": "ConditionalCheckFailed"}, {"Code": "None"}
        )

        with self.assertRaises(RoomNotFound):
            self.repo.delete_room(self.room)

    def test_delete_room_stale_version(self):
        self.client.transact_write_items.side_effect = cancelled(
            {"Code": "ConditionalCheckFailed", "Item": {"booking_version": {"N": "3"}}},
            {"Code": "None"},
        )

        with self.assertRaises(RoomVersionConflict):
            self.repo.delete_room(self.room)


if __name__ == "__main__":
    unittest.main()
