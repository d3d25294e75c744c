import unittest
from unittest.mock import MagicMock
from datetime import date, datetime, timezone
from decimal import Decimal

from fakes import FakeBookingRepository, FakeRoomRepository, InMemoryStore
from luxestay.common.models.bookings import Booking, BookingStatus
from luxestay.common.models.rooms import Room
from luxestay.common.services.room_service import RoomService
from luxestay.common.utils.constants import MAX_RESERVE_ATTEMPTS, RETRY_BASE_DELAY_SECONDS
from luxestay.common.utils.custom_exceptions import (
    InvalidRange,
    RoomHasActiveBookings,
    RoomNotFound,
    RoomVersionConflict,
    StorageBusy,
)
from luxestay.common.utils.room_locks import RoomLocks

NOW = datetime(2030, 1, 10, 12, 0, tzinfo=timezone.utc)


class TestRoomService(unittest.TestCase):

    def setUp(self):
        self.store = InMemoryStore()
        self.room_repo = FakeRoomRepository(self.store)
        self.booking_repo = FakeBookingRepository(self.store)
        self.blob_store = MagicMock()
        self.blob_store.store.return_value = "https://photos.s3.ap-south-1.amazonaws.com/rooms/x.jpg"
        self.service = RoomService(
            self.room_repo,
            booking_repo=self.booking_repo,
            blob_store=self.blob_store,
            room_locks=RoomLocks(),
            clock=lambda: NOW,
        )
        self.room_repo.add_room(Room("r1", "Suite", Decimal("300.00")))
        self.room_repo.add_room(Room("r2", "Single", Decimal("80.00")))
        self.room_repo.add_room(Room("r3", "Suite", Decimal("250.00")))

    def _book(self, room_id, check_in, check_out, status=BookingStatus.CONFIRMED, code="CODE0001"):
        booking = Booking(f"b-{code}", room_id, "u1", check_in, check_out, code, status=status)
        self.booking_repo.add_booking(
            booking, expected_version=self.room_repo.get_room_by_id(room_id).booking_version
        )
        return booking

    def test_add_room_without_photo(self):
        room = self.service.add_room("Deluxe", Decimal("120.50"), "City view")

        self.assertIsNone(room.photo_url)
        self.blob_store.store.assert_not_called()
        self.assertEqual(room, self.room_repo.get_room_by_id(room.room_id))

    def test_add_room_with_photo(self):
        room = self.service.add_room("Deluxe", Decimal("120.50"), photo=b"img", photo_content_type="image/png")

        self.blob_store.store.assert_called_once_with(b"img", "image/png")
        self.assertTrue(room.photo_url.startswith("https://"))

    def test_add_room_failure_removes_uploaded_photo(self):
        room_repo = MagicMock()
        room_repo.add_room.side_effect = RuntimeError("write failed")
        service = RoomService(room_repo, blob_store=self.blob_store, room_locks=RoomLocks())

        with self.assertRaises(RuntimeError):
            service.add_room("Deluxe", Decimal("120.50"), photo=b"img")

        self.blob_store.delete.assert_called_once_with(self.blob_store.store.return_value)

    def test_update_missing_room_never_uploads(self):
        with self.assertRaises(RoomNotFound):
            self.service.update_room("missing", price=Decimal("10"), photo=b"img")

        self.blob_store.store.assert_not_called()

    def test_update_room_failure_removes_uploaded_photo(self):
        room_repo = MagicMock()
        room_repo.get_room_by_id.return_value = Room("r1", "Suite", Decimal("300.00"))
        room_repo.update_room.side_effect = RoomNotFound("r1")
        service = RoomService(room_repo, blob_store=self.blob_store, room_locks=RoomLocks())

        with self.assertRaises(RoomNotFound):
            service.update_room("r1", photo=b"img")

        self.blob_store.delete.assert_called_once_with(self.blob_store.store.return_value)

    def test_update_room_with_photo(self):
        room = self.service.update_room("r1", photo=b"img")

        self.assertEqual(self.blob_store.store.return_value, room.photo_url)
        self.blob_store.delete.assert_not_called()

    def test_get_room_missing(self):
        with self.assertRaises(RoomNotFound):
            self.service.get_room("nope")

    def test_list_rooms_and_types(self):
        rooms = self.service.list_rooms()

        self.assertEqual(["r2", "r3", "r1"], [r.room_id for r in rooms])
        self.assertEqual(["Single", "Suite"], self.service.list_room_types())

    def test_room_types_ignore_case(self):
        self.room_repo.add_room(Room("r4", "suite ", Decimal("260.00")))
        self.room_repo.add_room(Room("r5", "SINGLE", Decimal("70.00")))

        types = self.service.list_room_types()

        self.assertEqual(2, len(types))
        self.assertEqual(["single", "suite"], [t.lower() for t in types])

    def test_update_room_partial(self):
        room = self.service.update_room("r1", price=Decimal("310.00"))

        self.assertEqual(Decimal("310.00"), room.price)
        self.assertEqual("Suite", self.room_repo.get_room_by_id("r1").room_type)
        self.assertEqual(Decimal("310.00"), self.room_repo.get_room_by_id("r1").price)

    def test_update_room_type_changes_listing(self):
        self.service.update_room("r1", room_type="Penthouse")

        self.assertEqual(["r1"], self.room_repo.get_room_ids_by_type("penthouse"))

    def test_delete_room_with_upcoming_booking_rejected(self):
        self._book("r1", date(2030, 1, 9), date(2030, 1, 12))

        with self.assertRaises(RoomHasActiveBookings):
            self.service.delete_room("r1")
        self.assertIsNotNone(self.room_repo.get_room_by_id("r1"))

    def test_delete_room_with_past_or_cancelled_bookings(self):
        self._book("r1", date(2030, 1, 1), date(2030, 1, 10), code="CODE0001")
        self._book("r1", date(2030, 2, 1), date(2030, 2, 3), BookingStatus.CANCELLED, code="CODE0002")

        self.service.delete_room("r1")

        self.assertIsNone(self.room_repo.get_room_by_id("r1"))

    def test_delete_room_retries_on_version_conflict(self):
        room_repo = MagicMock()
        room_repo.get_room_by_id.return_value = Room("r1", "Suite", Decimal("1"))
        room_repo.delete_room.side_effect = [RoomVersionConflict("r1"), None]
        sleep = MagicMock()
        service = RoomService(
            room_repo, booking_repo=MagicMock(), room_locks=RoomLocks(), clock=lambda: NOW, sleep=sleep
        )
        service.booking_repo.get_room_bookings.return_value = []

        service.delete_room("r1")

        self.assertEqual(2, room_repo.delete_room.call_count)
        sleep.assert_called_once()
        self.assertLessEqual(sleep.call_args.args[0], RETRY_BASE_DELAY_SECONDS)

    def test_delete_room_gives_up(self):
        room_repo = MagicMock()
        room_repo.get_room_by_id.return_value = Room("r1", "Suite", Decimal("1"))
        room_repo.delete_room.side_effect = RoomVersionConflict("r1")
        sleep = MagicMock()
        service = RoomService(
            room_repo, booking_repo=MagicMock(), room_locks=RoomLocks(), clock=lambda: NOW, sleep=sleep
        )
        service.booking_repo.get_room_bookings.return_value = []

        with self.assertRaises(StorageBusy):
            service.delete_room("r1")
        self.assertEqual(MAX_RESERVE_ATTEMPTS, room_repo.delete_room.call_count)
        self.assertEqual(MAX_RESERVE_ATTEMPTS - 1, sleep.call_count)

    def test_get_available_rooms(self):
        self._book("r3", date(2030, 1, 12), date(2030, 1, 15))

        rooms = self.service.get_available_rooms(date(2030, 1, 14), date(2030, 1, 16))
        self.assertEqual(["r2", "r1"], [r.room_id for r in rooms])

        rooms = self.service.get_available_rooms(date(2030, 1, 15), date(2030, 1, 16), "suite")
        self.assertEqual(["r3", "r1"], [r.room_id for r in rooms])

    def test_rooms_available_today(self):
        self._book("r2", date(2030, 1, 9), date(2030, 1, 11), code="CODE0001")
        self._book("r3", date(2030, 1, 11), date(2030, 1, 13), code="CODE0002")

        rooms = self.service.get_rooms_available_today()
        self.assertEqual(["r3", "r1"], [r.room_id for r in rooms])

        rooms = self.service.get_rooms_available_today("SUITE")
        self.assertEqual(["r3", "r1"], [r.room_id for r in rooms])

    def test_get_available_rooms_rejects_bad_ranges(self):
        with self.assertRaises(InvalidRange):
            self.service.get_available_rooms(date(2030, 1, 16), date(2030, 1, 14))
        with self.assertRaises(InvalidRange):
            self.service.get_available_rooms(date(2030, 1, 9), date(2030, 1, 14))


if __name__ == "__main__":
    unittest.main()
