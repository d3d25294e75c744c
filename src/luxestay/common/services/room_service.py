import logging
import time
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional
from uuid import uuid4

from luxestay.common.models.bookings import BookingStatus
from luxestay.common.models.rooms import Room
from luxestay.common.repository.booking_repo import BookingRepository
from luxestay.common.repository.room_repo import RoomRepository, normalise_room_type
from luxestay.common.services.availability_service import (
    AvailabilityService,
    validate_range,
)
from luxestay.common.services.blob_store import BlobStore
from luxestay.common.utils.constants import MAX_RESERVE_ATTEMPTS
from luxestay.common.utils.custom_exceptions import (
    InvalidRange,
    RoomHasActiveBookings,
    RoomNotFound,
    RoomVersionConflict,
    StorageBusy,
    UploadError,
)
from luxestay.common.utils.datetime_normaliser import utc_now
from luxestay.common.utils.retry import backoff_delay
from luxestay.common.utils.room_locks import DEFAULT_ROOM_LOCKS, RoomLocks

logger = logging.getLogger(__name__)


class RoomService:
    def __init__(
        self,
        room_repo: RoomRepository,
        booking_repo: Optional[BookingRepository] = None,
        blob_store: Optional[BlobStore] = None,
        availability: Optional[AvailabilityService] = None,
        room_locks: Optional[RoomLocks] = None,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.room_repo = room_repo
        self.booking_repo = booking_repo
        self.blob_store = blob_store
        self.availability = availability
        if self.availability is None and booking_repo is not None:
            self.availability = AvailabilityService(booking_repo, room_repo)
        self.room_locks = room_locks if room_locks is not None else DEFAULT_ROOM_LOCKS
        self.clock = clock
        self.sleep = sleep

    def _store_photo(self, photo: Optional[bytes], content_type: str) -> Optional[str]:
        if not photo:
            return None
        if self.blob_store is None:
            self.blob_store = BlobStore()
        return self.blob_store.store(photo, content_type)

    def add_room(
        self,
        room_type: str,
        price: Decimal,
        description: str = "",
        photo: Optional[bytes] = None,
        photo_content_type: str = "image/jpeg",
    ) -> Room:
        photo_url = self._store_photo(photo, photo_content_type)
        room = Room(
            room_id=str(uuid4()),
            room_type=room_type,
            price=price,
            description=description,
            photo_url=photo_url,
        )
        try:
            self.room_repo.add_room(room=room)
        except Exception:
            self._discard_photo(photo_url)
            raise
        logger.info("Added %s room %s", room.room_type, room.room_id)
        return room

    def _discard_photo(self, photo_url: Optional[str]):
        if photo_url is None:
            return
        try:
            self.blob_store.delete(photo_url)
        except UploadError:
            logger.exception("Could not remove orphaned photo %s", photo_url)

    def get_room(self, room_id: str) -> Room:
        room = self.room_repo.get_room_by_id(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        return room

    def list_rooms(self) -> List[Room]:
        return sorted(self.room_repo.list_rooms(), key=lambda r: (r.room_type.lower(), r.price))

    def list_room_types(self) -> List[str]:
        """Distinct room types, one entry per case-insensitive name."""
        types = {}
        for room in sorted(self.room_repo.list_rooms(), key=lambda r: r.room_type.strip()):
            types.setdefault(normalise_room_type(room.room_type), room.room_type.strip())
        return [types[key] for key in sorted(types)]

    def update_room(
        self,
        room_id: str,
        room_type: Optional[str] = None,
        price: Optional[Decimal] = None,
        description: Optional[str] = None,
        photo: Optional[bytes] = None,
        photo_content_type: str = "image/jpeg",
    ) -> Room:
        room = self.get_room(room_id)
        previous_type = room.room_type
        photo_url = self._store_photo(photo, photo_content_type)

        if room_type is not None:
            room.room_type = room_type
        if price is not None:
            room.price = price
        if description is not None:
            room.description = description
        if photo_url is not None:
            room.photo_url = photo_url

        try:
            self.room_repo.update_room(room, previous_type=previous_type)
        except Exception:
            self._discard_photo(photo_url)
            raise
        logger.info("Updated room %s", room_id)
        return room

    def delete_room(self, room_id: str):
        """Delete a room unless it still has upcoming confirmed stays.

        Rooms with a CONFIRMED booking that has not checked out yet are kept
        and ``RoomHasActiveBookings`` is raised; bookings are never orphaned.
        """
        today = self.clock().date()
        with self.room_locks.hold(room_id):
            for attempt in range(1, MAX_RESERVE_ATTEMPTS + 1):
                room = self.get_room(room_id)
                bookings = self.booking_repo.get_room_bookings(room_id) if self.booking_repo else []
                active = [
                    b
                    for b in bookings
                    if b.status == BookingStatus.CONFIRMED and b.check_out > today
                ]
                if active:
                    raise RoomHasActiveBookings(
                        f"room {room_id} has {len(active)} upcoming confirmed booking(s)"
                    )
                try:
                    self.room_repo.delete_room(room)
                except RoomVersionConflict:
                    logger.info(
                        "Room %s changed during deletion, retrying (attempt %s)",
                        room_id,
                        attempt,
                    )
                    if attempt < MAX_RESERVE_ATTEMPTS:
                        self.sleep(backoff_delay(attempt))
                    continue
                logger.info("Deleted room %s", room_id)
                return

        raise StorageBusy(f"room {room_id} is busy, please retry the deletion")

    def get_available_rooms(
        self, check_in: date, check_out: date, room_type: Optional[str] = None
    ) -> List[Room]:
        validate_range(check_in, check_out)
        if check_in < self.clock().date():
            raise InvalidRange("check_in cannot be in past")

        room_ids = self.availability.list_available(check_in, check_out, room_type)
        rooms = [self.room_repo.get_room_by_id(room_id) for room_id in room_ids]
        return sorted(
            (room for room in rooms if room is not None),
            key=lambda r: (r.price, r.room_id),
        )

    def get_rooms_available_today(self, room_type: Optional[str] = None) -> List[Room]:
        """Rooms free for tonight, i.e. the stay [today, tomorrow)."""
        today = self.clock().date()
        return self.get_available_rooms(today, today + timedelta(days=1), room_type)
