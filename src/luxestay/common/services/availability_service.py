from datetime import date
from typing import Iterable, Optional, Set
from luxestay.common.models.bookings import Booking, BookingStatus
from luxestay.common.repository.booking_repo import BookingRepository
from luxestay.common.repository.room_repo import RoomRepository
from luxestay.common.utils.custom_exceptions import InvalidRange


def validate_range(check_in: date, check_out: date):
    if not isinstance(check_in, date) or not isinstance(check_out, date):
        raise InvalidRange("check_in and check_out must be dates")
    if check_out <= check_in:
        raise InvalidRange("check_out must be after check_in")


def has_conflict(bookings: Iterable[Booking], check_in: date, check_out: date) -> bool:
    return any(
        b.status == BookingStatus.CONFIRMED and b.overlaps(check_in, check_out)
        for b in bookings
    )


class AvailabilityService:
    """Answers whether rooms are free for a half-open date range.

    Only CONFIRMED bookings block a room; cancelled ones are ignored.
    """

    def __init__(self, booking_repo: BookingRepository, room_repo: RoomRepository):
        self.booking_repo = booking_repo
        self.room_repo = room_repo

    def is_available(self, room_id: str, check_in: date, check_out: date) -> bool:
        validate_range(check_in, check_out)
        bookings = self.booking_repo.get_room_bookings(room_id)
        return not has_conflict(bookings, check_in, check_out)

    def list_available(
        self, check_in: date, check_out: date, room_type: Optional[str] = None
    ) -> Set[str]:
        validate_range(check_in, check_out)
        if room_type:
            room_ids = self.room_repo.get_room_ids_by_type(room_type)
        else:
            room_ids = [room.room_id for room in self.room_repo.list_rooms()]

        return {
            room_id
            for room_id in room_ids
            if self.is_available(room_id, check_in, check_out)
        }
