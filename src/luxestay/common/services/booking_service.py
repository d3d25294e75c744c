import logging
import secrets
import string
import time
from datetime import date, datetime
from typing import Callable, List, Optional
from uuid import uuid4

from luxestay.common.models.bookings import Booking, BookingStatus
from luxestay.common.models.users import UserRole
from luxestay.common.repository.booking_repo import BookingRepository
from luxestay.common.repository.room_repo import RoomRepository
from luxestay.common.repository.user_repo import UserRepository
from luxestay.common.services.availability_service import (
    AvailabilityService,
    validate_range,
)
from luxestay.common.utils.constants import (
    CONFIRMATION_CODE_LENGTH,
    MAX_CODE_ATTEMPTS,
    MAX_RESERVE_ATTEMPTS,
)
from luxestay.common.utils.custom_exceptions import (
    AlreadyCancelled,
    BookingNotFound,
    ConfirmationCodeTaken,
    Forbidden,
    HotelError,
    InvalidRange,
    NotFoundException,
    RoomNotFound,
    RoomUnavailable,
    RoomVersionConflict,
    StorageBusy,
    UserNotFound,
)
from luxestay.common.utils.datetime_normaliser import utc_now
from luxestay.common.utils.retry import backoff_delay
from luxestay.common.utils.room_locks import DEFAULT_ROOM_LOCKS, RoomLocks

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_confirmation_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CONFIRMATION_CODE_LENGTH))


class BookingService:
    """The reservation ledger.

    ``reserve`` and ``cancel_booking`` on the same room run one at a time in
    this process (``RoomLocks``) and commit through a transaction conditioned
    on the room's ``booking_version``, so writers in other processes are
    serialized as well. A version conflict means the room changed after it
    was read: after a jittered backoff the availability check is redone from
    scratch.
    """

    def __init__(
        self,
        booking_repo: BookingRepository,
        room_repo: RoomRepository,
        user_repo: Optional[UserRepository] = None,
        availability: Optional[AvailabilityService] = None,
        room_locks: Optional[RoomLocks] = None,
        clock: Callable[[], datetime] = utc_now,
        code_generator: Callable[[], str] = generate_confirmation_code,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.booking_repo = booking_repo
        self.room_repo = room_repo
        self.user_repo = user_repo
        self.availability = availability or AvailabilityService(booking_repo, room_repo)
        self.room_locks = room_locks if room_locks is not None else DEFAULT_ROOM_LOCKS
        self.clock = clock
        self.code_generator = code_generator
        self.sleep = sleep

    def reserve(
        self,
        room_id: str,
        user_id: str,
        check_in: date,
        check_out: date,
        adults: int = 1,
        children: int = 0,
    ) -> Booking:
        validate_range(check_in, check_out)
        if check_in < self.clock().date():
            raise InvalidRange("check_in cannot be in the past")

        if self.user_repo is not None and self.user_repo.get_by_id(user_id) is None:
            raise UserNotFound(user_id)

        with self.room_locks.hold(room_id):
            for attempt in range(1, MAX_RESERVE_ATTEMPTS + 1):
                room = self.room_repo.get_room_by_id(room_id)
                if room is None:
                    raise RoomNotFound(room_id)

                if not self.availability.is_available(room_id, check_in, check_out):
                    raise RoomUnavailable(
                        f"room {room_id} is not available from {check_in} to {check_out}"
                    )

                booking = Booking(
                    booking_id=str(uuid4()),
                    room_id=room_id,
                    user_id=user_id,
                    check_in=check_in,
                    check_out=check_out,
                    adults=adults,
                    children=children,
                    confirmation_code=self._new_confirmation_code(),
                    status=BookingStatus.CONFIRMED,
                    booked_at=self.clock(),
                )
                try:
                    self.booking_repo.add_booking(
                        booking, expected_version=room.booking_version
                    )
                except RoomVersionConflict:
                    logger.info(
                        "Room %s changed during reservation, retrying (attempt %s)",
                        room_id,
                        attempt,
                    )
                    self._back_off(attempt)
                    continue
                except ConfirmationCodeTaken:
                    logger.info("Confirmation code collision on room %s, retrying", room_id)
                    continue

                logger.info(
                    "Reserved room %s for user %s from %s to %s as %s",
                    room_id,
                    user_id,
                    check_in,
                    check_out,
                    booking.booking_id,
                )
                return booking

        raise StorageBusy(f"room {room_id} is busy, please retry the reservation")

    def _back_off(self, attempt: int):
        if attempt < MAX_RESERVE_ATTEMPTS:
            self.sleep(backoff_delay(attempt))

    def _new_confirmation_code(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = self.code_generator()
            if not self.booking_repo.confirmation_code_exists(code):
                return code
        raise HotelError("could not generate a unique confirmation code")

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repo.get_booking_by_id(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    def cancel_booking(
        self,
        booking_id: str,
        requester_id: Optional[str] = None,
        requester_role: Optional[UserRole] = None,
    ) -> Booking:
        booking = self.get_booking(booking_id)

        if (
            requester_id is not None
            and requester_role != UserRole.ADMIN
            and booking.user_id != requester_id
        ):
            raise Forbidden("you can only cancel your own bookings")

        if booking.status == BookingStatus.CANCELLED:
            raise AlreadyCancelled(f"booking {booking_id} is already cancelled")

        with self.room_locks.hold(booking.room_id):
            for attempt in range(1, MAX_RESERVE_ATTEMPTS + 1):
                room = self.room_repo.get_room_by_id(booking.room_id)
                expected_version = room.booking_version if room else None
                cancelled_at = self.clock()
                try:
                    self.booking_repo.cancel_booking(
                        booking,
                        cancelled_at=cancelled_at,
                        expected_version=expected_version,
                    )
                except RoomVersionConflict:
                    logger.info(
                        "Room %s changed during cancellation, retrying (attempt %s)",
                        booking.room_id,
                        attempt,
                    )
                    self._back_off(attempt)
                    continue

                booking.status = BookingStatus.CANCELLED
                booking.cancelled_at = cancelled_at
                logger.info("Cancelled booking %s on room %s", booking_id, booking.room_id)
                return booking

        raise StorageBusy(f"booking {booking_id} is busy, please retry the cancellation")

    def find_by_confirmation_code(self, code: str) -> Booking:
        normalised = (code or "").strip().upper()
        booking = self.booking_repo.get_by_confirmation_code(normalised) if normalised else None
        if booking is None:
            raise NotFoundException("booking with confirmation code", normalised)
        return booking

    def list_all_bookings(self) -> List[Booking]:
        bookings = self.booking_repo.list_bookings()
        return sorted(bookings, key=lambda b: b.booked_at, reverse=True)

    def get_user_bookings(self, user_id: str) -> List[Booking]:
        if self.user_repo is not None and self.user_repo.get_by_id(user_id) is None:
            raise UserNotFound(user_id)
        bookings = self.booking_repo.get_user_bookings(user_id)
        return sorted(bookings, key=lambda b: b.check_in)
