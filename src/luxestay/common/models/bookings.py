from enum import Enum
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional


class BookingStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


@dataclass
class Booking:
    booking_id: str
    room_id: str
    user_id: str
    check_in: date
    check_out: date
    confirmation_code: str
    adults: int = 1
    children: int = 0
    status: BookingStatus = BookingStatus.CONFIRMED

    booked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    cancelled_at: Optional[datetime] = None

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def overlaps(self, check_in: date, check_out: date) -> bool:
        # half-open [check_in, check_out): back-to-back stays do not overlap
        return self.check_in < check_out and check_in < self.check_out

    def to_dict(self) -> dict:
        return {
            "booking_id": self.booking_id,
            "room_id": self.room_id,
            "user_id": self.user_id,
            "check_in": self.check_in.isoformat(),
            "check_out": self.check_out.isoformat(),
            "adults": self.adults,
            "children": self.children,
            "confirmation_code": self.confirmation_code,
            "status": self.status.value,
            "booked_at": self.booked_at.isoformat(),
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
        }
