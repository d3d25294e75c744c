from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass
class Room:
    room_id: str
    room_type: str
    price: Decimal
    description: str = ""
    photo_url: Optional[str] = None
    booking_version: int = 0

    def to_dict(self) -> dict:
        return {
            "room_id": self.room_id,
            "room_type": self.room_type,
            "price": str(self.price),
            "description": self.description,
            "photo_url": self.photo_url,
        }
