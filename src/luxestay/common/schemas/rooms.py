from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class RoomRequest(BaseModel):
    room_type: str = Field(min_length=1, max_length=50)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    description: str = Field(default="", max_length=2000)
    photo_base64: Optional[str] = None
    photo_content_type: str = "image/jpeg"

    @field_validator("room_type")
    @classmethod
    def strip_room_type(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("room_type is required")
        return v


class RoomUpdateRequest(BaseModel):
    room_type: Optional[str] = Field(default=None, min_length=1, max_length=50)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    description: Optional[str] = Field(default=None, max_length=2000)
    photo_base64: Optional[str] = None
    photo_content_type: str = "image/jpeg"
