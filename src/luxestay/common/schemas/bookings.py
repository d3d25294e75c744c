from datetime import date
from pydantic import BaseModel, Field, field_validator
from luxestay.common.utils.constants import MAX_ADULTS, MAX_CHILDREN


class BookingRequest(BaseModel):
    room_id: str = Field(min_length=1)
    check_in: date
    check_out: date
    adults: int = Field(default=1, ge=1, le=MAX_ADULTS)
    children: int = Field(default=0, ge=0, le=MAX_CHILDREN)

    @field_validator("room_id")
    @classmethod
    def strip_room_id(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("room_id is required")
        return v
