from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from hostel.models.bookings import BookingStatus


class BookingRequest(BaseModel):
    student_id: str = Field(min_length=1)
    room_id: str = Field(min_length=1)
    check_in_date: date
    check_out_date: date
    duration: Optional[int] = Field(default=None, gt=0)
    total_amount: Optional[float] = Field(default=None, ge=0)


class BookingStatusRequest(BaseModel):
    status: BookingStatus

    @field_validator("status", mode="before")
    @classmethod
    def normalise(cls, v):
        return v.lower() if isinstance(v, str) else v
