from enum import Enum
from dataclasses import dataclass, field
from datetime import date, datetime, timezone


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked-in"
    CHECKED_OUT = "checked-out"
    CANCELLED = "cancelled"

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


ACTIVE_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN})
TERMINAL_STATUSES = frozenset({BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED})

ALLOWED_TRANSITIONS = {
    BookingStatus.CONFIRMED: {BookingStatus.CHECKED_IN, BookingStatus.CANCELLED},
    BookingStatus.CHECKED_IN: {BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED},
    BookingStatus.CHECKED_OUT: set(),
    BookingStatus.CANCELLED: set(),
}


@dataclass
class Booking:
    booking_id: str
    student_id: str
    room_id: str
    check_in_date: date
    check_out_date: date
    duration: int
    total_amount: float
    paid_amount: float = 0.0
    status: BookingStatus = BookingStatus.CONFIRMED

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
