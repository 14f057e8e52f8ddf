import logging
import math
from dataclasses import replace
from datetime import date
from typing import List
from uuid import uuid4

from hostel.models.bookings import ALLOWED_TRANSITIONS, Booking, BookingStatus
from hostel.models.rooms import Room
from hostel.repository.booking_repo import BookingRepository
from hostel.repository.student_repo import StudentRepository
from hostel.repository.transactions import TransactionCancelled
from hostel.schemas.bookings import BookingRequest
from hostel.services.room_ledger import RoomLedger
from hostel.utils.constants import DAYS_PER_MONTH, MAX_BOOKING_MONTHS
from hostel.utils.custom_exceptions import (
    ConflictException,
    InvalidDates,
    InvalidStateTransition,
    NotFoundException,
)
from hostel.utils.datetime_normaliser import utc_today

logger = logging.getLogger(__name__)


def calculate_duration(check_in: date, check_out: date) -> int:
    """Length of stay in whole months, rounding any partial month up."""
    days = abs((check_out - check_in).days)
    return math.ceil(days / DAYS_PER_MONTH)


class BookingService:
    def __init__(
        self,
        booking_repo: BookingRepository,
        student_repo: StudentRepository,
        room_ledger: RoomLedger,
    ):
        self.booking_repo = booking_repo
        self.student_repo = student_repo
        self.room_ledger = room_ledger

    def create_booking(self, req: BookingRequest) -> Booking:
        computed_duration = self._validate_dates(req.check_in_date, req.check_out_date)

        student = self.student_repo.get_by_id(req.student_id)
        if student is None:
            raise NotFoundException("student", req.student_id, 404)

        booking_id = str(uuid4())
        created = {}

        def booking_items(room: Room) -> list:
            if self.booking_repo.get_active_booking_id(student.student_id):
                raise ConflictException("Student already has an active booking")
            if student.room_id:
                raise ConflictException(
                    f"Student is already assigned to room {student.room_id}"
                )

            duration = req.duration or computed_duration
            total_amount = (
                req.total_amount
                if req.total_amount is not None
                else room.price * duration
            )
            booking = Booking(
                booking_id=booking_id,
                student_id=student.student_id,
                room_id=room.room_id,
                check_in_date=req.check_in_date,
                check_out_date=req.check_out_date,
                duration=duration,
                total_amount=total_amount,
            )
            created["booking"] = booking
            return self.booking_repo.create_items(booking) + [
                self.student_repo.assign_room_item(student.student_id, room.room_id)
            ]

        # items: room, booking, student index, active lock, student binding
        try:
            self.room_ledger.reserve_slot(req.room_id, booking_items)
        except TransactionCancelled as err:
            if err.failed_at(3):
                raise ConflictException(
                    "Student already has an active booking"
                ) from err
            if err.failed_at(4):
                raise ConflictException("Student is already assigned to a room") from err
            raise

        logger.info(
            f"Booking {booking_id} created for student {student.student_id} "
            f"in room {req.room_id}"
        )
        return created["booking"]

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repo.get_booking_by_id(booking_id)
        if booking is None:
            raise NotFoundException("booking", booking_id, 404)
        return booking

    def get_student_bookings(self, student_id: str) -> List[Booking]:
        student = self.student_repo.get_by_id(student_id, consistent=False)
        if not student:
            raise NotFoundException("student", student_id, 404)
        return self.booking_repo.get_student_bookings(student_id)

    def transition(self, booking_id: str, to_status: BookingStatus) -> Booking:
        booking = self.get_booking(booking_id)
        if booking.status.is_terminal:
            raise InvalidStateTransition(
                f"Booking is already {booking.status.value}"
            )
        if to_status not in ALLOWED_TRANSITIONS[booking.status]:
            raise InvalidStateTransition(
                f"Cannot move booking from {booking.status.value} to {to_status.value}"
            )

        items = self.booking_repo.status_update_items(booking, to_status)
        try:
            if to_status.is_terminal:
                self.room_ledger.release_slot(
                    booking.room_id,
                    lambda room: items
                    + [
                        self.student_repo.release_room_item(
                            booking.student_id, booking.room_id
                        )
                    ],
                )
            else:
                self.booking_repo.transact(items)
        except TransactionCancelled as err:
            booking_index = 1 if to_status.is_terminal else 0
            if err.failed_at(booking_index):
                current = self.get_booking(booking_id)
                raise InvalidStateTransition(
                    f"Booking is already {current.status.value}"
                ) from err
            raise

        logger.info(
            f"Booking {booking_id} moved from {booking.status.value} to {to_status.value}"
        )
        return replace(booking, status=to_status)

    def delete_booking(self, booking_id: str):
        booking = self.get_booking(booking_id)
        items = self.booking_repo.delete_items(booking)
        try:
            if booking.status.is_active:
                self.room_ledger.release_slot(
                    booking.room_id,
                    lambda room: items
                    + [
                        self.student_repo.release_room_item(
                            booking.student_id, booking.room_id
                        )
                    ],
                )
            else:
                self.booking_repo.transact(items)
        except TransactionCancelled as err:
            booking_index = 1 if booking.status.is_active else 0
            if err.failed_at(booking_index):
                raise ConflictException(
                    f"Booking {booking_id} changed while it was being deleted"
                ) from err
            raise
        logger.info(f"Booking {booking_id} ({booking.status.value}) deleted")

    @staticmethod
    def _validate_dates(check_in: date, check_out: date) -> int:
        if check_in < utc_today():
            raise InvalidDates("Check-in date cannot be in the past")
        if check_out <= check_in:
            raise InvalidDates("Check-out date must be after check-in date")

        duration = calculate_duration(check_in, check_out)
        if duration > MAX_BOOKING_MONTHS:
            raise InvalidDates(
                f"Booking duration cannot exceed {MAX_BOOKING_MONTHS} months"
            )
        return duration
