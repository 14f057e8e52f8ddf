import logging
from dataclasses import replace
from typing import Optional, Tuple
from uuid import uuid4

from hostel.models.students import EmergencyContact, Student
from hostel.models.users import User, UserRole
from hostel.repository.booking_repo import BookingRepository
from hostel.repository.student_repo import StudentRepository
from hostel.repository.transactions import TransactionCancelled
from hostel.services.room_ledger import RoomLedger
from hostel.utils.custom_exceptions import (
    ConflictException,
    InvalidRequest,
    NotFoundException,
)

logger = logging.getLogger(__name__)


def generate_student_id() -> str:
    return f"STU{uuid4().hex[:8].upper()}"


class StudentService:
    def __init__(
        self,
        student_repo: StudentRepository,
        booking_repo: BookingRepository,
        room_ledger: RoomLedger,
    ):
        self.student_repo = student_repo
        self.booking_repo = booking_repo
        self.room_ledger = room_ledger

    def get_student(self, student_id: str) -> Student:
        student = self.student_repo.get_by_id(student_id)
        if student is None:
            raise NotFoundException("student", student_id, 404)
        return student

    def ensure_student_profile(self, user: User) -> Student:
        """Return the student profile of ``user``, creating it if missing."""
        if user.role != UserRole.STUDENT:
            raise InvalidRequest("Only student accounts have a student profile")

        existing = self.student_repo.get_by_user_id(user.user_id)
        if existing:
            return existing

        student = Student(
            student_id=generate_student_id(),
            user_id=user.user_id,
            name=user.name,
            email=user.email,
        )
        try:
            self.student_repo.add_student(student)
        except ConflictException:
            # created by a concurrent request for the same user
            existing = self.student_repo.get_by_user_id(user.user_id)
            if existing is None:
                raise
            return existing

        logger.info(f"Student {student.student_id} created for {user.email}")
        return student

    def update_profile(
        self,
        user: User,
        phone: Optional[str] = None,
        emergency_contact: Optional[EmergencyContact] = None,
    ) -> Tuple[Student, bool]:
        existing = self.student_repo.get_by_user_id(user.user_id)
        student = existing or self.ensure_student_profile(user)

        self.student_repo.update_contact_details(
            student.student_id, phone, emergency_contact
        )
        if phone is not None:
            student = replace(student, phone=phone)
        if emergency_contact is not None:
            student = replace(student, emergency_contact=emergency_contact)
        return student, existing is None

    def assign_room(self, student_id: str, room_id: str) -> Student:
        student = self.get_student(student_id)
        if student.room_id:
            raise ConflictException(
                f"Student is already assigned to room {student.room_id}"
            )

        try:
            self.room_ledger.reserve_slot(
                room_id,
                lambda room: [self.student_repo.assign_room_item(student_id, room_id)],
            )
        except TransactionCancelled as err:
            if err.failed_at(1):
                raise ConflictException(
                    "Student was assigned to a room by another request"
                ) from err
            raise

        logger.info(f"Student {student_id} assigned to room {room_id}")
        return replace(student, room_id=room_id)

    def release_room(self, student_id: str) -> Student:
        student = self.get_student(student_id)
        if not student.room_id:
            raise ConflictException("Student is not assigned to a room")
        if self.booking_repo.get_active_booking_id(student_id):
            raise ConflictException(
                "Room is held by an active booking; check out or cancel the booking"
            )

        room_id = student.room_id
        try:
            self.room_ledger.release_slot(
                room_id,
                lambda room: [self.student_repo.release_room_item(student_id, room_id)],
            )
        except TransactionCancelled as err:
            if err.failed_at(1):
                raise ConflictException(
                    "Student room assignment changed concurrently"
                ) from err
            raise

        logger.info(f"Student {student_id} released from room {room_id}")
        return replace(student, room_id=None)

    def delete_student(self, student_id: str):
        student = self.get_student(student_id)
        if self.booking_repo.get_active_booking_id(student_id):
            raise ConflictException(
                "Student has an active booking; check out or cancel it first"
            )

        items = self.student_repo.delete_items(student)
        # delete items follow the room update when a slot is released
        offset = 1 if student.room_id else 0
        try:
            if student.room_id:
                self.room_ledger.release_slot(student.room_id, lambda room: items)
            else:
                self.student_repo.transact(items)
        except TransactionCancelled as err:
            if err.failed_at(offset + 2):
                raise ConflictException(
                    "Student has an active booking; check out or cancel it first"
                ) from err
            if err.failed_at(offset):
                raise ConflictException(
                    "Student room assignment changed concurrently"
                ) from err
            raise

        logger.info(f"Student {student_id} deleted, room {student.room_id or 'none'}")
