from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


class StudentStatus(str, Enum):
    ACTIVE = "active"
    GRADUATED = "graduated"
    LEFT = "left"


@dataclass
class EmergencyContact:
    name: str = ""
    phone: str = ""
    relationship: str = ""


@dataclass
class Student:
    student_id: str
    user_id: str
    name: str
    email: str
    phone: str = ""
    emergency_contact: EmergencyContact = field(default_factory=EmergencyContact)
    room_id: Optional[str] = None
    status: StudentStatus = StudentStatus.ACTIVE
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
