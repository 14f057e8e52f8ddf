from enum import Enum
from dataclasses import dataclass


class UserRole(Enum):
    ADMIN = "ADMIN"
    WARDEN = "WARDEN"
    STUDENT = "STUDENT"


STAFF_ROLES = (UserRole.WARDEN, UserRole.ADMIN)


@dataclass
class User:
    user_id: str
    name: str
    email: str
    role: UserRole
    password: str = ""
