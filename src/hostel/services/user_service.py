from hostel.models.users import User, UserRole
from hostel.repository.user_repo import UserRepository
from hostel.services.student_service import StudentService
from hostel.utils.custom_exceptions import (
    IncorrectCredentials,
    InvalidRequest,
    UserAlreadyExists,
    NotFoundException,
)
import bcrypt
import logging
import re
import uuid
from hostel.utils.jwt_service import create_jwt

PASSWORD_REGEX = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^A-Za-z0-9]).{12,}$")

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, user_repo: UserRepository, student_service: StudentService):
        self.user_repo = user_repo
        self.student_service = student_service

    def get_user_by_id(self, user_id: str) -> User:
        user = self.user_repo.get_by_id(user_id=user_id)
        if user is None:
            raise NotFoundException(
                resource="user", identifier=user_id, status_code=404
            )
        return user

    def get_user_by_mail(self, mail) -> User:
        user = self.user_repo.get_by_mail(mail=mail)
        if user is None:
            raise NotFoundException(resource="user", identifier=mail, status_code=404)
        return user

    def login(self, email: str, password: str) -> str:
        user = self.get_user_by_mail(email)

        if not bcrypt.checkpw(
            password.encode("utf-8"),
            user.password.encode("utf-8"),
        ):
            raise IncorrectCredentials("Invalid email or password")

        return create_jwt(user)

    def register_user(
        self, email: str, name: str, password: str, role: UserRole
    ) -> User:
        self._is_email_valid(email)
        self._is_password_valid(password)

        user = User(
            user_id=str(uuid.uuid4()),
            name=name,
            email=email,
            password=self._hash_password(password),
            role=role,
        )
        self.user_repo.add_user(user)
        logger.info(f"User {user.user_id} registered as {role.value}")

        if role == UserRole.STUDENT:
            self.student_service.ensure_student_profile(user)
        return user

    def signup(self, email: str, name: str, password: str) -> str:
        user = self.register_user(email, name, password, UserRole.STUDENT)
        return create_jwt(user)

    def _is_password_valid(self, password: str):
        if not PASSWORD_REGEX.fullmatch(password):
            raise InvalidRequest(
                "Password must be at least 12 characters long and contain "
                "uppercase, lowercase, digit, and special character"
            )

    def _hash_password(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()

    def _is_email_valid(self, email: str):
        pattern = r"^[\w\.-]+@[\w\.-]+\.\w+$"
        if not re.match(pattern, email):
            raise InvalidRequest("Invalid email format")
        user = self.user_repo.get_by_mail(mail=email)
        if user:
            raise UserAlreadyExists("email is already in use")
