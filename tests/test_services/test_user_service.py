import unittest
from unittest.mock import MagicMock, patch
import bcrypt

from hostel.services.user_service import UserService
from hostel.models.users import User, UserRole
from hostel.utils.custom_exceptions import (
    IncorrectCredentials,
    InvalidRequest,
    UserAlreadyExists,
    NotFoundException,
)

STRONG_PASSWORD = "StrongPass!123"


class TestUserService(unittest.TestCase):

    def setUp(self):
        self.repo = MagicMock()
        self.student_service = MagicMock()
        self.service = UserService(self.repo, self.student_service)

        self.user = User(
            user_id="u1",
            name="Asha",
            email="asha@example.com",
            password="hashed",
            role=UserRole.STUDENT,
        )

    def test_get_user_by_id_success(self):
        self.repo.get_by_id.return_value = self.user

        result = self.service.get_user_by_id("u1")

        self.repo.get_by_id.assert_called_once_with(user_id="u1")
        self.assertEqual(result, self.user)

    def test_get_user_by_id_not_found(self):
        self.repo.get_by_id.return_value = None

        with self.assertRaises(NotFoundException):
            self.service.get_user_by_id("missing")

    def test_get_user_by_mail_not_found(self):
        self.repo.get_by_mail.return_value = None

        with self.assertRaises(NotFoundException):
            self.service.get_user_by_mail("asha@example.com")

    @patch("hostel.services.user_service.create_jwt")
    def test_login_success(self, mock_jwt):
        self.user.password = bcrypt.hashpw(
            STRONG_PASSWORD.encode(), bcrypt.gensalt()
        ).decode()
        self.repo.get_by_mail.return_value = self.user
        mock_jwt.return_value = "token"

        token = self.service.login("asha@example.com", STRONG_PASSWORD)

        self.assertEqual("token", token)
        mock_jwt.assert_called_once_with(self.user)

    def test_login_wrong_password(self):
        self.user.password = bcrypt.hashpw(b"Another!Pass123", bcrypt.gensalt()).decode()
        self.repo.get_by_mail.return_value = self.user

        with self.assertRaises(IncorrectCredentials):
            self.service.login("asha@example.com", STRONG_PASSWORD)

    def test_register_student_creates_profile(self):
        self.repo.get_by_mail.return_value = None

        user = self.service.register_user(
            "asha@example.com", "Asha", STRONG_PASSWORD, UserRole.STUDENT
        )

        self.repo.add_user.assert_called_once()
        self.assertTrue(bcrypt.checkpw(STRONG_PASSWORD.encode(), user.password.encode()))
        self.student_service.ensure_student_profile.assert_called_once_with(user)

    def test_register_warden_has_no_profile(self):
        self.repo.get_by_mail.return_value = None

        self.service.register_user(
            "warden@example.com", "Warden", STRONG_PASSWORD, UserRole.WARDEN
        )

        self.student_service.ensure_student_profile.assert_not_called()

    def test_register_existing_email(self):
        self.repo.get_by_mail.return_value = self.user

        with self.assertRaises(UserAlreadyExists):
            self.service.register_user(
                "asha@example.com", "Asha", STRONG_PASSWORD, UserRole.STUDENT
            )
        self.repo.add_user.assert_not_called()

    def test_register_weak_password(self):
        self.repo.get_by_mail.return_value = None

        with self.assertRaises(InvalidRequest):
            self.service.register_user(
                "asha@example.com", "Asha", "weak", UserRole.STUDENT
            )

    @patch("hostel.services.user_service.create_jwt", return_value="token")
    def test_signup_registers_student(self, mock_jwt):
        self.repo.get_by_mail.return_value = None

        self.assertEqual(
            "token", self.service.signup("asha@example.com", "Asha", STRONG_PASSWORD)
        )
        (user,) = mock_jwt.call_args.args
        self.assertEqual("asha@example.com", user.email)
        self.assertEqual(UserRole.STUDENT, user.role)


if __name__ == "__main__":
    unittest.main()
