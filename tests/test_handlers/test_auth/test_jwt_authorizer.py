import importlib
import unittest
from datetime import datetime, timedelta, timezone

import jwt

from hostel.models.users import User, UserRole
from hostel.utils import jwt_service


class JwtAuthorizerTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        import hostel_handlers.auth.jwt_authorizer as mod
        cls.mod = importlib.reload(mod)

    def _event(self, token=None, method_arn="arn:aws:execute-api:ap-south-1:123:api/test/GET/rooms"):
        event = {"methodArn": method_arn}
        if token:
            event["headers"] = {"Authorization": f"Bearer {token}"}
        return event

    def _effect(self, resp):
        return resp["policyDocument"]["Statement"][0]["Effect"]

    def test_missing_token_denies(self):
        resp = self.mod.lambda_handler(self._event(), None)
        self.assertEqual("Deny", self._effect(resp))
        self.assertEqual("unauthorized", resp["principalId"])

    def test_valid_token_allows_whole_stage(self):
        token = jwt_service.create_jwt(
            User(user_id="u1", name="Meena", email="w@example.com", role=UserRole.WARDEN)
        )

        resp = self.mod.lambda_handler(self._event(token), None)

        self.assertEqual("Allow", self._effect(resp))
        self.assertEqual("u1", resp["principalId"])
        self.assertEqual(
            "arn:aws:execute-api:ap-south-1:123:api/test/*/*",
            resp["policyDocument"]["Statement"][0]["Resource"],
        )
        self.assertEqual(
            {"user_id": "u1", "email": "w@example.com", "role": "WARDEN"},
            resp["context"],
        )

    def test_lowercase_header_is_accepted(self):
        token = jwt_service.create_jwt(
            User(user_id="u1", name="Asha", email="s@example.com", role=UserRole.STUDENT)
        )
        event = {
            "methodArn": "arn:aws:execute-api:ap-south-1:123:api/test/GET/rooms",
            "headers": {"authorization": f"Bearer {token}"},
        }

        resp = self.mod.lambda_handler(event, None)

        self.assertEqual("Allow", self._effect(resp))

    def test_expired_token_denies(self):
        token = jwt.encode(
            {
                "user_id": "u1",
                "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
            },
            jwt_service.SECRET_KEY,
            algorithm=jwt_service.ALGORITHM,
        )

        resp = self.mod.lambda_handler(self._event(token), None)

        self.assertEqual("Deny", self._effect(resp))

    def test_token_signed_with_other_secret_denies(self):
        token = jwt.encode(
            {"user_id": "u1", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "someone-elses-secret",
            algorithm="HS256",
        )

        resp = self.mod.lambda_handler(self._event(token), None)

        self.assertEqual("Deny", self._effect(resp))

    def test_token_without_user_id_denies(self):
        token = jwt.encode(
            {"email": "x@example.com", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            jwt_service.SECRET_KEY,
            algorithm=jwt_service.ALGORITHM,
        )

        resp = self.mod.lambda_handler(self._event(token), None)

        self.assertEqual("Deny", self._effect(resp))

    def test_token_with_unknown_role_denies(self):
        token = jwt.encode(
            {
                "user_id": "u1",
                "role": "janitor",
                "exp": datetime.now(timezone.utc) + timedelta(hours=1),
            },
            jwt_service.SECRET_KEY,
            algorithm=jwt_service.ALGORITHM,
        )

        resp = self.mod.lambda_handler(self._event(token), None)

        self.assertEqual("Deny", self._effect(resp))

    def test_token_without_role_is_a_student(self):
        token = jwt.encode(
            {"user_id": "u1", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            jwt_service.SECRET_KEY,
            algorithm=jwt_service.ALGORITHM,
        )

        resp = self.mod.lambda_handler(self._event(token), None)

        self.assertEqual("Allow", self._effect(resp))
        self.assertEqual("STUDENT", resp["context"]["role"])


if __name__ == "__main__":
    unittest.main()
