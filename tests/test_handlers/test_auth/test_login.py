import importlib, json, os, unittest
from unittest.mock import MagicMock, patch
from hostel.utils.custom_exceptions import IncorrectCredentials, NotFoundException


class LoginHandlerTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.env = patch.dict(os.environ, {"TABLE_NAME": "test-table"}, clear=False)
        cls.env.start()
        cls.resource = patch("hostel_handlers.auth.login.resource")
        mock_resource = cls.resource.start()
        mock_resource.return_value.Table.return_value = MagicMock()
        import hostel_handlers.auth.login as login_module
        cls.mod = importlib.reload(login_module)

    @classmethod
    def tearDownClass(cls):
        cls.resource.stop()
        cls.env.stop()

    def setUp(self):
        self.p_login = patch.object(self.mod.service, "login")
        self.mock_login = self.p_login.start()

    def tearDown(self):
        self.p_login.stop()

    def _event(self):
        return {"body": json.dumps({"email": "asha@example.com", "password": "pw"})}

    def test_success(self):
        self.mock_login.return_value = "token"
        resp = self.mod.login_handler(self._event(), None)
        self.assertEqual(200, resp["statusCode"])

    def test_wrong_password_and_unknown_email_look_alike(self):
        messages = set()
        for error in (
            IncorrectCredentials("Invalid email or password"),
            NotFoundException("user", "asha@example.com", 404),
        ):
            self.mock_login.side_effect = error
            resp = self.mod.login_handler(self._event(), None)
            self.assertEqual(401, resp["statusCode"])
            messages.add(json.loads(resp["body"])["message"])
        self.assertEqual(1, len(messages))

    def test_invalid_email(self):
        resp = self.mod.login_handler({"body": json.dumps({"email": "nope", "password": "x"})}, None)
        self.assertEqual(400, resp["statusCode"])


if __name__ == "__main__":
    unittest.main()
