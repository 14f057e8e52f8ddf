import importlib
import json
import os
import unittest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError

from hostel.utils.custom_exceptions import NotFoundException


class DeleteBookingTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.env = patch.dict(os.environ, {"TABLE_NAME": "test-table"}, clear=False)
        cls.env.start()
        cls.resource = patch("hostel_handlers.bookings.delete_booking.resource")
        mock_res = cls.resource.start()
        mock_res.return_value.Table.return_value = MagicMock()
        import hostel_handlers.bookings.delete_booking as mod
        cls.mod = importlib.reload(mod)

    @classmethod
    def tearDownClass(cls):
        cls.resource.stop()
        cls.env.stop()

    def setUp(self):
        self.p_delete = patch.object(self.mod.booking_service, "delete_booking")
        self.mock_delete = self.p_delete.start()

    def tearDown(self):
        self.p_delete.stop()

    def _event(self, role="ADMIN", booking_id="b1"):
        return {
            "pathParameters": {"booking_id": booking_id} if booking_id else None,
            "requestContext": {"authorizer": {"user_id": "a1", "role": role}},
        }

    def test_warden_deletes(self):
        resp = self.mod.delete_booking(self._event(role="WARDEN"), None)
        self.assertEqual(200, resp["statusCode"])
        self.mock_delete.assert_called_once_with("b1")

    def test_student_forbidden(self):
        resp = self.mod.delete_booking(self._event(role="STUDENT"), None)
        self.assertEqual(403, resp["statusCode"])
        self.mock_delete.assert_not_called()

    def test_missing_booking_id(self):
        resp = self.mod.delete_booking(self._event(booking_id=None), None)
        self.assertEqual(400, resp["statusCode"])

    def test_unknown_booking(self):
        self.mock_delete.side_effect = NotFoundException("booking", "b1", 404)
        resp = self.mod.delete_booking(self._event(), None)
        self.assertEqual(404, resp["statusCode"])
        self.assertEqual(
            "booking 'b1' not found", json.loads(resp["body"])["message"]
        )

    def test_store_failure(self):
        self.mock_delete.side_effect = ClientError(
            {"Error": {"Code": "InternalServerError"}}, "TransactWriteItems"
        )
        resp = self.mod.delete_booking(self._event(), None)
        self.assertEqual(500, resp["statusCode"])


if __name__ == "__main__":
    unittest.main()
