import importlib
import json
import os
import unittest
from datetime import date
from unittest.mock import MagicMock, patch

from hostel.models.bookings import Booking, BookingStatus
from hostel.utils.custom_exceptions import InvalidStateTransition, NotFoundException


class UpdateBookingStatusTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.env = patch.dict(os.environ, {"TABLE_NAME": "test-table"}, clear=False)
        cls.env.start()
        cls.resource = patch("hostel_handlers.bookings.update_booking_status.resource")
        mock_res = cls.resource.start()
        mock_res.return_value.Table.return_value = MagicMock()
        import hostel_handlers.bookings.update_booking_status as mod
        cls.mod = importlib.reload(mod)

    @classmethod
    def tearDownClass(cls):
        cls.resource.stop()
        cls.env.stop()

    def setUp(self):
        self.p_transition = patch.object(self.mod.booking_service, "transition")
        self.mock_transition = self.p_transition.start()
        self.mock_transition.return_value = Booking(
            booking_id="b1",
            student_id="STU1",
            room_id="r1",
            check_in_date=date(2026, 11, 1),
            check_out_date=date(2027, 1, 1),
            duration=3,
            total_amount=15000.0,
            status=BookingStatus.CHECKED_IN,
        )

    def tearDown(self):
        self.p_transition.stop()

    def _event(self, status="checked-in", role="WARDEN", booking_id="b1"):
        return {
            "body": json.dumps({"status": status}),
            "pathParameters": {"booking_id": booking_id} if booking_id else None,
            "requestContext": {"authorizer": {"user_id": "w1", "role": role}},
        }

    def test_student_cannot_change_status(self):
        resp = self.mod.update_booking_status(self._event(role="STUDENT"), None)
        self.assertEqual(403, resp["statusCode"])

    def test_missing_booking_id(self):
        resp = self.mod.update_booking_status(self._event(booking_id=None), None)
        self.assertEqual(400, resp["statusCode"])

    def test_unknown_status_value(self):
        resp = self.mod.update_booking_status(self._event(status="archived"), None)
        self.assertEqual(400, resp["statusCode"])
        self.mock_transition.assert_not_called()

    def test_status_is_case_insensitive(self):
        resp = self.mod.update_booking_status(self._event(status="Checked-In"), None)
        self.assertEqual(200, resp["statusCode"])
        self.mock_transition.assert_called_once_with("b1", BookingStatus.CHECKED_IN)

    def test_illegal_transition_returns_409(self):
        self.mock_transition.side_effect = InvalidStateTransition(
            "Booking is already checked-out"
        )
        resp = self.mod.update_booking_status(self._event(status="checked-out"), None)
        self.assertEqual(409, resp["statusCode"])

    def test_unknown_booking_returns_404(self):
        self.mock_transition.side_effect = NotFoundException("booking", "b1", 404)
        resp = self.mod.update_booking_status(self._event(), None)
        self.assertEqual(404, resp["statusCode"])
        self.assertEqual("booking 'b1' not found", json.loads(resp["body"])["message"])


if __name__ == "__main__":
    unittest.main()
