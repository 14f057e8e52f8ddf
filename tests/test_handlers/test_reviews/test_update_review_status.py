import importlib
import json
import os
import unittest
from unittest.mock import MagicMock, patch

from hostel.models.reviews import Review, ReviewStatus
from hostel.utils.custom_exceptions import ConflictException


class UpdateReviewStatusTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.env = patch.dict(os.environ, {"TABLE_NAME": "test-table"}, clear=False)
        cls.env.start()
        cls.resource = patch("hostel_handlers.reviews.update_review_status.resource")
        mock_res = cls.resource.start()
        mock_res.return_value.Table.return_value = MagicMock()
        import hostel_handlers.reviews.update_review_status as mod
        cls.mod = importlib.reload(mod)

    @classmethod
    def tearDownClass(cls):
        cls.resource.stop()
        cls.env.stop()

    def setUp(self):
        self.p_status = patch.object(self.mod.review_service, "set_review_status")
        self.mock_status = self.p_status.start()
        self.mock_status.return_value = Review(
            review_id="rv1",
            student_id="STU1",
            room_id="r1",
            booking_id="b1",
            rating=2,
            title="Noisy",
            comment="Thin walls",
            status=ReviewStatus.REJECTED,
        )

    def tearDown(self):
        self.p_status.stop()

    def _event(self, body='{"status": "rejected"}', role="ADMIN"):
        return {
            "body": body,
            "pathParameters": {"review_id": "rv1"},
            "requestContext": {"authorizer": {"user_id": "a1", "role": role}},
        }

    def test_admin_rejects(self):
        resp = self.mod.update_review_status(self._event(), None)
        self.assertEqual(200, resp["statusCode"])
        self.assertEqual(
            "Review rejected successfully", json.loads(resp["body"])["message"]
        )
        self.mock_status.assert_called_once_with(
            "rv1", ReviewStatus.REJECTED, admin_reply=None, replied_by="a1"
        )

    def test_reply_is_passed_through(self):
        body = json.dumps({"status": "approved", "admin_reply": "Thanks"})
        self.mod.update_review_status(self._event(body=body), None)
        _, kwargs = self.mock_status.call_args
        self.assertEqual("Thanks", kwargs["admin_reply"])

    def test_unknown_status(self):
        event = self._event(body='{"status": "hidden"}')
        resp = self.mod.update_review_status(event, None)
        self.assertEqual(400, resp["statusCode"])
        self.mock_status.assert_not_called()

    def test_warden_forbidden(self):
        resp = self.mod.update_review_status(self._event(role="WARDEN"), None)
        self.assertEqual(403, resp["statusCode"])

    def test_concurrent_change(self):
        self.mock_status.side_effect = ConflictException(
            "Review rv1 was changed by another request"
        )
        resp = self.mod.update_review_status(self._event(), None)
        self.assertEqual(409, resp["statusCode"])


if __name__ == "__main__":
    unittest.main()
