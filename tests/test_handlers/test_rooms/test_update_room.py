import importlib
import json
import os
import unittest
from unittest.mock import MagicMock, patch

from hostel.models.rooms import Room, RoomStatus
from hostel.schemas.rooms import RoomUpdateRequest
from hostel.utils.custom_exceptions import ConflictException, InvalidRequest


class UpdateRoomTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.env = patch.dict(os.environ, {"TABLE_NAME": "test-table"}, clear=False)
        cls.env.start()
        cls.resource = patch("hostel_handlers.rooms.update_room.resource")
        mock_res = cls.resource.start()
        mock_res.return_value.Table.return_value = MagicMock()
        import hostel_handlers.rooms.update_room as mod
        cls.mod = importlib.reload(mod)

    @classmethod
    def tearDownClass(cls):
        cls.resource.stop()
        cls.env.stop()

    def setUp(self):
        self.p_update = patch.object(self.mod.room_service, "update_room")
        self.mock_update = self.p_update.start()
        self.mock_update.return_value = Room(
            room_id="r1",
            room_number="101",
            capacity=3,
            price=6000.0,
            current_occupancy=2,
            status=RoomStatus.AVAILABLE,
        )

    def tearDown(self):
        self.p_update.stop()

    def _event(self, body='{"price": 6000, "capacity": 3}', role="WARDEN"):
        return {
            "body": body,
            "pathParameters": {"room_id": "r1"},
            "requestContext": {"authorizer": {"user_id": "w1", "role": role}},
        }

    def test_success(self):
        resp = self.mod.update_room(self._event(), None)
        self.assertEqual(200, resp["statusCode"])
        self.mock_update.assert_called_once_with(
            "r1", RoomUpdateRequest(price=6000, capacity=3)
        )
        data = json.loads(resp["body"])["data"]
        self.assertEqual(3, data["capacity"])
        self.assertEqual("available", data["status"])

    def test_capacity_below_occupancy(self):
        self.mock_update.side_effect = InvalidRequest(
            "Capacity 1 is below current occupancy 2"
        )
        resp = self.mod.update_room(self._event(body='{"capacity": 1}'), None)
        self.assertEqual(400, resp["statusCode"])

    def test_contention(self):
        self.mock_update.side_effect = ConflictException(
            "Room r1 is being updated by another request, try again"
        )
        resp = self.mod.update_room(self._event(), None)
        self.assertEqual(409, resp["statusCode"])

    def test_invalid_body(self):
        resp = self.mod.update_room(self._event(body='{"capacity": 0}'), None)
        self.assertEqual(400, resp["statusCode"])
        self.mock_update.assert_not_called()

    def test_missing_body(self):
        resp = self.mod.update_room(self._event(body=None), None)
        self.assertEqual(400, resp["statusCode"])

    def test_student_forbidden(self):
        resp = self.mod.update_room(self._event(role="STUDENT"), None)
        self.assertEqual(403, resp["statusCode"])


if __name__ == "__main__":
    unittest.main()
