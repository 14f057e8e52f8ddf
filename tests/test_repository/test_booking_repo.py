import unittest
from unittest.mock import MagicMock
from datetime import date, datetime, timezone
from decimal import Decimal

from hostel.models.bookings import Booking, BookingStatus
from hostel.repository.booking_repo import BookingRepository


class TestBookingRepository(unittest.TestCase):

    def setUp(self):
        self.table = MagicMock()
        self.table.name = "hostel"
        self.client = MagicMock()
        self.repo = BookingRepository(self.table, self.client)

        self.booking = Booking(
            booking_id="b1",
            student_id="STU1",
            room_id="r1",
            check_in_date=date(2026, 11, 1),
            check_out_date=date(2027, 1, 1),
            duration=3,
            total_amount=15000.0,
            created_at=datetime(2026, 10, 18, tzinfo=timezone.utc),
        )

    def test_create_items(self):
        items = self.repo.create_items(self.booking)

        self.assertEqual(3, len(items))

        booking_put = items[0]["Put"]
        self.assertEqual("BOOKING#b1", booking_put["Item"]["pk"])
        self.assertEqual("confirmed", booking_put["Item"]["booking_status"])
        self.assertEqual("2026-11-01", booking_put["Item"]["check_in_date"])
        self.assertEqual(Decimal("15000.0"), booking_put["Item"]["total_amount"])

        index_put = items[1]["Put"]["Item"]
        self.assertEqual("STUDENT#STU1", index_put["pk"])
        self.assertEqual("BOOKING#b1", index_put["sk"])

        lock = items[2]["Put"]
        self.assertEqual("ACTIVE_BOOKING", lock["Item"]["sk"])
        self.assertEqual("b1", lock["Item"]["booking_id"])
        self.assertEqual("attribute_not_exists(pk)", lock["ConditionExpression"])

    def test_status_update_items_non_terminal(self):
        items = self.repo.status_update_items(self.booking, BookingStatus.CHECKED_IN)

        self.assertEqual(2, len(items))
        values = items[0]["Update"]["ExpressionAttributeValues"]
        self.assertEqual("checked-in", values[":new_status"])
        self.assertEqual("confirmed", values[":from_status"])

    def test_status_update_items_terminal_releases_lock(self):
        items = self.repo.status_update_items(self.booking, BookingStatus.CANCELLED)

        self.assertEqual(3, len(items))
        lock = items[2]["Delete"]
        self.assertEqual({"pk": "STUDENT#STU1", "sk": "ACTIVE_BOOKING"}, lock["Key"])
        self.assertEqual("b1", lock["ExpressionAttributeValues"][":booking_id"])

    def test_delete_items_active_booking_releases_lock(self):
        self.assertEqual(3, len(self.repo.delete_items(self.booking)))

    def test_delete_items_terminal_booking(self):
        self.booking.status = BookingStatus.CHECKED_OUT

        self.assertEqual(2, len(self.repo.delete_items(self.booking)))

    def test_get_booking_by_id_round_trips_item(self):
        item = self.repo.create_items(self.booking)[0]["Put"]["Item"]
        self.table.get_item.return_value = {"Item": item}

        booking = self.repo.get_booking_by_id("b1")

        self.assertEqual(self.booking, booking)

    def test_get_active_booking_id(self):
        self.table.get_item.return_value = {"Item": {"booking_id": "b1"}}

        self.assertEqual("b1", self.repo.get_active_booking_id("STU1"))

        self.table.get_item.return_value = {}
        self.assertIsNone(self.repo.get_active_booking_id("STU1"))

    def test_get_student_bookings_follows_pages(self):
        item = self.repo.create_items(self.booking)[1]["Put"]["Item"]
        self.table.query.side_effect = [
            {"Items": [item], "LastEvaluatedKey": {"pk": "x"}},
            {"Items": [item]},
        ]

        bookings = self.repo.get_student_bookings("STU1")

        self.assertEqual(2, len(bookings))
        self.assertEqual(2, self.table.query.call_count)


if __name__ == "__main__":
    unittest.main()
