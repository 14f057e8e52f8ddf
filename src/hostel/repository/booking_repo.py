from botocore.exceptions import ClientError
import logging
from datetime import date
from typing import List, Optional

from boto3.dynamodb.conditions import Key

from hostel.models.bookings import Booking, BookingStatus
from hostel.repository.base import DynamoRepository
from hostel.utils.datetime_normaliser import from_iso_string, to_iso_string

logger = logging.getLogger(__name__)


class BookingRepository(DynamoRepository):
    @staticmethod
    def booking_key(booking_id: str) -> dict:
        return {"pk": f"BOOKING#{booking_id}", "sk": "DETAILS"}

    @staticmethod
    def student_booking_key(student_id: str, booking_id: str) -> dict:
        return {"pk": f"STUDENT#{student_id}", "sk": f"BOOKING#{booking_id}"}

    @staticmethod
    def active_booking_key(student_id: str) -> dict:
        return {"pk": f"STUDENT#{student_id}", "sk": "ACTIVE_BOOKING"}

    def _attributes(self, booking: Booking) -> dict:
        return {
            "booking_id": booking.booking_id,
            "student_id": booking.student_id,
            "room_id": booking.room_id,
            "check_in_date": booking.check_in_date.isoformat(),
            "check_out_date": booking.check_out_date.isoformat(),
            "duration": booking.duration,
            "total_amount": self._decimal(booking.total_amount),
            "paid_amount": self._decimal(booking.paid_amount),
            "booking_status": booking.status.value,
            "created_at": to_iso_string(booking.created_at),
        }

    def create_items(self, booking: Booking) -> list:
        """Items inserting ``booking``; the last one fails if the student
        already holds an active booking."""
        attributes = self._attributes(booking)
        return [
            {
                "Put": {
                    "TableName": self.table.name,
                    "Item": {**self.booking_key(booking.booking_id), **attributes},
                    "ConditionExpression": "attribute_not_exists(pk)",
                }
            },
            {
                "Put": {
                    "TableName": self.table.name,
                    "Item": {
                        **self.student_booking_key(
                            booking.student_id, booking.booking_id
                        ),
                        **attributes,
                    },
                }
            },
            {
                "Put": {
                    "TableName": self.table.name,
                    "Item": {
                        **self.active_booking_key(booking.student_id),
                        "booking_id": booking.booking_id,
                    },
                    "ConditionExpression": "attribute_not_exists(pk)",
                }
            },
        ]

    def status_update_items(self, booking: Booking, status: BookingStatus) -> list:
        """Items moving ``booking`` out of its current status.

        The first item only applies while the stored status is still the one
        ``booking`` was read with.
        """
        items = []
        for key, condition in (
            (
                self.booking_key(booking.booking_id),
                "#booking_status = :from_status",
            ),
            (
                self.student_booking_key(booking.student_id, booking.booking_id),
                "attribute_exists(pk)",
            ),
        ):
            update = {
                "TableName": self.table.name,
                "Key": key,
                "UpdateExpression": "SET #booking_status = :new_status",
                "ConditionExpression": condition,
                "ExpressionAttributeNames": {"#booking_status": "booking_status"},
                "ExpressionAttributeValues": {":new_status": status.value},
            }
            if ":from_status" in condition:
                update["ExpressionAttributeValues"][":from_status"] = (
                    booking.status.value
                )
            items.append({"Update": update})

        if status.is_terminal:
            items.append(self.release_lock_item(booking))
        return items

    def release_lock_item(self, booking: Booking) -> dict:
        return {
            "Delete": {
                "TableName": self.table.name,
                "Key": self.active_booking_key(booking.student_id),
                "ConditionExpression": "#booking_id = :booking_id",
                "ExpressionAttributeNames": {"#booking_id": "booking_id"},
                "ExpressionAttributeValues": {":booking_id": booking.booking_id},
            }
        }

    def delete_items(self, booking: Booking) -> list:
        items = [
            {
                "Delete": {
                    "TableName": self.table.name,
                    "Key": self.booking_key(booking.booking_id),
                    "ConditionExpression": "#booking_status = :from_status",
                    "ExpressionAttributeNames": {"#booking_status": "booking_status"},
                    "ExpressionAttributeValues": {
                        ":from_status": booking.status.value
                    },
                }
            },
            {
                "Delete": {
                    "TableName": self.table.name,
                    "Key": self.student_booking_key(
                        booking.student_id, booking.booking_id
                    ),
                }
            },
        ]
        if booking.status.is_active:
            items.append(self.release_lock_item(booking))
        return items

    def get_booking_by_id(
        self, booking_id: str, consistent: bool = True
    ) -> Optional[Booking]:
        try:
            response = self.table.get_item(
                Key=self.booking_key(booking_id), ConsistentRead=consistent
            )
        except ClientError as err:
            logger.error(f"Error retrieving booking {booking_id}: {err}")
            raise

        item = response.get("Item")
        if not item:
            return None
        return self._to_domain(item)

    def get_active_booking_id(self, student_id: str) -> Optional[str]:
        try:
            response = self.table.get_item(
                Key=self.active_booking_key(student_id), ConsistentRead=True
            )
        except ClientError as err:
            logger.error(f"Error retrieving active booking of {student_id}: {err}")
            raise

        item = response.get("Item")
        return item["booking_id"] if item else None

    def get_student_bookings(self, student_id: str) -> List[Booking]:
        query = {
            "KeyConditionExpression": Key("pk").eq(f"STUDENT#{student_id}")
            & Key("sk").begins_with("BOOKING#")
        }
        bookings = []
        try:
            resp = self.table.query(**query)
            bookings.extend(self._to_domain(item) for item in resp.get("Items", []))
            while "LastEvaluatedKey" in resp:
                resp = self.table.query(
                    **query, ExclusiveStartKey=resp["LastEvaluatedKey"]
                )
                bookings.extend(
                    self._to_domain(item) for item in resp.get("Items", [])
                )
        except ClientError as err:
            logger.error(f"Error retrieving student {student_id} bookings: {err}")
            raise
        return bookings

    @staticmethod
    def _to_domain(item: dict) -> Booking:
        return Booking(
            booking_id=item["booking_id"],
            student_id=item["student_id"],
            room_id=item["room_id"],
            check_in_date=date.fromisoformat(item["check_in_date"]),
            check_out_date=date.fromisoformat(item["check_out_date"]),
            duration=int(item["duration"]),
            total_amount=float(item["total_amount"]),
            paid_amount=float(item.get("paid_amount", 0)),
            status=BookingStatus(item["booking_status"]),
            created_at=from_iso_string(item["created_at"]),
        )
