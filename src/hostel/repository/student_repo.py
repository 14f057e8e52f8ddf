from botocore.exceptions import ClientError
import logging
from dataclasses import asdict
from typing import Optional

from hostel.models.students import EmergencyContact, Student, StudentStatus
from hostel.repository.base import DynamoRepository
from hostel.repository.transactions import TransactionCancelled
from hostel.utils.custom_exceptions import ConflictException, NotFoundException
from hostel.utils.datetime_normaliser import from_iso_string, to_iso_string

logger = logging.getLogger(__name__)


class StudentRepository(DynamoRepository):
    @staticmethod
    def student_key(student_id: str) -> dict:
        return {"pk": f"STUDENT#{student_id}", "sk": "DETAILS"}

    def add_student(self, student: Student):
        student_item = {
            **self.student_key(student.student_id),
            "user_id": student.user_id,
            "name": student.name,
            "email": student.email,
            "phone": student.phone,
            "emergency_contact": asdict(student.emergency_contact),
            "student_status": student.status.value,
            "created_at": to_iso_string(student.created_at),
        }
        if student.room_id:
            student_item["room_id"] = student.room_id

        try:
            self.transact(
                [
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": student_item,
                            "ConditionExpression": "attribute_not_exists(pk)",
                        }
                    },
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": {
                                "pk": f"USER#{student.user_id}",
                                "sk": "STUDENT",
                                "student_id": student.student_id,
                            },
                            "ConditionExpression": "attribute_not_exists(pk)",
                        }
                    },
                ]
            )
        except TransactionCancelled as err:
            if err.failed_at(1):
                raise ConflictException(
                    f"user {student.user_id} already has a student profile"
                ) from err
            if err.failed_at(0):
                raise ConflictException(
                    f"student id {student.student_id} is already taken"
                ) from err
            raise

    def get_by_id(self, student_id: str, consistent: bool = True) -> Optional[Student]:
        try:
            response = self.table.get_item(
                Key=self.student_key(student_id), ConsistentRead=consistent
            )
        except ClientError as err:
            logger.error(f"Error retrieving student by id {student_id}: {err}")
            raise

        item = response.get("Item")
        if not item:
            return None
        return self._to_domain(item)

    def get_by_user_id(self, user_id: str) -> Optional[Student]:
        try:
            response = self.table.get_item(
                Key={"pk": f"USER#{user_id}", "sk": "STUDENT"}, ConsistentRead=True
            )
        except ClientError as err:
            logger.error(f"Error retrieving student of user {user_id}: {err}")
            raise

        item = response.get("Item")
        if not item:
            return None
        return self.get_by_id(item["student_id"])

    def assign_room_item(self, student_id: str, room_id: str) -> dict:
        return {
            "Update": {
                "TableName": self.table.name,
                "Key": self.student_key(student_id),
                "UpdateExpression": "SET #room_id = :room_id",
                "ConditionExpression": (
                    "attribute_exists(pk) AND attribute_not_exists(#room_id)"
                ),
                "ExpressionAttributeNames": {"#room_id": "room_id"},
                "ExpressionAttributeValues": {":room_id": room_id},
            }
        }

    def release_room_item(self, student_id: str, room_id: str) -> dict:
        return {
            "Update": {
                "TableName": self.table.name,
                "Key": self.student_key(student_id),
                "UpdateExpression": "REMOVE #room_id",
                "ConditionExpression": "#room_id = :room_id",
                "ExpressionAttributeNames": {"#room_id": "room_id"},
                "ExpressionAttributeValues": {":room_id": room_id},
            }
        }

    def delete_items(self, student: Student) -> list:
        """Transaction items removing ``student`` and its user marker.

        The student delete only applies while its room binding is still the
        one that was read, and nothing may hold the active-booking lock.
        """
        if student.room_id:
            room_condition = "#room_id = :room_id"
            values = {":room_id": student.room_id}
        else:
            room_condition = "attribute_not_exists(#room_id)"
            values = None

        student_delete = {
            "TableName": self.table.name,
            "Key": self.student_key(student.student_id),
            "ConditionExpression": f"attribute_exists(pk) AND {room_condition}",
            "ExpressionAttributeNames": {"#room_id": "room_id"},
        }
        if values:
            student_delete["ExpressionAttributeValues"] = values

        return [
            {"Delete": student_delete},
            {
                "Delete": {
                    "TableName": self.table.name,
                    "Key": {"pk": f"USER#{student.user_id}", "sk": "STUDENT"},
                }
            },
            {
                "ConditionCheck": {
                    "TableName": self.table.name,
                    "Key": {
                        "pk": f"STUDENT#{student.student_id}",
                        "sk": "ACTIVE_BOOKING",
                    },
                    "ConditionExpression": "attribute_not_exists(pk)",
                }
            },
        ]

    def update_contact_details(
        self, student_id: str, phone: Optional[str], contact: Optional[EmergencyContact]
    ):
        changes = {}
        if phone is not None:
            changes["phone"] = phone
        if contact is not None:
            changes["emergency_contact"] = asdict(contact)
        if not changes:
            return

        try:
            self.table.update_item(
                Key=self.student_key(student_id),
                UpdateExpression="SET "
                + ", ".join(f"#{key} = :{key}" for key in changes),
                ExpressionAttributeNames={f"#{key}": key for key in changes},
                ExpressionAttributeValues={
                    f":{key}": value for key, value in changes.items()
                },
                ConditionExpression="attribute_exists(pk)",
            )
        except ClientError as err:
            if (
                err.response.get("Error", {}).get("Code")
                == "ConditionalCheckFailedException"
            ):
                raise NotFoundException("student", student_id, 404)
            logger.error(f"Error updating student {student_id}: {err}")
            raise

    @staticmethod
    def _to_domain(item: dict) -> Student:
        contact = item.get("emergency_contact") or {}
        return Student(
            student_id=item["pk"].split("#", 1)[1],
            user_id=item["user_id"],
            name=item["name"],
            email=item["email"],
            phone=item.get("phone", ""),
            emergency_contact=EmergencyContact(
                name=contact.get("name", ""),
                phone=contact.get("phone", ""),
                relationship=contact.get("relationship", ""),
            ),
            room_id=item.get("room_id"),
            status=StudentStatus(item.get("student_status", "active")),
            created_at=from_iso_string(item["created_at"]),
        )
