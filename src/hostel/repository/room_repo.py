from botocore.exceptions import ClientError
import logging
from typing import Optional

from hostel.models.rooms import Room, RoomStatus, RatingSummary
from hostel.repository.base import DynamoRepository
from hostel.repository.transactions import TransactionCancelled
from hostel.utils.custom_exceptions import (
    ConflictException,
    InvariantViolation,
    NotFoundException,
    RoomAlreadyExists,
)

logger = logging.getLogger(__name__)


class RoomRepository(DynamoRepository):
    @staticmethod
    def room_key(room_id: str) -> dict:
        return {"pk": f"ROOM#{room_id}", "sk": "DETAILS"}

    def add_room(self, room: Room):
        room_item = {
            **self.room_key(room.room_id),
            "room_number": room.room_number,
            "floor": room.floor,
            "capacity": room.capacity,
            "current_occupancy": room.current_occupancy,
            "room_status": room.status.value,
            "price": self._decimal(room.price),
            "amenities": list(room.amenities),
            "rating": self._decimal(room.rating),
            "total_reviews": room.total_reviews,
            "rating_summary": self._summary_item(room.rating_summary),
            "version": room.version,
            "review_version": room.review_version,
        }
        room_number_item = {
            "pk": f"ROOM_NUMBER#{room.room_number}",
            "sk": f"ROOM#{room.room_id}",
        }
        try:
            self.transact(
                [
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": room_item,
                            "ConditionExpression": "attribute_not_exists(pk)",
                        }
                    },
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": room_number_item,
                            "ConditionExpression": "attribute_not_exists(pk)",
                        }
                    },
                ]
            )
        except TransactionCancelled as err:
            if err.failed_at(1):
                raise RoomAlreadyExists(
                    f"Room number {room.room_number} already exists"
                ) from err
            if err.failed_at(0):
                raise RoomAlreadyExists(f"Room {room.room_id} already exists") from err
            raise

    def get_room_by_id(self, room_id: str, consistent: bool = True) -> Optional[Room]:
        try:
            response = self.table.get_item(
                Key=self.room_key(room_id), ConsistentRead=consistent
            )
        except ClientError as err:
            logger.error(f"Error retrieving room by id {room_id}: {err}")
            raise

        item = response.get("Item")
        if not item:
            return None
        return self._to_domain(item)

    def occupancy_update_item(
        self, before: Room, after: Room, details: Optional[dict] = None
    ) -> dict:
        """Transaction item persisting ``after``'s occupancy and status.

        ``details`` names extra room attributes (floor, price, amenities) to
        set in the same write. The write only applies if nobody else changed
        the room since ``before`` was read.
        """
        if after.current_occupancy < 0 or after.current_occupancy > after.capacity:
            raise InvariantViolation(
                f"Room {after.room_id} occupancy {after.current_occupancy} "
                f"outside 0..{after.capacity}"
            )
        names = {
            "#occupancy": "current_occupancy",
            "#capacity": "capacity",
            "#room_status": "room_status",
            "#version": "version",
        }
        values = {
            ":occupancy": after.current_occupancy,
            ":capacity": after.capacity,
            ":status": after.status.value,
            ":next_version": before.version + 1,
            ":expected": before.version,
        }
        assignments = [
            "#occupancy = :occupancy",
            "#capacity = :capacity",
            "#room_status = :status",
            "#version = :next_version",
        ]
        for key, value in (details or {}).items():
            names[f"#d_{key}"] = key
            values[f":d_{key}"] = self._decimal(value) if key == "price" else value
            assignments.append(f"#d_{key} = :d_{key}")

        return {
            "Update": {
                "TableName": self.table.name,
                "Key": self.room_key(before.room_id),
                "UpdateExpression": "SET " + ", ".join(assignments),
                "ConditionExpression": "attribute_exists(pk) AND #version = :expected",
                "ExpressionAttributeNames": names,
                "ExpressionAttributeValues": values,
            }
        }

    def review_version_item(self, room_id: str) -> dict:
        return {
            "Update": {
                "TableName": self.table.name,
                "Key": self.room_key(room_id),
                "UpdateExpression": "ADD #review_version :one",
                "ConditionExpression": "attribute_exists(pk)",
                "ExpressionAttributeNames": {"#review_version": "review_version"},
                "ExpressionAttributeValues": {":one": 1},
            }
        }

    def update_rating_summary(
        self, room_id: str, summary: RatingSummary, seen_review_version: int
    ) -> bool:
        """Write the rating projection; False if reviews changed meanwhile."""
        try:
            self.table.update_item(
                Key=self.room_key(room_id),
                UpdateExpression=(
                    "SET #rating = :rating, #total = :total, #summary = :summary"
                ),
                ConditionExpression=(
                    "attribute_exists(pk) AND #review_version = :seen"
                ),
                ExpressionAttributeNames={
                    "#rating": "rating",
                    "#total": "total_reviews",
                    "#summary": "rating_summary",
                    "#review_version": "review_version",
                },
                ExpressionAttributeValues={
                    ":rating": self._decimal(summary.average_rating),
                    ":total": summary.total_reviews,
                    ":summary": self._summary_item(summary),
                    ":seen": seen_review_version,
                },
            )
        except ClientError as err:
            if (
                err.response.get("Error", {}).get("Code")
                == "ConditionalCheckFailedException"
            ):
                return False
            logger.error(f"Error updating rating summary of room {room_id}: {err}")
            raise
        return True

    def delete_room(self, room: Room):
        try:
            self.transact(
                [
                    {
                        "Delete": {
                            "TableName": self.table.name,
                            "Key": self.room_key(room.room_id),
                            "ConditionExpression": "#occupancy = :zero",
                            "ExpressionAttributeNames": {
                                "#occupancy": "current_occupancy"
                            },
                            "ExpressionAttributeValues": {":zero": 0},
                        }
                    },
                    {
                        "Delete": {
                            "TableName": self.table.name,
                            "Key": {
                                "pk": f"ROOM_NUMBER#{room.room_number}",
                                "sk": f"ROOM#{room.room_id}",
                            },
                        }
                    },
                ]
            )
        except TransactionCancelled as err:
            if err.failed_at(0):
                raise ConflictException(
                    "Cannot delete room with current occupants"
                ) from err
            raise

    def _summary_item(self, summary: RatingSummary) -> dict:
        return {
            "average_rating": self._decimal(summary.average_rating),
            "total_reviews": summary.total_reviews,
            "rating_distribution": {
                str(star): count for star, count in summary.rating_distribution.items()
            },
            "category_averages": {
                name: self._decimal(avg)
                for name, avg in summary.category_averages.items()
            },
        }

    @staticmethod
    def _summary_from_item(item: dict) -> RatingSummary:
        if not item:
            return RatingSummary()
        distribution = {star: 0 for star in range(1, 6)}
        for star, count in item.get("rating_distribution", {}).items():
            distribution[int(star)] = int(count)
        return RatingSummary(
            average_rating=float(item.get("average_rating", 0)),
            total_reviews=int(item.get("total_reviews", 0)),
            rating_distribution=distribution,
            category_averages={
                name: float(avg)
                for name, avg in item.get("category_averages", {}).items()
            },
        )

    def _to_domain(self, item: dict) -> Room:
        floor = item.get("floor")
        return Room(
            room_id=item["pk"].split("#", 1)[1],
            room_number=item["room_number"],
            floor=int(floor) if floor is not None else None,
            capacity=int(item["capacity"]),
            current_occupancy=int(item.get("current_occupancy", 0)),
            status=RoomStatus(item["room_status"]),
            price=float(item["price"]),
            amenities=list(item.get("amenities", [])),
            rating=float(item.get("rating", 0)),
            total_reviews=int(item.get("total_reviews", 0)),
            rating_summary=self._summary_from_item(item.get("rating_summary")),
            version=int(item.get("version", 0)),
            review_version=int(item.get("review_version", 0)),
        )
