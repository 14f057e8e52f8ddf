from botocore.exceptions import ClientError
import logging
from typing import List, Optional

from boto3.dynamodb.conditions import Key

from hostel.models.reviews import REVIEW_CATEGORIES, Review, ReviewResponse, ReviewStatus
from hostel.repository.base import DynamoRepository
from hostel.utils.datetime_normaliser import from_iso_string, to_iso_string

logger = logging.getLogger(__name__)


class ReviewRepository(DynamoRepository):
    @staticmethod
    def review_key(review_id: str) -> dict:
        return {"pk": f"REVIEW#{review_id}", "sk": "DETAILS"}

    @staticmethod
    def room_review_key(room_id: str, review_id: str) -> dict:
        return {"pk": f"ROOM#{room_id}", "sk": f"REVIEW#{review_id}"}

    @staticmethod
    def booking_review_key(booking_id: str) -> dict:
        return {"pk": f"BOOKING#{booking_id}", "sk": "REVIEW"}

    def _attributes(self, review: Review) -> dict:
        attributes = {
            "review_id": review.review_id,
            "student_id": review.student_id,
            "room_id": review.room_id,
            "booking_id": review.booking_id,
            "rating": review.rating,
            "title": review.title,
            "comment": review.comment,
            "categories": {
                name: int(review.categories.get(name, 0)) for name in REVIEW_CATEGORIES
            },
            "likes": review.likes,
            "dislikes": review.dislikes,
            "is_verified": review.is_verified,
            "review_status": review.status.value,
            "created_at": to_iso_string(review.created_at),
        }
        if review.response:
            attributes["response"] = {
                "admin_reply": review.response.admin_reply,
                "replied_by": review.response.replied_by,
                "replied_at": to_iso_string(review.response.replied_at),
            }
        return attributes

    def create_items(self, review: Review) -> list:
        """Items inserting ``review``; the last one enforces one review per
        booking."""
        attributes = self._attributes(review)
        return [
            {
                "Put": {
                    "TableName": self.table.name,
                    "Item": {**self.review_key(review.review_id), **attributes},
                    "ConditionExpression": "attribute_not_exists(pk)",
                }
            },
            {
                "Put": {
                    "TableName": self.table.name,
                    "Item": {
                        **self.room_review_key(review.room_id, review.review_id),
                        **attributes,
                    },
                }
            },
            {
                "Put": {
                    "TableName": self.table.name,
                    "Item": {
                        **self.booking_review_key(review.booking_id),
                        "review_id": review.review_id,
                    },
                    "ConditionExpression": "attribute_not_exists(pk)",
                }
            },
        ]

    def replace_items(self, before: Review, after: Review) -> list:
        attributes = self._attributes(after)
        return [
            {
                "Put": {
                    "TableName": self.table.name,
                    "Item": {**self.review_key(after.review_id), **attributes},
                    "ConditionExpression": (
                        "attribute_exists(pk) AND #review_status = :expected"
                    ),
                    "ExpressionAttributeNames": {"#review_status": "review_status"},
                    "ExpressionAttributeValues": {":expected": before.status.value},
                }
            },
            {
                "Put": {
                    "TableName": self.table.name,
                    "Item": {
                        **self.room_review_key(after.room_id, after.review_id),
                        **attributes,
                    },
                }
            },
        ]

    def delete_items(self, review: Review) -> list:
        return [
            {
                "Delete": {
                    "TableName": self.table.name,
                    "Key": self.review_key(review.review_id),
                    "ConditionExpression": "attribute_exists(pk)",
                }
            },
            {
                "Delete": {
                    "TableName": self.table.name,
                    "Key": self.room_review_key(review.room_id, review.review_id),
                }
            },
            {
                "Delete": {
                    "TableName": self.table.name,
                    "Key": self.booking_review_key(review.booking_id),
                }
            },
        ]

    def get_review_by_id(self, review_id: str) -> Optional[Review]:
        try:
            response = self.table.get_item(
                Key=self.review_key(review_id), ConsistentRead=True
            )
        except ClientError as err:
            logger.error(f"Error retrieving review {review_id}: {err}")
            raise

        item = response.get("Item")
        if not item:
            return None
        return self._to_domain(item)

    def get_room_reviews(self, room_id: str) -> List[Review]:
        query = {
            "KeyConditionExpression": Key("pk").eq(f"ROOM#{room_id}")
            & Key("sk").begins_with("REVIEW#"),
            "ConsistentRead": True,
        }
        reviews = []
        try:
            resp = self.table.query(**query)
            reviews.extend(self._to_domain(item) for item in resp.get("Items", []))
            while "LastEvaluatedKey" in resp:
                resp = self.table.query(
                    **query, ExclusiveStartKey=resp["LastEvaluatedKey"]
                )
                reviews.extend(self._to_domain(item) for item in resp.get("Items", []))
        except ClientError as err:
            logger.error(f"Error retrieving reviews of room {room_id}: {err}")
            raise
        return reviews

    @staticmethod
    def _to_domain(item: dict) -> Review:
        stored = item.get("categories") or {}
        response = item.get("response")
        return Review(
            review_id=item["review_id"],
            student_id=item["student_id"],
            room_id=item["room_id"],
            booking_id=item["booking_id"],
            rating=int(item["rating"]),
            title=item["title"],
            comment=item["comment"],
            categories={name: int(stored.get(name, 0)) for name in REVIEW_CATEGORIES},
            likes=int(item.get("likes", 0)),
            dislikes=int(item.get("dislikes", 0)),
            is_verified=bool(item.get("is_verified", False)),
            status=ReviewStatus(item["review_status"]),
            response=ReviewResponse(
                admin_reply=response["admin_reply"],
                replied_by=response.get("replied_by"),
                replied_at=from_iso_string(response["replied_at"]),
            )
            if response
            else None,
            created_at=from_iso_string(item["created_at"]),
        )
