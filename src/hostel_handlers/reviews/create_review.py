import os
import logging
from dataclasses import asdict
from boto3 import resource
from botocore.exceptions import ClientError
from pydantic import ValidationError

from hostel.models.users import UserRole
from hostel.repository.booking_repo import BookingRepository
from hostel.repository.review_repo import ReviewRepository
from hostel.repository.room_repo import RoomRepository
from hostel.repository.student_repo import StudentRepository
from hostel.schemas.reviews import ReviewRequest
from hostel.services.rating_service import RatingService
from hostel.services.review_service import ReviewService
from hostel.utils.constants import AWS_REGION
from hostel.utils.custom_exceptions import HostelError
from hostel.utils.custom_response import format_validation_error, send_custom_response
from hostel.utils.request_context import get_caller

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

room_repo = RoomRepository(table)
review_repo = ReviewRepository(table)
student_repo = StudentRepository(table)

review_service = ReviewService(
    review_repo=review_repo,
    booking_repo=BookingRepository(table),
    room_repo=room_repo,
    rating_service=RatingService(room_repo, review_repo),
)

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def create_review(event, context):
    caller = get_caller(event)
    if caller is None:
        return send_custom_response(401, "Unauthorized")
    if caller.role != UserRole.STUDENT:
        return send_custom_response(403, "Only students can review rooms")

    if not event.get("body"):
        return send_custom_response(
            400, "Student, room, booking, rating, title, and comment are required"
        )

    try:
        request_body = ReviewRequest.model_validate_json(event["body"])
    except ValidationError as e:
        return send_custom_response(400, format_validation_error(e))

    try:
        own = student_repo.get_by_user_id(caller.user_id)
        if own is None or own.student_id != request_body.student_id:
            return send_custom_response(403, "Students can only review their own stays")

        review = review_service.create_review(request_body)
    except HostelError as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError as err:
        logger.error(f"Error creating review: {err}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error while creating review")
        return send_custom_response(500, "Internal server error")

    return send_custom_response(201, "Review submitted successfully", asdict(review))
