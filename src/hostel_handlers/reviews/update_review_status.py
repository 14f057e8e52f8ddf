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
from hostel.schemas.reviews import ReviewStatusRequest
from hostel.services.rating_service import RatingService
from hostel.services.review_service import ReviewService
from hostel.utils.constants import AWS_REGION
from hostel.utils.custom_exceptions import HostelError
from hostel.utils.custom_response import send_custom_response
from hostel.utils.request_context import get_caller, path_param

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

room_repo = RoomRepository(table)
review_repo = ReviewRepository(table)

review_service = ReviewService(
    review_repo=review_repo,
    booking_repo=BookingRepository(table),
    room_repo=room_repo,
    rating_service=RatingService(room_repo, review_repo),
)

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def update_review_status(event, context):
    caller = get_caller(event)
    if caller is None:
        return send_custom_response(401, "Unauthorized")
    if caller.role != UserRole.ADMIN:
        return send_custom_response(403, "Only admins can moderate reviews")

    review_id = path_param(event, "review_id")
    if not review_id:
        return send_custom_response(400, "review_id is required in the path")

    try:
        request_body = ReviewStatusRequest.model_validate_json(event.get("body") or "{}")
    except ValidationError:
        return send_custom_response(
            400, "Invalid status. Use: pending, approved, or rejected"
        )

    try:
        review = review_service.set_review_status(
            review_id,
            request_body.status,
            admin_reply=request_body.admin_reply,
            replied_by=caller.user_id,
        )
    except HostelError as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError as err:
        logger.error(f"Error moderating review {review_id}: {err}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error while moderating review")
        return send_custom_response(500, "Internal server error")

    return send_custom_response(
        200, f"Review {review.status.value} successfully", asdict(review)
    )
