import logging
from dataclasses import replace
from typing import Optional
from uuid import uuid4

from hostel.models.bookings import BookingStatus
from hostel.models.reviews import Review, ReviewResponse, ReviewStatus
from hostel.repository.booking_repo import BookingRepository
from hostel.repository.review_repo import ReviewRepository
from hostel.repository.room_repo import RoomRepository
from hostel.repository.transactions import TransactionCancelled
from hostel.schemas.reviews import ReviewRequest, ReviewUpdateRequest
from hostel.services.rating_service import RatingService
from hostel.utils.constants import MAX_TRANSACTION_ATTEMPTS, REVIEW_AUTO_APPROVE
from hostel.utils.custom_exceptions import (
    ConflictException,
    NotFoundException,
    ReviewNotAllowed,
)

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(
        self,
        review_repo: ReviewRepository,
        booking_repo: BookingRepository,
        room_repo: RoomRepository,
        rating_service: RatingService,
        auto_approve: bool = REVIEW_AUTO_APPROVE,
        max_attempts: int = MAX_TRANSACTION_ATTEMPTS,
    ):
        self.review_repo = review_repo
        self.booking_repo = booking_repo
        self.room_repo = room_repo
        self.rating_service = rating_service
        self.auto_approve = auto_approve
        self.max_attempts = max_attempts

    def get_review(self, review_id: str) -> Review:
        review = self.review_repo.get_review_by_id(review_id)
        if review is None:
            raise NotFoundException("review", review_id, 404)
        return review

    def create_review(self, req: ReviewRequest) -> Review:
        booking = self.booking_repo.get_booking_by_id(req.booking_id)
        if booking is None:
            raise NotFoundException("booking", req.booking_id, 404)
        if (
            booking.student_id != req.student_id
            or booking.room_id != req.room_id
            or booking.status != BookingStatus.CHECKED_OUT
        ):
            raise ReviewNotAllowed(
                "Cannot review this room. Booking not found or stay not completed."
            )

        review = Review(
            review_id=str(uuid4()),
            student_id=req.student_id,
            room_id=req.room_id,
            booking_id=req.booking_id,
            rating=req.rating,
            title=req.title,
            comment=req.comment,
            categories=req.categories.as_dict(),
            is_verified=True,
            status=ReviewStatus.APPROVED if self.auto_approve else ReviewStatus.PENDING,
        )

        # items: review, room index, booking marker, room review_version
        try:
            self._commit(self.review_repo.create_items(review), review.room_id)
        except TransactionCancelled as err:
            if err.failed_at(2) or err.failed_at(0):
                raise ConflictException("You have already reviewed this booking") from err
            raise

        logger.info(f"Review {review.review_id} created as {review.status.value}")
        self._refresh_rating(review.room_id, None, review)
        return review

    def update_review(self, review_id: str, req: ReviewUpdateRequest) -> Review:
        before = self.get_review(review_id)
        after = replace(
            before,
            rating=req.rating if req.rating is not None else before.rating,
            title=req.title or before.title,
            comment=req.comment or before.comment,
            categories=req.categories.as_dict()
            if req.categories is not None
            else before.categories,
        )
        self._replace(before, after)
        self._refresh_rating(after.room_id, before, after)
        return after

    def set_review_status(
        self,
        review_id: str,
        status: ReviewStatus,
        admin_reply: Optional[str] = None,
        replied_by: Optional[str] = None,
    ) -> Review:
        before = self.get_review(review_id)
        response = before.response
        if admin_reply and admin_reply.strip():
            response = ReviewResponse(
                admin_reply=admin_reply.strip(), replied_by=replied_by
            )
        after = replace(before, status=status, response=response)

        self._replace(before, after)
        logger.info(
            f"Review {review_id} moved from {before.status.value} to {status.value}"
        )
        self._refresh_rating(after.room_id, before, after)
        return after

    def delete_review(self, review_id: str):
        review = self.get_review(review_id)
        try:
            self._commit(self.review_repo.delete_items(review), review.room_id)
        except TransactionCancelled as err:
            if err.failed_at(0):
                raise NotFoundException("review", review_id, 404) from err
            raise
        self._refresh_rating(review.room_id, review, None)

    def _replace(self, before: Review, after: Review):
        try:
            self._commit(self.review_repo.replace_items(before, after), after.room_id)
        except TransactionCancelled as err:
            if err.failed_at(0):
                raise ConflictException(
                    f"Review {after.review_id} was changed by another request"
                ) from err
            raise

    def _commit(self, items: list, room_id: str):
        """Write review items and bump the room's review_version atomically."""
        items = items + [self.room_repo.review_version_item(room_id)]
        for attempt in range(1, self.max_attempts + 1):
            try:
                self.room_repo.transact(items)
                return
            except TransactionCancelled as err:
                if err.failed_at(len(items) - 1):
                    raise NotFoundException("room", room_id, 404) from err
                if not err.contended:
                    raise
                logger.warning(
                    f"Review write for room {room_id} contended "
                    f"(attempt {attempt}/{self.max_attempts})"
                )
        raise ConflictException(
            f"Reviews of room {room_id} are being updated by another request, try again"
        )

    def _refresh_rating(
        self, room_id: str, before: Optional[Review], after: Optional[Review]
    ):
        was_counted = before is not None and before.status == ReviewStatus.APPROVED
        is_counted = after is not None and after.status == ReviewStatus.APPROVED
        if not (was_counted or is_counted):
            return
        try:
            self.rating_service.recompute_room_rating(room_id)
        except ConflictException as err:
            # review write already committed; the next recompute catches up
            logger.warning(f"Rating of room {room_id} left stale: {err}")
