import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from hostel.models.reviews import REVIEW_CATEGORIES, Review, ReviewStatus
from hostel.models.rooms import RatingSummary
from hostel.repository.review_repo import ReviewRepository
from hostel.repository.room_repo import RoomRepository
from hostel.utils.constants import MAX_TRANSACTION_ATTEMPTS
from hostel.utils.custom_exceptions import ConflictException, NotFoundException

logger = logging.getLogger(__name__)


def _round1(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def summarize(reviews: Iterable[Review]) -> RatingSummary:
    approved = [r for r in reviews if r.status == ReviewStatus.APPROVED]
    if not approved:
        return RatingSummary()

    distribution = {star: 0 for star in range(1, 6)}
    for review in approved:
        distribution[review.rating] += 1

    category_averages = {}
    for name in REVIEW_CATEGORIES:
        scores = [r.categories.get(name, 0) for r in approved]
        scores = [score for score in scores if score > 0]
        if scores:
            category_averages[name] = _round1(sum(scores) / len(scores))

    return RatingSummary(
        average_rating=_round1(sum(r.rating for r in approved) / len(approved)),
        total_reviews=len(approved),
        rating_distribution=distribution,
        category_averages=category_averages,
    )


class RatingService:
    def __init__(
        self,
        room_repo: RoomRepository,
        review_repo: ReviewRepository,
        max_attempts: int = MAX_TRANSACTION_ATTEMPTS,
    ):
        self.room_repo = room_repo
        self.review_repo = review_repo
        self.max_attempts = max_attempts

    def recompute_room_rating(self, room_id: str) -> RatingSummary:
        for attempt in range(1, self.max_attempts + 1):
            room = self.room_repo.get_room_by_id(room_id)
            if room is None:
                raise NotFoundException("room", room_id, 404)

            summary = summarize(self.review_repo.get_room_reviews(room_id))
            if self.room_repo.update_rating_summary(
                room_id, summary, room.review_version
            ):
                logger.info(
                    f"Room {room_id} rating {summary.average_rating} "
                    f"from {summary.total_reviews} reviews"
                )
                return summary

            logger.warning(
                f"Reviews of room {room_id} changed during recompute "
                f"(attempt {attempt}/{self.max_attempts})"
            )

        raise ConflictException(
            f"Rating of room {room_id} could not be recomputed, try again"
        )
