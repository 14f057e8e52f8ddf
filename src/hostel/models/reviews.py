from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


class ReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


REVIEW_CATEGORIES = (
    "cleanliness",
    "comfort",
    "location",
    "facilities",
    "staff",
    "value_for_money",
)


@dataclass
class ReviewResponse:
    admin_reply: str
    replied_by: Optional[str] = None
    replied_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Review:
    review_id: str
    student_id: str
    room_id: str
    booking_id: str
    rating: int
    title: str
    comment: str
    # 0 means the category was not rated
    categories: dict = field(default_factory=lambda: dict.fromkeys(REVIEW_CATEGORIES, 0))
    likes: int = 0
    dislikes: int = 0
    is_verified: bool = False
    status: ReviewStatus = ReviewStatus.PENDING
    response: Optional[ReviewResponse] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
