from enum import Enum
from typing import Optional
from dataclasses import dataclass, field


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


@dataclass
class RatingSummary:
    average_rating: float = 0.0
    total_reviews: int = 0
    rating_distribution: dict = field(
        default_factory=lambda: {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
    )
    category_averages: dict = field(default_factory=dict)


@dataclass
class Room:
    room_id: str
    room_number: str
    capacity: int
    price: float
    floor: Optional[int] = None
    current_occupancy: int = 0
    status: RoomStatus = RoomStatus.AVAILABLE
    amenities: list = field(default_factory=list)

    # projection of approved reviews, written only by RatingService
    rating: float = 0.0
    total_reviews: int = 0
    rating_summary: RatingSummary = field(default_factory=RatingSummary)

    version: int = 0
    review_version: int = 0

    @property
    def is_full(self) -> bool:
        return self.current_occupancy >= self.capacity
