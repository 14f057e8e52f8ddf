from typing import Optional

from pydantic import BaseModel, Field, StrictInt, field_validator

from hostel.models.reviews import REVIEW_CATEGORIES, ReviewStatus


class CategoryRatings(BaseModel):
    cleanliness: int = Field(default=0, ge=0, le=5)
    comfort: int = Field(default=0, ge=0, le=5)
    location: int = Field(default=0, ge=0, le=5)
    facilities: int = Field(default=0, ge=0, le=5)
    staff: int = Field(default=0, ge=0, le=5)
    value_for_money: int = Field(default=0, ge=0, le=5)

    def as_dict(self) -> dict:
        return {name: getattr(self, name) for name in REVIEW_CATEGORIES}


class ReviewRequest(BaseModel):
    student_id: str = Field(min_length=1)
    room_id: str = Field(min_length=1)
    booking_id: str = Field(min_length=1)
    rating: StrictInt = Field(ge=1, le=5)
    title: str = Field(max_length=100)
    comment: str = Field(max_length=1000)
    categories: CategoryRatings = Field(default_factory=CategoryRatings)

    @field_validator("title", "comment")
    @classmethod
    def not_blank(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ReviewUpdateRequest(BaseModel):
    rating: Optional[StrictInt] = Field(default=None, ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=100)
    comment: Optional[str] = Field(default=None, max_length=1000)
    categories: Optional[CategoryRatings] = None

    @field_validator("title", "comment")
    @classmethod
    def strip(cls, v: Optional[str]):
        return v.strip() if v is not None else v


class ReviewStatusRequest(BaseModel):
    status: ReviewStatus
    admin_reply: Optional[str] = Field(default=None, max_length=500)
