from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class RoomRequest(BaseModel):
    room_number: str = Field(min_length=1)
    floor: int
    capacity: int = Field(ge=1)
    price: float = Field(ge=0)
    amenities: List[str] = Field(default_factory=list)


class RoomUpdateRequest(BaseModel):
    floor: Optional[int] = None
    price: Optional[float] = Field(default=None, ge=0)
    amenities: Optional[List[str]] = None
    capacity: Optional[int] = Field(default=None, ge=1)
    maintenance: Optional[bool] = None


class OccupancyRequest(BaseModel):
    action: Literal["increase", "decrease"]

    @property
    def delta(self) -> int:
        return 1 if self.action == "increase" else -1
