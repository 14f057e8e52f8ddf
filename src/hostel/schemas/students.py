from typing import Optional

from pydantic import BaseModel, Field


class EmergencyContactRequest(BaseModel):
    name: str = ""
    phone: str = ""
    relationship: str = ""


class ProfileRequest(BaseModel):
    phone: Optional[str] = Field(default=None, max_length=20)
    emergency_contact: Optional[EmergencyContactRequest] = None


class AssignRoomRequest(BaseModel):
    room_id: str = Field(min_length=1)
