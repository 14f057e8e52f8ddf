from uuid import uuid4

from hostel.models.rooms import Room
from hostel.repository.room_repo import RoomRepository
from hostel.schemas.rooms import RoomRequest, RoomUpdateRequest
from hostel.services.room_ledger import RoomLedger
from hostel.utils.custom_exceptions import ConflictException, NotFoundException


class RoomService:
    def __init__(self, room_repo: RoomRepository, room_ledger: RoomLedger):
        self.room_repo = room_repo
        self.room_ledger = room_ledger

    def add_room(self, req: RoomRequest) -> Room:
        room = Room(
            room_id=str(uuid4()),
            room_number=req.room_number,
            floor=req.floor,
            capacity=req.capacity,
            price=req.price,
            amenities=req.amenities,
        )
        self.room_repo.add_room(room=room)
        return room

    def get_room(self, room_id: str) -> Room:
        room = self.room_repo.get_room_by_id(room_id)
        if room is None:
            raise NotFoundException("room", room_id, 404)
        return room

    def update_room(self, room_id: str, req: RoomUpdateRequest) -> Room:
        details = req.model_dump(
            include={"floor", "price", "amenities"}, exclude_none=True
        )
        return self.room_ledger.reconfigure(
            room_id, details, capacity=req.capacity, maintenance=req.maintenance
        )

    def adjust_occupancy(self, room_id: str, delta: int) -> Room:
        return self.room_ledger.adjust_occupancy(room_id, delta)

    def delete_room(self, room_id: str):
        room = self.room_repo.get_room_by_id(room_id)
        if room is None:
            raise NotFoundException("room", room_id, 404)
        if room.current_occupancy > 0:
            raise ConflictException("Cannot delete room with current occupants")
        self.room_repo.delete_room(room)
