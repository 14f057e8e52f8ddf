"""Occupancy bookkeeping for rooms.

Every change to a room's ``current_occupancy`` or ``status`` goes through
:class:`RoomLedger`. A change is computed from a consistent read of the room
and written with an optimistic ``version`` check, together with whatever
dependent items the caller needs committed alongside it (a booking insert,
a student binding) in a single DynamoDB transaction. When another writer got
to the room first the whole change is recomputed from a fresh read, up to
``max_attempts`` times.
"""

import logging
from dataclasses import replace
from functools import partial
from typing import Callable, List, Optional

from hostel.models.rooms import Room, RoomStatus
from hostel.repository.room_repo import RoomRepository
from hostel.repository.transactions import TransactionCancelled
from hostel.utils.constants import MAX_TRANSACTION_ATTEMPTS
from hostel.utils.custom_exceptions import (
    ConflictException,
    InvalidRequest,
    InvalidStateTransition,
    NotFoundException,
    RoomAtCapacity,
    RoomUnavailable,
)

logger = logging.getLogger(__name__)

ItemsBuilder = Callable[[Room], List[dict]]


class RoomLedger:
    def __init__(
        self, room_repo: RoomRepository, max_attempts: int = MAX_TRANSACTION_ATTEMPTS
    ):
        self.room_repo = room_repo
        self.max_attempts = max_attempts

    def reserve_slot(
        self, room_id: str, build_items: Optional[ItemsBuilder] = None
    ) -> Room:
        return self._apply(room_id, self._reserve, build_items)

    def release_slot(
        self, room_id: str, build_items: Optional[ItemsBuilder] = None
    ) -> Room:
        return self._apply(room_id, self._release, build_items)

    def adjust_occupancy(self, room_id: str, delta: int) -> Room:
        if delta not in (1, -1):
            raise InvalidRequest("Occupancy can only change by +1 or -1")
        return self._apply(room_id, partial(self._adjust, delta=delta))

    def reconfigure(
        self,
        room_id: str,
        details: Optional[dict] = None,
        capacity: Optional[int] = None,
        maintenance: Optional[bool] = None,
    ) -> Room:
        """Apply detail, capacity and maintenance changes as one write."""
        details = details or {}

        def change(room: Room) -> Room:
            updated = replace(room, **details)
            if capacity is not None:
                updated = self._resize(updated, capacity)
            if maintenance is not None:
                updated = self._maintenance(updated, maintenance)
            return updated

        return self._apply(room_id, change, details=details)

    def _apply(
        self,
        room_id: str,
        change: Callable[[Room], Room],
        build_items: Optional[ItemsBuilder] = None,
        details: Optional[dict] = None,
    ) -> Room:
        for attempt in range(1, self.max_attempts + 1):
            room = self.room_repo.get_room_by_id(room_id)
            if room is None:
                raise NotFoundException("room", room_id, 404)

            updated = change(room)
            items = [self.room_repo.occupancy_update_item(room, updated, details)]
            if build_items:
                items.extend(build_items(updated))

            try:
                self.room_repo.transact(items)
            except TransactionCancelled as err:
                if err.failed_at(0) or err.contended:
                    logger.warning(
                        f"Room {room_id} changed concurrently "
                        f"(attempt {attempt}/{self.max_attempts}): {err.reasons}"
                    )
                    continue
                raise

            updated.version = room.version + 1
            logger.info(
                f"Room {room_id} occupancy {room.current_occupancy}->"
                f"{updated.current_occupancy}, status {updated.status.value}"
            )
            return updated

        raise ConflictException(
            f"Room {room_id} is being updated by another request, try again"
        )

    @staticmethod
    def _reserve(room: Room) -> Room:
        if room.is_full:
            raise RoomAtCapacity("Room is already at full capacity")
        if room.status != RoomStatus.AVAILABLE:
            raise RoomUnavailable(
                f"Room is not available. Current status: {room.status.value}"
            )

        occupancy = room.current_occupancy + 1
        status = RoomStatus.OCCUPIED if occupancy == room.capacity else room.status
        return replace(room, current_occupancy=occupancy, status=status)

    @staticmethod
    def _release(room: Room) -> Room:
        occupancy = max(0, room.current_occupancy - 1)
        status = room.status
        if occupancy < room.capacity and status != RoomStatus.MAINTENANCE:
            status = RoomStatus.AVAILABLE
        return replace(room, current_occupancy=occupancy, status=status)

    @staticmethod
    def _adjust(room: Room, delta: int) -> Room:
        if delta > 0 and room.is_full:
            raise RoomAtCapacity("Room is already at full capacity")
        if delta < 0 and room.current_occupancy <= 0:
            raise InvalidStateTransition("Room occupancy is already zero")

        occupancy = room.current_occupancy + delta
        status = room.status
        if status != RoomStatus.MAINTENANCE:
            status = (
                RoomStatus.OCCUPIED
                if occupancy >= room.capacity
                else RoomStatus.AVAILABLE
            )
        return replace(room, current_occupancy=occupancy, status=status)

    @staticmethod
    def _maintenance(room: Room, enabled: bool) -> Room:
        if enabled:
            return replace(room, status=RoomStatus.MAINTENANCE)
        status = RoomStatus.OCCUPIED if room.is_full else RoomStatus.AVAILABLE
        return replace(room, status=status)

    @staticmethod
    def _resize(room: Room, capacity: int) -> Room:
        if capacity < 1:
            raise InvalidRequest("Capacity must be at least 1")
        if capacity < room.current_occupancy:
            raise InvalidRequest(
                f"Capacity {capacity} is below current occupancy "
                f"{room.current_occupancy}"
            )
        resized = replace(room, capacity=capacity)
        if room.status != RoomStatus.MAINTENANCE:
            resized.status = (
                RoomStatus.OCCUPIED if resized.is_full else RoomStatus.AVAILABLE
            )
        return resized
