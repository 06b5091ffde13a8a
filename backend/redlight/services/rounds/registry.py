import logging
import threading
from typing import Dict, List, Optional

from redlight.models import Room, generate_room_code

logger = logging.getLogger(__name__)


def normalize_code(code) -> str:
    return str(code or '').strip().upper()


class RoomRegistry:
    """Owns every live room, keyed by code.

    The registry lock only guards the dictionary itself; state inside a room
    is protected by that room's own lock.
    """

    def __init__(self, code_length: int = 5, rng=None):
        self.code_length = code_length
        self._rng = rng
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def create_room(self, host_id: str) -> Room:
        with self._lock:
            code = generate_room_code(lambda c: c in self._rooms, self.code_length, self._rng)
            room = Room(code=code, host_id=host_id)
            self._rooms[code] = room
        logger.info(f"[room-created] room={code} host={host_id} live={len(self._rooms)}")
        return room

    def find_room(self, code) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(normalize_code(code))

    def destroy_room(self, code) -> Optional[Room]:
        """Remove a room and its players. Returns the removed room, if any."""
        with self._lock:
            room = self._rooms.pop(normalize_code(code), None)
        if room is None:
            return None
        with room.lock:
            room.closed = True
            room.players.clear()
        logger.info(f"[room-destroyed] room={room.code} live={len(self._rooms)}")
        return room

    def codes(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def __contains__(self, code) -> bool:
        with self._lock:
            return normalize_code(code) in self._rooms

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)
