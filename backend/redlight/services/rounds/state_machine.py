import logging
import random
import time
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from redlight.errors import (
    AlreadyAffiliated,
    DuplicateAction,
    InvalidName,
    InvalidState,
    NotFound,
    Unauthorized,
)
from redlight.models import (
    PHASE_ARMED,
    PHASE_LOBBY,
    PHASE_RANKING,
    PHASE_WAITING,
    Player,
    Room,
)
from .scoring import all_clicked, compute_ranking

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    """An outbound event; ``broadcast`` False means the caller only."""
    event: str
    data: Any = None
    broadcast: bool = True


class RoundStateMachine:
    """Phase transitions for a single room.

    Lobby -> Waiting -> Armed -> Ranking -> Lobby. Every method expects the
    caller to hold ``room.lock`` and returns the notifications to deliver, in
    order. Rejected intents raise a ``RoomError``.
    """

    def __init__(self, arm_delay: Tuple[float, float] = (2.0, 5.0), host_name: str = 'Host',
                 max_name_len: int = 24, clock=time.monotonic, rng=None):
        lo, hi = arm_delay
        if lo < 0 or hi < lo:
            raise ValueError(f"invalid arm delay range {arm_delay!r}")
        self.arm_delay = (lo, hi)
        self.host_name = host_name
        self.max_name_len = max_name_len
        self._clock = clock
        self._rng = rng or random.Random()

    def now_ms(self) -> int:
        return int(round(self._clock() * 1000))

    def draw_arm_delay(self) -> float:
        """Seconds to wait before showing red; random so nobody can anticipate it."""
        return self._rng.uniform(*self.arm_delay)

    def player_list(self, room: Room) -> Notification:
        return Notification('playerList', room.player_names(self.host_name))

    def add_player(self, room: Room, sid: str, name) -> List[Notification]:
        _ensure_open(room)
        if room.is_host(sid):
            raise AlreadyAffiliated('You are already the host of this room.')
        if sid in room.players:
            raise AlreadyAffiliated()
        if not isinstance(name, str):
            raise InvalidName()
        name = name.strip()[:self.max_name_len]
        if not name:
            raise InvalidName()
        room.players[sid] = Player(sid=sid, name=name)
        logger.info(f"[join] room={room.code} sid={sid} name={name!r} players={len(room.players)}")
        return [Notification('joinedRoom', room.code, broadcast=False), self.player_list(room)]

    def start_round(self, room: Room, sid: str) -> List[Notification]:
        _ensure_open(room)
        if not room.is_host(sid):
            raise Unauthorized()
        if room.phase != PHASE_LOBBY:
            raise InvalidState(f"cannot start from {room.phase}")
        room.reset_round()
        room.phase = PHASE_WAITING
        room.round_no += 1
        logger.info(f"[round-start] room={room.code} round={room.round_no} players={len(room.players)}")
        return [Notification('gameWaiting')]

    def arm(self, room: Room, round_no: int) -> List[Notification]:
        """Show red. Does nothing if the room or round it was scheduled for is gone."""
        if room.closed or room.phase != PHASE_WAITING or room.round_no != round_no:
            logger.info(
                f"[arm-stale] room={room.code} expected_round={round_no} "
                f"actual_round={room.round_no} phase={room.phase} closed={room.closed}"
            )
            return []
        room.phase = PHASE_ARMED
        room.armed_at = self.now_ms()
        return [Notification('gameRed')]

    def player_clicked(self, room: Room, sid: str, at_ms: Optional[int] = None) -> List[Notification]:
        _ensure_open(room)
        if room.phase != PHASE_ARMED:
            raise InvalidState(f"click during {room.phase}")
        if room.is_host(sid):
            # host clicks count for nothing
            return []
        player = room.players.get(sid)
        if player is None:
            return []
        if player.has_clicked:
            raise DuplicateAction()
        clicked_at = self.now_ms() if at_ms is None else at_ms
        if clicked_at < room.armed_at:
            # received before red went out, only processed after
            raise InvalidState('click predates red')
        player.reaction_time = (clicked_at - room.armed_at) / 1000
        player.has_clicked = True
        logger.info(f"[click] room={room.code} name={player.name!r} time={player.reaction_time:.3f}s")
        if all_clicked(room):
            return [self._finish_round(room)]
        return []

    def next_round(self, room: Room, sid: str) -> List[Notification]:
        _ensure_open(room)
        if not room.is_host(sid):
            raise Unauthorized()
        room.reset_round()
        room.phase = PHASE_LOBBY
        logger.info(f"[lobby] room={room.code} after_round={room.round_no}")
        return [Notification('showLobby'), self.player_list(room)]

    def remove_player(self, room: Room, sid: str) -> List[Notification]:
        player = room.players.pop(sid, None)
        if player is None or room.closed:
            return []
        logger.info(f"[leave] room={room.code} name={player.name!r} players={len(room.players)}")
        notes = [self.player_list(room)]
        # the leaver may have been the last one holding the round open
        if room.phase == PHASE_ARMED and all_clicked(room):
            notes.append(self._finish_round(room))
        return notes

    def _finish_round(self, room: Room) -> Notification:
        room.phase = PHASE_RANKING
        ranking = compute_ranking(room.players.values())
        logger.info(f"[ranking] room={room.code} round={room.round_no} ranked={len(ranking)}")
        return Notification('showRanking', [entry.to_dict() for entry in ranking])


def _ensure_open(room: Room) -> None:
    if room.closed:
        raise NotFound()
