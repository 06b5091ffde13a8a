import random
import string
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

PHASE_LOBBY = 'lobby'
PHASE_WAITING = 'waiting'  # round started, red not shown yet
PHASE_ARMED = 'armed'      # red shown, clicks are timed
PHASE_RANKING = 'ranking'

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


@dataclass
class Player:
    sid: str
    name: str
    reaction_time: Optional[float] = None
    has_clicked: bool = False
    score: int = 0

    def reset_round(self) -> None:
        self.reaction_time = None
        self.has_clicked = False

    def to_dict(self):
        return {
            'name': self.name,
            'reactionTime': self.reaction_time,
            'hasClicked': self.has_clicked,
            'score': self.score,
        }


@dataclass
class RankingEntry:
    name: str
    reaction_time: float
    points: int
    score: int

    def to_dict(self):
        return {
            'name': self.name,
            'reactionTime': self.reaction_time,
            'points': self.points,
            'score': self.score,
        }


@dataclass
class Room:
    code: str
    host_id: str
    players: Dict[str, Player] = field(default_factory=dict)
    phase: str = PHASE_LOBBY
    armed_at: Optional[int] = None  # ms timestamp
    round_no: int = 0
    closed: bool = False
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def channel(self) -> str:
        """Socket.IO room every participant of this game is joined to."""
        return f"room:{self.code}"

    def is_host(self, sid: str) -> bool:
        return sid == self.host_id

    def player_names(self, host_name: str) -> List[str]:
        return [host_name] + [p.name for p in self.players.values()]

    def reset_round(self) -> None:
        for player in self.players.values():
            player.reset_round()
        self.armed_at = None

    def to_dict(self, host_name: str = 'Host'):
        return {
            'code': self.code,
            'phase': self.phase,
            'round': self.round_no,
            'playerList': self.player_names(host_name),
            'players': [p.to_dict() for p in self.players.values()],
        }


def generate_room_code(is_taken: Callable[[str], bool], length: int = 5, rng=None) -> str:
    """Generate a short room code that no live room is using."""
    rng = rng or random
    while True:
        code = ''.join(rng.choices(ROOM_CODE_ALPHABET, k=length))
        if not is_taken(code):
            return code
