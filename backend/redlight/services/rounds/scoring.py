import logging
from typing import Iterable, List

from redlight.models import Player, RankingEntry, Room

logger = logging.getLogger(__name__)


def all_clicked(room: Room) -> bool:
    """True once every current player has a click recorded this round.

    A room with no players never counts as complete.
    """
    return bool(room.players) and all(p.has_clicked for p in room.players.values())


def compute_ranking(players: Iterable[Player]) -> List[RankingEntry]:
    """Rank and score the players who clicked this round.

    Fastest first. With N ranked players the fastest gets N points and the
    slowest 1; equal times keep their incoming order. Points are added to
    each player's cumulative score.
    """
    ranked = sorted(
        (p for p in players if p.reaction_time is not None),
        key=lambda p: p.reaction_time,
    )
    total = len(ranked)
    entries = []
    for idx, player in enumerate(ranked):
        points = total - idx
        player.score += points
        entries.append(RankingEntry(
            name=player.name,
            reaction_time=player.reaction_time,
            points=points,
            score=player.score,
        ))
    logger.debug(f"[ranking] ranked={total} order={[e.name for e in entries]}")
    return entries
