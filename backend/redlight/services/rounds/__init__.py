"""Round domain services: registry, state machine, scoring and timers.

This package contains the in-memory game logic used by the socket gateway,
keeping transport concerns separated from core round mechanics. Nothing in
here emits on a socket; operations return the notifications the gateway
should deliver.
"""

from .registry import RoomRegistry
from .scheduler import ArmScheduler
from .scoring import all_clicked, compute_ranking
from .state_machine import Notification, RoundStateMachine

__all__ = [
    'ArmScheduler',
    'Notification',
    'RoomRegistry',
    'RoundStateMachine',
    'all_clicked',
    'compute_ranking',
]
