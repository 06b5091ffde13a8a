import itertools
import logging
import threading
from typing import Dict

logger = logging.getLogger(__name__)


class ArmScheduler:
    """One-shot delayed callbacks keyed by room code.

    - At most one pending timer per room; scheduling again replaces it
    - On wake the worker checks its token is still the pending one for the
      room, otherwise it aborts without calling back
    - Workers run as Socket.IO background tasks; with ``inline`` they run
      synchronously in the caller (used under TESTING)
    """

    def __init__(self, socketio, inline: bool = False):
        self.socketio = socketio
        self.inline = inline
        self._pending: Dict[str, int] = {}
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()

    def schedule(self, room_code: str, delay: float, callback, *args) -> int:
        token = next(self._tokens)
        with self._lock:
            self._pending[room_code] = token
        logger.info(f"[arm-set] room={room_code} token={token} delay={delay:.2f}s")

        def _worker(code: str, expected: int, wait: float):
            if wait > 0:
                self.socketio.sleep(wait)
            with self._lock:
                if self._pending.get(code) != expected:
                    logger.info(f"[arm-abort] room={code} token={expected} superseded or cancelled")
                    return
                del self._pending[code]
            logger.info(f"[arm-fire] room={code} token={expected}")
            callback(*args)

        if self.inline:
            _worker(room_code, token, delay)
        else:
            self.socketio.start_background_task(_worker, room_code, token, delay)
        return token

    def cancel(self, room_code: str) -> bool:
        with self._lock:
            return self._pending.pop(room_code, None) is not None

    def is_pending(self, room_code: str) -> bool:
        with self._lock:
            return room_code in self._pending
