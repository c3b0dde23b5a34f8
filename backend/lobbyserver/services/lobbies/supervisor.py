import logging
import threading
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

_Key = Tuple[str, str]


class ReconnectSupervisor:
    """Grace-window timers for disconnected players.

    Every disconnect gets its own task stamped with an epoch. A task only
    calls ``on_expire`` if it is still the pending one for its
    ``(lobby_id, player_id)`` when it wakes; reconnecting cancels it and a
    later disconnect supersedes it.

    ``spawn`` and ``sleep`` are the server's background-task primitives
    (``socketio.start_background_task`` and ``socketio.sleep``).
    """

    def __init__(self, grace_sec: float,
                 on_expire: Callable[[str, str, int], bool],
                 spawn: Callable,
                 sleep: Callable[[float], None]):
        self.grace_sec = grace_sec
        self._on_expire = on_expire
        self._spawn = spawn
        self._sleep = sleep
        self._pending: Dict[_Key, int] = {}
        self._lock = threading.Lock()

    def schedule(self, lobby_id: str, player_id: str, epoch: int) -> None:
        with self._lock:
            self._pending[(lobby_id, player_id)] = epoch
        logger.info(
            f"[grace-set] lobby={lobby_id} player={player_id} epoch={epoch} "
            f"grace={self.grace_sec}s"
        )
        self._spawn(self._runner, lobby_id, player_id, epoch)

    def cancel(self, lobby_id: str, player_id: str) -> Optional[int]:
        with self._lock:
            epoch = self._pending.pop((lobby_id, player_id), None)
        if epoch is not None:
            logger.info(f"[grace-cancel] lobby={lobby_id} player={player_id} epoch={epoch}")
        return epoch

    def pending(self, lobby_id: str, player_id: str) -> Optional[int]:
        with self._lock:
            return self._pending.get((lobby_id, player_id))

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def _runner(self, lobby_id: str, player_id: str, epoch: int) -> None:
        if self.grace_sec > 0:
            self._sleep(self.grace_sec)
        key = (lobby_id, player_id)
        with self._lock:
            if self._pending.get(key) != epoch:
                logger.info(f"[grace-skip] lobby={lobby_id} player={player_id} epoch={epoch} stale")
                return
            del self._pending[key]
        # on_expire takes the store lock; never call it while holding ours
        self._on_expire(lobby_id, player_id, epoch)
