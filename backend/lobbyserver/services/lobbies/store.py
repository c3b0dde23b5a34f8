import logging
import threading
from typing import Callable, Dict, List, Optional

from lobbyserver.models import Lobby, Player
from .codes import generate_lobby_code
from .errors import LobbyCodesExhausted

logger = logging.getLogger(__name__)


class LobbyStore:
    """Process-wide map of lobby code -> Lobby.

    The store does no locking of its own per call. Socket.IO may run handlers
    on parallel threads, so callers hold ``lock`` for the whole of each
    read-modify-write sequence (validate, mutate, broadcast).
    """

    def __init__(self, code_length: int = 6, max_attempts: int = 20,
                 code_factory: Optional[Callable[[int], str]] = None):
        self._lobbies: Dict[str, Lobby] = {}
        self._code_length = code_length
        self._max_attempts = max(1, max_attempts)
        self._code_factory = code_factory or generate_lobby_code
        self.lock = threading.RLock()

    def allocate_code(self) -> str:
        for _ in range(self._max_attempts):
            code = self._code_factory(self._code_length)
            if code not in self._lobbies:
                return code
        logger.warning(
            f"[code-exhausted] attempts={self._max_attempts} length={self._code_length} lobbies={len(self._lobbies)}"
        )
        raise LobbyCodesExhausted()

    def create(self, lobby_id: str, player: Player) -> Lobby:
        if lobby_id in self._lobbies:
            raise ValueError(f"lobby {lobby_id} already exists")
        lobby = Lobby(lobby_id, player)
        self._lobbies[lobby_id] = lobby
        return lobby

    def get(self, lobby_id: str) -> Optional[Lobby]:
        return self._lobbies.get(lobby_id)

    def delete(self, lobby_id: str) -> None:
        self._lobbies.pop(lobby_id, None)

    def all(self) -> List[Lobby]:
        return list(self._lobbies.values())

    def __contains__(self, lobby_id) -> bool:
        return lobby_id in self._lobbies

    def __len__(self) -> int:
        return len(self._lobbies)
