from typing import Any, Optional, Tuple

from lobbyserver.models import Lobby
from lobbyserver.services.lobbies import LobbyService


class SessionHandler:
    """Lobby context of a single Socket.IO connection.

    Remembers which lobby and player the connection currently speaks for.
    Calls that arrive without that context (a leave after a leave, a ready
    toggle after eviction) are silently ignored.
    """

    def __init__(self, sid: str, service: LobbyService):
        self.sid = sid
        self.service = service
        self.lobby_id: Optional[str] = None
        self.player_id: Optional[str] = None

    @property
    def in_lobby(self) -> bool:
        return self.lobby_id is not None and self.player_id is not None

    def create_lobby(self, player_id: str, name: str) -> Lobby:
        # The old seat is only given up once the new lobby exists
        lobby = self.service.create_lobby(self.sid, player_id, name)
        self.leave_lobby()
        self._attach(lobby.id, player_id)
        return lobby

    def join_lobby(self, lobby_id: str, player_id: str,
                   name: str) -> Tuple[Lobby, Optional[str]]:
        previous = (self.lobby_id, self.player_id) if self.in_lobby else None
        lobby, stale_sid = self.service.join_lobby(self.sid, lobby_id, player_id, name)
        if previous is not None and previous != (lobby.id, player_id):
            # Stay in the room if the old seat was in the lobby just joined
            sid = self.sid if previous[0] != lobby.id else None
            self.service.leave_lobby(previous[0], previous[1], sid)
        self._attach(lobby.id, player_id)
        return lobby, stale_sid

    def leave_lobby(self) -> None:
        if not self.in_lobby:
            return
        self.service.leave_lobby(self.lobby_id, self.player_id, self.sid)
        self.detach()

    def toggle_ready(self) -> Optional[Lobby]:
        if not self.in_lobby:
            return None
        return self.service.toggle_ready(self.lobby_id, self.player_id)

    def start_game(self, initial_state: Any) -> Optional[Lobby]:
        if not self.in_lobby:
            return None
        return self.service.start_game(self.lobby_id, self.player_id, initial_state)

    def update_state(self, delta: Any) -> bool:
        if self.lobby_id is None:
            return False
        return self.service.update_state(self.lobby_id, self.sid, delta)

    def disconnect(self) -> Optional[int]:
        if not self.in_lobby:
            return None
        epoch = self.service.mark_disconnected(self.lobby_id, self.player_id, self.sid)
        self.detach()
        return epoch

    def detach(self) -> None:
        self.lobby_id = None
        self.player_id = None

    def _attach(self, lobby_id: str, player_id: str) -> None:
        self.lobby_id = lobby_id
        self.player_id = player_id
