from typing import Any

from lobbyserver.models import Lobby


def room_for(lobby_id: str) -> str:
    return f"lobby:{lobby_id}"


class BroadcastRelay:
    """Fans lobby events out to the Socket.IO room of a lobby.

    Uses the server-level emit and room calls so it works both inside a
    request and from background tasks (grace window expiry).
    """

    def __init__(self, socketio, namespace: str = '/'):
        self._socketio = socketio
        self.namespace = namespace

    def join(self, sid: str, lobby_id: str) -> None:
        self._socketio.server.enter_room(sid, room_for(lobby_id), namespace=self.namespace)

    def leave(self, sid: str, lobby_id: str) -> None:
        self._socketio.server.leave_room(sid, room_for(lobby_id), namespace=self.namespace)

    def lobby_update(self, lobby: Lobby) -> None:
        self._socketio.emit('lobby-update', lobby.to_dict(),
                            to=room_for(lobby.id), namespace=self.namespace)

    def game_started(self, lobby_id: str, initial_state: Any) -> None:
        self._socketio.emit('game-started', initial_state,
                            to=room_for(lobby_id), namespace=self.namespace)

    def state_sync(self, lobby_id: str, delta: Any, sender_sid: str) -> None:
        # Sender already has this state; only the opponent needs it
        self._socketio.emit('game-state-sync', delta, to=room_for(lobby_id),
                            namespace=self.namespace, skip_sid=sender_sid)
