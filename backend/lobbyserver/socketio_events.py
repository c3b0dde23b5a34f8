from typing import Any, Dict

from flask import current_app, request

from lobbyserver import socketio
from lobbyserver.services.lobbies import BadRequest, LobbyError, Unauthorized
from lobbyserver.sessions import SessionHandler


def _get_sid() -> str:
    # Flask-SocketIO sets sid on the request during event dispatch
    return request.sid  # type: ignore


def _sessions() -> Dict[str, SessionHandler]:
    return current_app.extensions['lobby_sessions']


def _session() -> SessionHandler:
    sid = _get_sid()
    sessions = _sessions()
    handler = sessions.get(sid)
    if handler is None:
        handler = SessionHandler(sid, current_app.extensions['lobby_service'])
        sessions[sid] = handler
    return handler


def _field(data: Any, key: str) -> str:
    value = data.get(key) if isinstance(data, dict) else None
    if value is None or not str(value).strip():
        raise BadRequest(f"{key} is required")
    return str(value).strip()


def handle_connect(auth=None):
    _session()
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    handler = _sessions().pop(sid, None)
    if handler is not None:
        handler.disconnect()


def handle_create_lobby(data=None):
    try:
        player_id = _field(data, 'playerId')
        player_name = _field(data, 'playerName')
        lobby = _session().create_lobby(player_id, player_name)
    except LobbyError as exc:
        current_app.logger.info(f"[create-rejected] sid={_get_sid()} reason={exc.code}")
        return exc.to_dict()
    return {'success': True, 'lobbyId': lobby.id}


def handle_join_lobby(data=None):
    try:
        lobby_id = _field(data, 'lobbyId').upper()
        player_id = _field(data, 'playerId')
        player_name = _field(data, 'playerName')
        lobby, stale_sid = _session().join_lobby(lobby_id, player_id, player_name)
    except LobbyError as exc:
        current_app.logger.info(f"[join-rejected] sid={_get_sid()} reason={exc.code}")
        return exc.to_dict()
    if stale_sid is not None:
        # The old connection no longer speaks for this player
        stale = _sessions().get(stale_sid)
        if stale is not None and (stale.lobby_id, stale.player_id) == (lobby.id, player_id):
            stale.detach()
    return {'success': True}


def handle_leave_lobby(data=None):
    _session().leave_lobby()


def handle_toggle_ready(data=None):
    _session().toggle_ready()


def handle_start_game(initial_state=None):
    session = _session()
    if not session.in_lobby:
        return Unauthorized().to_dict()
    try:
        session.start_game(initial_state)
    except LobbyError as exc:
        return exc.to_dict()
    return {'success': True}


def handle_game_state_update(delta=None):
    _session().update_state(delta)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register the lobby Socket.IO events on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('create-lobby', handle_create_lobby, namespace=namespace)
    socketio.on_event('join-lobby', handle_join_lobby, namespace=namespace)
    socketio.on_event('leave-lobby', handle_leave_lobby, namespace=namespace)
    socketio.on_event('toggle-ready', handle_toggle_ready, namespace=namespace)
    socketio.on_event('start-game', handle_start_game, namespace=namespace)
    socketio.on_event('game-state-update', handle_game_state_update, namespace=namespace)
