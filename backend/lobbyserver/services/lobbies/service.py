import itertools
import logging
from typing import Any, Dict, Optional, Tuple

from lobbyserver.models import IN_GAME, Lobby, Player
from .errors import (
    AlreadyStarted,
    LobbyFull,
    LobbyNotFound,
    NotReady,
    Unauthorized,
)
from .registry import ConnectionRegistry
from .store import LobbyStore
from .supervisor import ReconnectSupervisor

logger = logging.getLogger(__name__)


class LobbyService:
    """Lobby lifecycle operations.

    Every public method is one critical section under ``store.lock``:
    validation happens first and raises a ``LobbyError`` before anything is
    mutated, then the store is changed and the relay broadcasts the result
    while the lock is still held. Clients therefore see events in the same
    order the store was mutated.
    """

    def __init__(self, store: LobbyStore, registry: ConnectionRegistry, relay,
                 spawn, sleep, grace_sec: float = 30.0):
        self.store = store
        self.registry = registry
        self.relay = relay
        self.supervisor = ReconnectSupervisor(
            grace_sec, self.expire_disconnected, spawn=spawn, sleep=sleep
        )
        self._epochs = itertools.count(1)

    def create_lobby(self, sid: str, player_id: str, name: str) -> Lobby:
        with self.store.lock:
            lobby_id = self.store.allocate_code()
            lobby = self.store.create(lobby_id, Player(player_id, name, sid))
            self.registry.bind(lobby_id, player_id, sid)
            self.relay.join(sid, lobby_id)
            logger.info(f"[lobby-create] lobby={lobby_id} player={player_id} name={name!r}")
            self.relay.lobby_update(lobby)
            return lobby

    def join_lobby(self, sid: str, lobby_id: str, player_id: str,
                   name: str) -> Tuple[Lobby, Optional[str]]:
        """Join or rejoin a lobby.

        Returns the lobby and, for a reconnection arriving on a new
        connection, the sid it replaced so the caller can detach that
        connection if it is still open.
        """
        with self.store.lock:
            lobby = self.store.get(lobby_id)
            if lobby is None:
                raise LobbyNotFound()

            existing = lobby.find_player(player_id)
            if existing is not None:
                return lobby, self._reconnect(lobby, existing, sid)

            if lobby.is_full:
                raise LobbyFull()
            if lobby.in_game:
                raise AlreadyStarted()

            lobby.add_player(Player(player_id, name, sid))
            self.registry.bind(lobby_id, player_id, sid)
            self.relay.join(sid, lobby_id)
            logger.info(f"[lobby-join] lobby={lobby_id} player={player_id} name={name!r}")
            self.relay.lobby_update(lobby)
            return lobby, None

    def _reconnect(self, lobby: Lobby, player: Player, sid: str) -> Optional[str]:
        stale_sid = player.sid if player.sid != sid else None
        player.sid = sid
        player.disconnected = False
        self.supervisor.cancel(lobby.id, player.id)
        self.registry.bind(lobby.id, player.id, sid)
        if stale_sid is not None:
            self.relay.leave(stale_sid, lobby.id)
        self.relay.join(sid, lobby.id)
        logger.info(f"[lobby-rejoin] lobby={lobby.id} player={player.id} replaced_sid={stale_sid}")
        self.relay.lobby_update(lobby)
        return stale_sid

    def leave_lobby(self, lobby_id: str, player_id: str,
                    sid: Optional[str] = None) -> Optional[Lobby]:
        """Remove a member. Returns the lobby, or None if nothing was removed."""
        with self.store.lock:
            lobby = self.store.get(lobby_id)
            if lobby is None or lobby.find_player(player_id) is None:
                return None
            self._remove(lobby, player_id, sid)
            return lobby

    def _remove(self, lobby: Lobby, player_id: str, sid: Optional[str]) -> None:
        previous_host = lobby.host_id
        player = lobby.remove_player(player_id)
        self.registry.unbind(lobby.id, player_id)
        self.supervisor.cancel(lobby.id, player_id)
        if lobby.host_id != previous_host:
            logger.info(f"[host-transfer] lobby={lobby.id} from={previous_host} to={lobby.host_id}")
        if sid is not None:
            self.relay.leave(sid, lobby.id)
        logger.info(f"[lobby-leave] lobby={lobby.id} player={player.id} remaining={len(lobby.players)}")
        if lobby.is_empty:
            self.store.delete(lobby.id)
            logger.info(f"[lobby-delete] lobby={lobby.id} empty")
        else:
            self.relay.lobby_update(lobby)

    def toggle_ready(self, lobby_id: str, player_id: str) -> Optional[Lobby]:
        with self.store.lock:
            lobby = self.store.get(lobby_id)
            player = lobby.find_player(player_id) if lobby else None
            if player is None:
                return None
            player.ready = not player.ready
            logger.info(f"[ready] lobby={lobby_id} player={player_id} ready={player.ready}")
            self.relay.lobby_update(lobby)
            return lobby

    def start_game(self, lobby_id: str, player_id: str, initial_state: Any) -> Lobby:
        with self.store.lock:
            lobby = self.store.get(lobby_id)
            if lobby is None:
                raise LobbyNotFound()
            if lobby.host_id != player_id:
                logger.info(f"[start-rejected] lobby={lobby_id} player={player_id} reason=Unauthorized")
                raise Unauthorized()
            if lobby.in_game:
                logger.info(f"[start-rejected] lobby={lobby_id} player={player_id} reason=AlreadyStarted")
                raise AlreadyStarted()
            if not lobby.all_ready():
                logger.info(f"[start-rejected] lobby={lobby_id} player={player_id} reason=NotReady")
                raise NotReady()

            lobby.status = IN_GAME
            lobby.game_state = initial_state
            logger.info(f"[game-start] lobby={lobby_id} host={player_id}")
            self.relay.lobby_update(lobby)
            self.relay.game_started(lobby_id, initial_state)
            return lobby

    def update_state(self, lobby_id: str, sid: str, delta: Any) -> bool:
        with self.store.lock:
            lobby = self.store.get(lobby_id)
            if lobby is None or not lobby.in_game:
                return False
            lobby.game_state = delta
            self.relay.state_sync(lobby_id, delta, sid)
            logger.debug(f"[state-sync] lobby={lobby_id} sid={sid}")
            return True

    def mark_disconnected(self, lobby_id: str, player_id: str, sid: str) -> Optional[int]:
        """Hold the player's seat and start a grace window.

        Returns the disconnect epoch, or None when there was nothing to hold
        (lobby gone, player gone, or ``sid`` is no longer the player's
        connection).
        """
        with self.store.lock:
            lobby = self.store.get(lobby_id)
            player = lobby.find_player(player_id) if lobby else None
            if player is None:
                return None
            if player.sid != sid:
                logger.info(f"[disconnect-ignored] lobby={lobby_id} player={player_id} sid={sid} superseded")
                return None
            epoch = next(self._epochs)
            player.disconnected = True
            player.disconnect_epoch = epoch
            logger.info(f"[disconnect] lobby={lobby_id} player={player_id} epoch={epoch} (may reconnect)")
            self.relay.lobby_update(lobby)
            self.supervisor.schedule(lobby_id, player_id, epoch)
            return epoch

    def expire_disconnected(self, lobby_id: str, player_id: str, epoch: int) -> bool:
        """Evict a player whose grace window ran out without a reconnect."""
        with self.store.lock:
            lobby = self.store.get(lobby_id)
            player = lobby.find_player(player_id) if lobby else None
            if player is None or not player.disconnected or player.disconnect_epoch != epoch:
                logger.info(f"[grace-expire] lobby={lobby_id} player={player_id} epoch={epoch} no-op")
                return False
            logger.info(f"[grace-expire] lobby={lobby_id} player={player_id} epoch={epoch} removing")
            # The old connection is gone, so there is no room membership to drop
            self._remove(lobby, player_id, None)
            return True

    def stats(self) -> Dict[str, int]:
        with self.store.lock:
            return {'lobbies': len(self.store), 'players': len(self.registry)}
