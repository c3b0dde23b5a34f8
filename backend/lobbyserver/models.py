from typing import Any, Dict, List, Optional

# Lobby status values; only ever advances WAITING -> IN_GAME
WAITING = 'waiting'
IN_GAME = 'in-game'

LOBBY_CAPACITY = 2


class Player:
    def __init__(self, id: str, name: str, sid: str):
        self.id = id
        self.name = name
        self.sid = sid
        self.ready = False
        self.disconnected = False
        self.disconnect_epoch = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'ready': self.ready,
            'disconnected': self.disconnected,
        }

    def __repr__(self):
        return f"<Player {self.id} {self.name!r}>"


class Lobby:
    """A two-seat pairing session.

    The first player is the host. ``players`` keeps join order, which decides
    who inherits the host seat when the host goes away.
    """

    def __init__(self, id: str, host: Player):
        self.id = id
        self.host_id = host.id
        self.players: List[Player] = [host]
        self.status = WAITING
        self.game_state: Any = None

    @property
    def is_full(self) -> bool:
        return len(self.players) >= LOBBY_CAPACITY

    @property
    def is_empty(self) -> bool:
        return not self.players

    @property
    def in_game(self) -> bool:
        return self.status == IN_GAME

    def find_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def all_ready(self) -> bool:
        return all(p.ready for p in self.players)

    def add_player(self, player: Player) -> None:
        if self.is_full:
            raise ValueError(f"lobby {self.id} is full")
        if self.find_player(player.id) is not None:
            raise ValueError(f"player {player.id} already in lobby {self.id}")
        self.players.append(player)

    def remove_player(self, player_id: str) -> Optional[Player]:
        """Drop a member and hand the host seat to the next one in join order.

        Returns the removed player, or None when the id is not a member.
        """
        player = self.find_player(player_id)
        if player is None:
            return None
        self.players = [p for p in self.players if p.id != player_id]
        if self.host_id == player_id and self.players:
            self.host_id = self.players[0].id
        return player

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'hostId': self.host_id,
            'players': [p.to_dict() for p in self.players],
            'status': self.status,
            'gameState': self.game_state,
        }

    def __repr__(self):
        return f"<Lobby {self.id} {self.status} players={len(self.players)}>"
