from typing import Dict, Optional, Tuple


class ConnectionRegistry:
    """Which Socket.IO session currently speaks for each seated player.

    Player ids are only unique within a lobby, so seats are keyed by
    ``(lobby_id, player_id)``.
    """

    def __init__(self):
        self._sids: Dict[Tuple[str, str], str] = {}

    def bind(self, lobby_id: str, player_id: str, sid: str) -> Optional[str]:
        """Point the seat at ``sid``; returns the sid it replaced, if any."""
        key = (lobby_id, player_id)
        previous = self._sids.get(key)
        self._sids[key] = sid
        return previous

    def unbind(self, lobby_id: str, player_id: str) -> Optional[str]:
        return self._sids.pop((lobby_id, player_id), None)

    def get(self, lobby_id: str, player_id: str) -> Optional[str]:
        return self._sids.get((lobby_id, player_id))

    def __len__(self) -> int:
        return len(self._sids)
