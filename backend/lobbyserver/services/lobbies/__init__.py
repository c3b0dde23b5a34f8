"""Two-seat lobbies: who is seated, who hosts, and when a dropped seat is freed.

Nothing in here reads a Flask request. Rooms and emits go through the
relay handed to ``LobbyService``, and grace timers through the spawn and
sleep callables it is given.
"""

from .errors import (
    AlreadyStarted,
    BadRequest,
    LobbyCodesExhausted,
    LobbyError,
    LobbyFull,
    LobbyNotFound,
    NotReady,
    Unauthorized,
)
from .registry import ConnectionRegistry
from .relay import BroadcastRelay
from .service import LobbyService
from .store import LobbyStore
from .supervisor import ReconnectSupervisor
