from typing import Any, Dict, Optional


class LobbyError(Exception):
    """A rejected lobby request.

    Raised before any lobby state is touched and turned into a failure ack by
    the socket layer, so none of these ever reach the client as a crash.
    """

    code = 'LobbyError'
    message = 'Lobby request failed'

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {'success': False, 'error': self.message, 'code': self.code}


class BadRequest(LobbyError):
    code = 'BadRequest'
    message = 'Malformed request'


class LobbyNotFound(LobbyError):
    code = 'NotFound'
    message = 'Lobby not found'


class LobbyFull(LobbyError):
    code = 'LobbyFull'
    message = 'Lobby is full'


class AlreadyStarted(LobbyError):
    code = 'AlreadyStarted'
    message = 'Game already in progress'


class Unauthorized(LobbyError):
    code = 'Unauthorized'
    message = 'Only the host can start the game'


class NotReady(LobbyError):
    code = 'NotReady'
    message = 'Not all players are ready'


class LobbyCodesExhausted(LobbyError):
    code = 'CodesExhausted'
    message = 'No free lobby code, try again'
