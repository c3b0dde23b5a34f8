import os
import sys
import pytest

# Ensure the backend root (containing the `lobbyserver` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from lobbyserver import create_app, socketio
from lobbyserver.services.lobbies import ConnectionRegistry, LobbyService, LobbyStore


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = '/'
    # Short enough for socket tests to wait out
    RECONNECT_GRACE_SEC = 0.2
    LOBBY_CODE_LENGTH = 6
    LOBBY_CODE_ATTEMPTS = 20
    LOG_LEVEL = 'DEBUG'
    PORT = 3001


class RecordingRelay:
    """Relay double that keeps every broadcast instead of emitting it."""

    def __init__(self):
        self.events = []
        self.rooms = {}

    def join(self, sid, lobby_id):
        self.rooms.setdefault(lobby_id, set()).add(sid)

    def leave(self, sid, lobby_id):
        self.rooms.get(lobby_id, set()).discard(sid)

    def lobby_update(self, lobby):
        self.events.append(('lobby-update', lobby.id, lobby.to_dict(), None))

    def game_started(self, lobby_id, initial_state):
        self.events.append(('game-started', lobby_id, initial_state, None))

    def state_sync(self, lobby_id, delta, sender_sid):
        self.events.append(('game-state-sync', lobby_id, delta, sender_sid))

    def named(self, name):
        return [e for e in self.events if e[0] == name]

    def last_snapshot(self):
        return self.named('lobby-update')[-1][2]


class ManualScheduler:
    """Collects supervisor tasks so tests decide when grace windows end."""

    def __init__(self):
        self.tasks = []

    def spawn(self, target, *args):
        self.tasks.append((target, args))

    def sleep(self, seconds):
        pass

    def run_all(self):
        tasks, self.tasks = self.tasks, []
        for target, args in tasks:
            target(*args)
        return len(tasks)


def _codes(*codes):
    remaining = list(codes)

    def factory(length):
        return remaining.pop(0) if remaining else 'ZZZZZZ'
    return factory


@pytest.fixture()
def relay():
    return RecordingRelay()


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def service(relay, scheduler):
    store = LobbyStore(code_factory=_codes('AB12CD', 'EF34GH', 'JK56LM'))
    return LobbyService(
        store, ConnectionRegistry(), relay,
        grace_sec=30, spawn=scheduler.spawn, sleep=scheduler.sleep,
    )


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def make():
        test_client = socketio.test_client(flask_app)
        clients.append(test_client)
        return test_client

    yield make
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
