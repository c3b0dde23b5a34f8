from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config['CORS_ORIGINS']
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Lobby state is per app instance so each app (and each test) starts empty
    from lobbyserver.services.lobbies import (
        BroadcastRelay, ConnectionRegistry, LobbyService, LobbyStore,
    )
    store = LobbyStore(
        code_length=flask_app.config.get('LOBBY_CODE_LENGTH', 6),
        max_attempts=flask_app.config.get('LOBBY_CODE_ATTEMPTS', 20),
    )
    service = LobbyService(
        store,
        ConnectionRegistry(),
        BroadcastRelay(socketio, namespace),
        grace_sec=flask_app.config.get('RECONNECT_GRACE_SEC', 30.0),
        spawn=socketio.start_background_task,
        sleep=socketio.sleep,
    )
    flask_app.extensions['lobby_service'] = service
    flask_app.extensions['lobby_sessions'] = {}

    from lobbyserver.main import main
    flask_app.register_blueprint(main)

    from lobbyserver.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    @click.command('lobbies')
    def list_lobbies_command():
        """Lists active lobbies with their members."""
        with store.lock:
            lobbies = store.all()
            if not lobbies:
                click.echo('No active lobbies.')
                return
            for lobby in lobbies:
                members = ', '.join(
                    f"{p.name}({p.id}{'*' if p.ready else ''}{' dc' if p.disconnected else ''})"
                    for p in lobby.players
                )
                click.echo(f"{lobby.id} {lobby.status} host={lobby.host_id} players=[{members}]")

    flask_app.cli.add_command(list_lobbies_command)

    return flask_app
