import os


def _origins(raw):
    return [origin.strip() for origin in raw.split(',') if origin.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ORIGINS = _origins(os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:5173,http://localhost:5174,https://rotfe.vercel.app',
    ))
    # Namespace all lobby events are served on
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Seconds a disconnected player keeps their slot before eviction
    RECONNECT_GRACE_SEC = float(os.environ.get('RECONNECT_GRACE_SEC', '30'))
    LOBBY_CODE_LENGTH = int(os.environ.get('LOBBY_CODE_LENGTH', '6'))
    # Collision retries before giving up on allocating a lobby code
    LOBBY_CODE_ATTEMPTS = int(os.environ.get('LOBBY_CODE_ATTEMPTS', '20'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    PORT = int(os.environ.get('PORT', '3001'))
