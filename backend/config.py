import os


def _csv(value):
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    # Socket.IO transport tuning (seconds). Bounds how quickly a silently
    # dead connection is reclaimed by the transport.
    PING_INTERVAL_SEC = int(os.environ.get('PING_INTERVAL_SEC', '10'))
    PING_TIMEOUT_SEC = int(os.environ.get('PING_TIMEOUT_SEC', '15'))
    SOCKETIO_TRANSPORTS = _csv(os.environ.get('SOCKETIO_TRANSPORTS', 'websocket'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # '*' allows any origin
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    # Liveness broadcast period (sec). 0 disables.
    HEARTBEAT_INTERVAL_SEC = float(os.environ.get('HEARTBEAT_INTERVAL_SEC', '5'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
