import os
import sys
import pytest

# Ensure the backend root (containing the `synchub` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from synchub import create_app, socketio
from synchub.services.session import SessionCoordinator


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    HOST = '127.0.0.1'
    PORT = 3000
    PING_INTERVAL_SEC = 10
    PING_TIMEOUT_SEC = 15
    SOCKETIO_TRANSPORTS = ['websocket']
    SOCKETIO_NAMESPACE = '/'
    CORS_ALLOWED_ORIGINS = '*'
    HEARTBEAT_INTERVAL_SEC = 5
    LOG_LEVEL = 'DEBUG'


class RecordingChannel:
    """In-memory stand-in for the Socket.IO channel.

    Mirrors room grouping so room-scoped sends can be checked per sid.
    """

    def __init__(self):
        self.connected = set()
        self.groups = {}
        self.sent = []  # (sid, event, data) as each connection would receive it

    def _deliver(self, sids, event, data):
        for sid in sorted(sids):
            self.sent.append((sid, event, data))

    def send(self, sid, event, data):
        self._deliver({sid}, event, data)

    def send_to_room(self, room, event, data):
        self._deliver(self.groups.get(room, set()) & self.connected, event, data)

    def broadcast(self, event, data, skip_sid=None):
        self._deliver(self.connected - {skip_sid}, event, data)

    def enter_room(self, sid, room):
        self.groups.setdefault(room, set()).add(sid)

    def leave_room(self, sid, room):
        members = self.groups.get(room, set())
        members.discard(sid)
        if not members:
            self.groups.pop(room, None)

    def received(self, sid, event=None):
        return [data for s, e, data in self.sent if s == sid and (event is None or e == event)]

    def events(self, event):
        return [(s, data) for s, e, data in self.sent if e == event]

    def clear(self):
        self.sent.clear()


class Hub:
    """A coordinator wired to a RecordingChannel, with transport-side connect/close."""

    def __init__(self, channel):
        self.channel = channel
        self.coordinator = SessionCoordinator(channel, clock=lambda: 1700000000.5)

    def connect(self, sid):
        self.channel.connected.add(sid)
        self.coordinator.connect(sid)

    def disconnect(self, sid):
        # The transport drops its own grouping on close
        self.channel.connected.discard(sid)
        for members in self.channel.groups.values():
            members.discard(sid)
        self.coordinator.disconnect(sid)

    def send(self, sid, event, data=None):
        return self.coordinator.dispatch(sid, event, data)


@pytest.fixture()
def channel():
    return RecordingChannel()


@pytest.fixture()
def hub(channel):
    harness = Hub(channel)
    yield harness
    harness.coordinator.shutdown()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    yield application
    application.extensions['synchub'].shutdown()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    created = []

    def make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        created.append(test_client)
        return test_client

    yield make
    for test_client in created:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def sio_client(sio_factory):
    return sio_factory()
