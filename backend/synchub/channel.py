from typing import Any, Optional


ROOM_PREFIX = 'room:'


def transport_room(room: str) -> str:
    """Socket.IO group name for a hub room. Prefixed so it never collides with a sid."""
    return f"{ROOM_PREFIX}{room}"


class SocketIOChannel:
    """Duplex channel backed by a Flask-SocketIO server.

    Uses ``socketio.emit`` and the server's room API directly, so it works
    both inside a handler and from a background task.
    """

    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def send(self, sid: str, event: str, data: Any) -> None:
        self.socketio.emit(event, data, to=sid, namespace=self.namespace)

    def send_to_room(self, room: str, event: str, data: Any) -> None:
        self.socketio.emit(event, data, to=transport_room(room), namespace=self.namespace)

    def broadcast(self, event: str, data: Any, skip_sid: Optional[str] = None) -> None:
        self.socketio.emit(event, data, skip_sid=skip_sid, namespace=self.namespace)

    def enter_room(self, sid: str, room: str) -> None:
        self.socketio.server.enter_room(sid, transport_room(room), namespace=self.namespace)

    def leave_room(self, sid: str, room: str) -> None:
        self.socketio.server.leave_room(sid, transport_room(room), namespace=self.namespace)
