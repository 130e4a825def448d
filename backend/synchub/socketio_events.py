from flask import request

from synchub import socketio
from synchub.events import VALID_C2S


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _make_event_handler(coordinator, event: str):
    def handler(data=None, *_extra):
        coordinator.dispatch(_get_sid(), event, data)
    handler.__name__ = f"handle_{event}"
    return handler


def register_socketio_handlers(coordinator, namespace: str = '/') -> None:
    """Bind Socket.IO events on `namespace` to the given coordinator."""

    def handle_connect(auth=None):
        coordinator.connect(_get_sid())

    def handle_disconnect(reason=None):
        coordinator.disconnect(_get_sid())

    # Each create_app binds a fresh coordinator; drop bindings left by earlier
    # apps so init_app does not keep replaying them.
    bound = {'connect', 'disconnect', *VALID_C2S}
    socketio.handlers[:] = [
        entry for entry in socketio.handlers
        if not (entry[0] in bound and entry[2] == namespace)
    ]

    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    for event in sorted(VALID_C2S):
        socketio.on_event(event, _make_event_handler(coordinator, event), namespace=namespace)
