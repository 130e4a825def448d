import enum
import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Optional

from synchub.events import (
    ChatMessage,
    JoinRoom,
    PayloadError,
    PlayerAction,
    PlayerUpdate,
    RoomMessage,
    ScoreUpdate,
    parse_event,
)
from .heartbeat import Heartbeat
from .registry import PlayerRegistry
from .rooms import RoomIndex


class ConnectionState(enum.Enum):
    CONNECTING = 'connecting'
    ACTIVE = 'active'
    DISCONNECTED = 'disconnected'


def _now_ms(clock: Callable[[], float]) -> int:
    return int(clock() * 1000)


class SessionCoordinator:
    """Orchestrates connection lifecycle, inbound events and broadcasts.

    Every entry point runs under a single lock: one event, including the
    broadcasts it triggers, completes before the next one starts. The
    heartbeat takes the same lock so it never lands mid-event.
    """

    def __init__(self, channel, registry: Optional[PlayerRegistry] = None,
                 rooms: Optional[RoomIndex] = None, *, heartbeat_interval_sec: float = 0,
                 runner=None, autostart_heartbeat: bool = False,
                 logger: Optional[logging.Logger] = None,
                 clock: Callable[[], float] = time.time):
        self.channel = channel
        self.logger = logger or logging.getLogger(__name__)
        self.registry = registry if registry is not None else PlayerRegistry(self.logger)
        self.rooms = rooms if rooms is not None else RoomIndex()
        self.clock = clock
        self.started_at = clock()
        self._states: Dict[str, ConnectionState] = {}
        self._lock = threading.RLock()
        self._closed = False
        self._outbox: Optional[list] = None
        self.heartbeat = Heartbeat(heartbeat_interval_sec, self.beat, runner, logger=self.logger)
        self.autostart_heartbeat = autostart_heartbeat
        self._handlers = {
            PlayerUpdate: self._on_player_update,
            ScoreUpdate: self._on_score_update,
            ChatMessage: self._on_chat_message,
            JoinRoom: self._on_join_room,
            RoomMessage: self._on_room_message,
            PlayerAction: self._on_player_action,
        }

    # ---- lifecycle ----

    def start(self) -> bool:
        return self.heartbeat.start()

    def shutdown(self) -> None:
        with self._lock:
            self._closed = True
        self.heartbeat.stop()

    def _maybe_start_heartbeat(self) -> None:
        # Started by the first connection, so importing or building the app never spawns it
        if not self.autostart_heartbeat or self._closed:
            return
        if self.heartbeat.interval_sec > 0 and not self.heartbeat.running:
            self.heartbeat.start()

    def state_of(self, sid: str) -> ConnectionState:
        return self._states.get(sid, ConnectionState.DISCONNECTED)

    def connect(self, sid: str) -> None:
        with self._lock:
            if self.state_of(sid) is ConnectionState.ACTIVE:
                self.logger.warning(f"[duplicate-connect] sid={sid}")
            self._states[sid] = ConnectionState.CONNECTING
            self.registry.add_player(sid)
            self._states[sid] = ConnectionState.ACTIVE
            self.logger.info(f"[connect] sid={sid} players={len(self.registry)}")
            self._maybe_start_heartbeat()
            self._emit('send', sid, 'your_id', sid)
            self._broadcast_state()

    def disconnect(self, sid: str) -> None:
        with self._lock:
            if self.state_of(sid) is ConnectionState.DISCONNECTED and sid not in self.registry:
                return
            self.registry.remove_player(sid)
            left = self.rooms.leave_all(sid)
            # Terminal state; nothing references the sid afterwards.
            self._states.pop(sid, None)
            self.logger.info(f"[disconnect] sid={sid} rooms_left={left} players={len(self.registry)}")
            self._broadcast_state()

    # ---- inbound events ----

    def dispatch(self, sid: str, event: str, data: Any = None) -> bool:
        """Handle one inbound event. Returns True when it was applied.

        Malformed payloads are dropped. Handler output is queued and only
        sent once the handler has finished mutating state. A fault rolls
        registry and rooms back to where they were before the event, undoes
        any transport room entry, and re-sends the authoritative state if
        something already went out.
        """
        with self._lock:
            if self.state_of(sid) is not ConnectionState.ACTIVE:
                self.logger.warning(f"[drop] event={event} sid={sid} reason=connection not active")
                return False
            try:
                payload = parse_event(event, data)
            except PayloadError as exc:
                self.logger.debug(f"[drop] event={event} sid={sid} reason={exc}")
                return False
            with self._rollback_on_error(event, sid) as guard:
                self._outbox = []
                try:
                    self._handlers[type(payload)](sid, payload)
                    outbox = self._outbox
                finally:
                    self._outbox = None
                self._flush(outbox, guard)
            return not guard['failed']

    def _flush(self, outbox, guard) -> None:
        for method, args, kwargs in outbox:
            getattr(self.channel, method)(*args, **kwargs)
            if method == 'enter_room':
                guard['entered'].append(args)
            else:
                guard['emitted'] = True

    @contextmanager
    def _rollback_on_error(self, event: str, sid: str):
        players = self.registry.checkpoint()
        rooms = self.rooms.checkpoint()
        guard = {'failed': False, 'emitted': False, 'entered': []}
        try:
            yield guard
        except Exception:
            guard['failed'] = True
            self.registry.restore(players)
            self.rooms.restore(rooms)
            self.logger.exception(f"[handler-error] event={event} sid={sid} state restored")
            self._undo_room_entries(guard['entered'])
            if guard['emitted']:
                try:
                    self._broadcast_state()
                except Exception:
                    self.logger.exception(f"[resync-error] event={event} sid={sid}")

    def _undo_room_entries(self, entered) -> None:
        for member, room in entered:
            if member in self.rooms.members(room):
                continue
            try:
                self.channel.leave_room(member, room)
            except Exception:
                self.logger.exception(f"[leave-room-error] sid={member} room={room}")

    def _emit(self, method: str, *args, **kwargs) -> None:
        if self._outbox is not None:
            self._outbox.append((method, args, kwargs))
        else:
            getattr(self.channel, method)(*args, **kwargs)

    def _on_player_update(self, sid: str, payload: PlayerUpdate) -> None:
        if self.registry.update_player(sid, **payload.fields) is None:
            return
        self._broadcast_state()

    def _on_score_update(self, sid: str, payload: ScoreUpdate) -> None:
        if self.registry.update_player(sid, score=payload.score) is None:
            return
        self._broadcast_state()

    def _on_chat_message(self, sid: str, payload: ChatMessage) -> None:
        self._emit('broadcast', 'chat_message', {
            'id': sid,
            'message': payload.message,
            'timestamp': self.timestamp(),
        })

    def _on_join_room(self, sid: str, payload: JoinRoom) -> None:
        room = payload.room
        self.rooms.join(sid, room)
        self.registry.set_room(sid, room)
        self.logger.info(f"[join-room] sid={sid} room={room} members={len(self.rooms.members(room))}")
        # Transport group entry goes out with the notification, after state is settled
        self._emit('enter_room', sid, room)
        self.route_to_room(room, 'room_notification', {
            'room': room,
            'id': sid,
            'message': f"{sid} joined room {room}",
            'timestamp': self.timestamp(),
        })

    def _on_room_message(self, sid: str, payload: RoomMessage) -> None:
        self.route_to_room(payload.room, 'room_message', {
            'room': payload.room,
            'id': sid,
            'message': payload.message,
            'timestamp': self.timestamp(),
        })

    def _on_player_action(self, sid: str, payload: PlayerAction) -> None:
        relayed = dict(payload.payload)
        relayed.update(id=sid, timestamp=self.timestamp())
        self.route_excluding_sender(sid, 'player_action', relayed)

    # ---- routing ----

    def route_to_room(self, room: str, event: str, data: Any) -> bool:
        if not self.rooms.members(room):
            self.logger.debug(f"[drop] event={event} room={room} reason=no members")
            return False
        self._emit('send_to_room', room, event, data)
        return True

    def route_excluding_sender(self, sid: str, event: str, data: Any) -> None:
        self._emit('broadcast', event, data, skip_sid=sid)

    def _broadcast_state(self) -> None:
        players = self.registry.get_players()
        leaderboard = self.registry.get_leaderboard()
        self._emit('broadcast', 'player_update', players)
        self._emit('broadcast', 'leaderboard_update', leaderboard)

    # ---- heartbeat ----

    def timestamp(self) -> int:
        return _now_ms(self.clock)

    def beat(self) -> None:
        with self._lock:
            if self._closed:
                return
            self.channel.broadcast('heartbeat', {'timestamp': self.timestamp()})

    # ---- read-only queries ----

    def players_snapshot(self) -> Dict[str, dict]:
        with self._lock:
            return self.registry.get_players()

    def leaderboard(self, limit: Optional[int] = None):
        with self._lock:
            return self.registry.get_leaderboard(limit=limit)

    def rooms_snapshot(self):
        with self._lock:
            return self.rooms.snapshot()

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'uptime_sec': self.clock() - self.started_at,
                'players': len(self.registry),
                'rooms': len(self.rooms),
                'heartbeat_running': self.heartbeat.running,
            }
