"""Inbound event payloads.

Each client->server event name maps to one payload type. Raw Socket.IO
arguments are validated here, at the boundary, so the coordinator only
ever sees well-formed values.
"""

import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, Optional


class PayloadError(Exception):
    pass


def is_finite_number(value: Any) -> bool:
    # bool is an int subclass but never a coordinate or a score
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def _object(data: Any, event: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise PayloadError(f"{event} payload must be an object")
    return data


def _text(data: Dict[str, Any], key: str, event: str, *, allow_empty: bool = True) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise PayloadError(f"{event}.{key} must be a string")
    if not allow_empty and not value.strip():
        raise PayloadError(f"{event}.{key} must not be empty")
    return value


@dataclass
class PlayerUpdate:
    fields: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def parse(cls, data: Any) -> "PlayerUpdate":
        data = _object(data, 'player_update')
        # Partial updates are tolerated: anything that is not a finite
        # number is skipped rather than rejecting the whole event.
        fields = {k: data[k] for k in ('x', 'y', 'score') if k in data and is_finite_number(data[k])}
        return cls(fields=fields)


@dataclass
class ScoreUpdate:
    score: float

    @classmethod
    def parse(cls, data: Any) -> "ScoreUpdate":
        data = _object(data, 'score_update')
        score = data.get('score')
        if not is_finite_number(score):
            raise PayloadError("score_update.score must be a finite number")
        return cls(score=score)


@dataclass
class ChatMessage:
    message: str

    @classmethod
    def parse(cls, data: Any) -> "ChatMessage":
        data = _object(data, 'chat_message')
        return cls(message=_text(data, 'message', 'chat_message'))


@dataclass
class JoinRoom:
    room: str

    @classmethod
    def parse(cls, data: Any) -> "JoinRoom":
        data = _object(data, 'join_room')
        room = _text(data, 'room', 'join_room', allow_empty=False)
        return cls(room=room.strip())


@dataclass
class RoomMessage:
    room: str
    message: str

    @classmethod
    def parse(cls, data: Any) -> "RoomMessage":
        data = _object(data, 'room_message')
        room = _text(data, 'room', 'room_message', allow_empty=False)
        message = _text(data, 'message', 'room_message')
        return cls(room=room.strip(), message=message)


@dataclass
class PlayerAction:
    action: Any
    payload: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, data: Any) -> "PlayerAction":
        data = _object(data, 'player_action')
        action = data.get('action')
        if action is None:
            raise PayloadError("player_action.action required")
        return cls(action=action, payload=dict(data))


PARSERS = {
    'player_update': PlayerUpdate.parse,
    'score_update': ScoreUpdate.parse,
    'chat_message': ChatMessage.parse,
    'join_room': JoinRoom.parse,
    'room_message': RoomMessage.parse,
    'player_action': PlayerAction.parse,
}

VALID_C2S = frozenset(PARSERS)


def parse_event(event: str, data: Any):
    parser: Optional[Any] = PARSERS.get(event)
    if parser is None:
        raise PayloadError(f"unknown event {event!r}")
    return parser(data)
