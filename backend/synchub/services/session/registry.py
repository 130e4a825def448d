import logging
from dataclasses import replace
from typing import Dict, Optional

from synchub.events import is_finite_number
from synchub.models import PlayerState
from .leaderboard import derive_leaderboard


UPDATABLE_FIELDS = ('x', 'y', 'score')


class PlayerRegistry:
    """Connection id -> PlayerState. The only place player state changes."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._players: Dict[str, PlayerState] = {}
        self.logger = logger or logging.getLogger(__name__)

    def __contains__(self, sid) -> bool:
        return sid in self._players

    def __len__(self) -> int:
        return len(self._players)

    def ids(self):
        return set(self._players)

    def get(self, sid: str) -> Optional[PlayerState]:
        state = self._players.get(sid)
        return replace(state) if state else None

    def add_player(self, sid: str) -> PlayerState:
        if sid in self._players:
            self.logger.warning(f"[duplicate-add] sid={sid} overwriting existing player state")
        state = PlayerState()
        self._players[sid] = state
        return replace(state)

    def update_player(self, sid: str, **fields) -> Optional[PlayerState]:
        """Overwrite the given fields of an existing player.

        Fields not passed are left unchanged. Every value must be a finite
        number; the update is rejected as a whole with ValueError before
        anything is written otherwise. An unknown sid is reported and
        ignored, it never creates an entry.
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"not updatable: {sorted(unknown)}")
        for name, value in fields.items():
            if not is_finite_number(value):
                raise ValueError(f"{name} must be a finite number, got {value!r}")

        current = self._players.get(sid)
        if current is None:
            self.logger.warning(f"[unknown-sid] update for sid={sid} ignored")
            return None
        updated = replace(current, **fields)
        self._players[sid] = updated
        return replace(updated)

    def set_room(self, sid: str, room: Optional[str]) -> Optional[PlayerState]:
        current = self._players.get(sid)
        if current is None:
            self.logger.warning(f"[unknown-sid] room change for sid={sid} ignored")
            return None
        updated = replace(current, room=room)
        self._players[sid] = updated
        return replace(updated)

    def remove_player(self, sid: str) -> Optional[PlayerState]:
        return self._players.pop(sid, None)

    def get_players(self) -> Dict[str, dict]:
        return {sid: state.to_dict() for sid, state in self._players.items()}

    def get_leaderboard(self, limit: Optional[int] = None):
        return derive_leaderboard(self._players, limit=limit)

    def checkpoint(self) -> Dict[str, PlayerState]:
        return {sid: replace(state) for sid, state in self._players.items()}

    def restore(self, checkpoint: Dict[str, PlayerState]) -> None:
        self._players = {sid: replace(state) for sid, state in checkpoint.items()}
