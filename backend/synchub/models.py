from dataclasses import dataclass
from typing import Optional


@dataclass
class PlayerState:
    """Gameplay attributes of one live connection."""
    x: float = 0
    y: float = 0
    score: float = 0
    room: Optional[str] = None

    def to_dict(self):
        return {
            'x': self.x,
            'y': self.y,
            'score': self.score,
            'room': self.room,
        }
