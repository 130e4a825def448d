"""Session domain services: registry, rooms, leaderboard and heartbeat.

This package contains the in-memory synchronization core. Socket handlers
and HTTP routes go through the SessionCoordinator, keeping transport
concerns separated from state mutation rules.
"""

from .coordinator import ConnectionState, SessionCoordinator
from .heartbeat import Heartbeat
from .leaderboard import derive_leaderboard
from .registry import PlayerRegistry
from .rooms import RoomIndex

__all__ = [
    'ConnectionState',
    'Heartbeat',
    'PlayerRegistry',
    'RoomIndex',
    'SessionCoordinator',
    'derive_leaderboard',
]
