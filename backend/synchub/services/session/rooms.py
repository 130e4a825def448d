from typing import Dict, List, Set


class RoomIndex:
    """Room name -> member connection ids.

    A connection may sit in several rooms at once; joining a new room
    never evicts it from the ones it joined before.
    """

    def __init__(self):
        self._rooms: Dict[str, Set[str]] = {}

    def __contains__(self, room) -> bool:
        return room in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def join(self, sid: str, room: str) -> Set[str]:
        members = self._rooms.setdefault(room, set())
        members.add(sid)
        return set(members)

    def leave(self, sid: str, room: str) -> bool:
        members = self._rooms.get(room)
        if not members or sid not in members:
            return False
        members.discard(sid)
        if not members:
            del self._rooms[room]
        return True

    def leave_all(self, sid: str) -> List[str]:
        left = [room for room, members in self._rooms.items() if sid in members]
        for room in left:
            self.leave(sid, room)
        return left

    def members(self, room: str) -> Set[str]:
        return set(self._rooms.get(room, ()))

    def rooms_of(self, sid: str) -> Set[str]:
        return {room for room, members in self._rooms.items() if sid in members}

    def snapshot(self) -> Dict[str, List[str]]:
        return {room: sorted(members) for room, members in self._rooms.items()}

    def checkpoint(self) -> Dict[str, Set[str]]:
        return {room: set(members) for room, members in self._rooms.items()}

    def restore(self, checkpoint: Dict[str, Set[str]]) -> None:
        self._rooms = {room: set(members) for room, members in checkpoint.items() if members}
