import threading
from contextlib import contextmanager
from collections import defaultdict


class RoomLocks:
    """One lock per room id; reservations on different rooms never contend."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._holders: dict[str, int] = defaultdict(int)

    @contextmanager
    def hold(self, room_id: str):
        with self._guard:
            lock = self._locks.get(room_id)
            if lock is None:
                lock = self._locks[room_id] = threading.Lock()
            self._holders[room_id] += 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._holders[room_id] -= 1
                if self._holders[room_id] == 0:
                    del self._holders[room_id]
                    del self._locks[room_id]

    def active_rooms(self) -> int:
        with self._guard:
            return len(self._locks)


DEFAULT_ROOM_LOCKS = RoomLocks()
