import itertools
import threading


class RequestFence:
    """
    Hands out increasing tokens; only the most recently issued token is current.

    A response computed under an older token arrived after a newer request
    was started and must not overwrite state.
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._current = 0
        self._lock = threading.Lock()

    def issue(self) -> int:
        with self._lock:
            self._current = next(self._counter)
            return self._current

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._current
