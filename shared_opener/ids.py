import threading
import time
from typing import Callable, Optional, Set

from PySide6 import QtCore

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(n: int) -> str:
    if n < 0:
        raise ValueError("negative value")
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_DIGITS[r])
    return "".join(reversed(out))


def _random_suffix(length: int = 7) -> str:
    # QUuid v4 is the randomness source; re-encode 32 bits of it as base36
    raw = QtCore.QUuid.createUuid().toString(QtCore.QUuid.StringFormat.Id128)
    return to_base36(int(raw[:8], 16)).rjust(length, "0")[-length:]


class IdGenerator:
    """Time-prefixed random ids, unique for the lifetime of one generator."""

    def __init__(self, clock: Optional[Callable[[], float]] = None,
                 suffix: Optional[Callable[[], str]] = None):
        self._clock = clock or time.time
        self._suffix = suffix or _random_suffix
        self._issued: Set[str] = set()
        self._lock = threading.Lock()

    def next(self) -> str:
        with self._lock:
            while True:
                candidate = to_base36(int(self._clock() * 1000)) + self._suffix()
                if candidate not in self._issued:
                    self._issued.add(candidate)
                    return candidate

    __call__ = next


_default = IdGenerator()


def new_id() -> str:
    return _default.next()
