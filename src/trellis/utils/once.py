"""
Initialize-once cell.

``OnceCell`` holds a value that is built lazily by the first caller and then
shared by everyone. Concurrent first callers block on a lock until the one
running initializer finishes. If the initializer raises, the exception goes
to that caller and the cell stays empty, so a later call can try again.

Usage:
    cell: OnceCell[PackageDb] = OnceCell()
    db = cell.get_or_try_init(lambda: PackageDb(...))
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

_UNSET = object()


class OnceCell(Generic[T]):
    """A lock-guarded, lazily initialized, retry-on-failure value."""

    def __init__(self) -> None:
        self._value: object = _UNSET
        self._lock = threading.Lock()

    def get(self) -> Optional[T]:
        """The value if initialized, else None."""
        value = self._value
        return None if value is _UNSET else value  # type: ignore[return-value]

    def is_initialized(self) -> bool:
        return self._value is not _UNSET

    def get_or_try_init(self, init: Callable[[], T]) -> T:
        value = self._value
        if value is not _UNSET:
            return value  # type: ignore[return-value]

        with self._lock:
            # Another thread may have finished while we waited
            if self._value is _UNSET:
                self._value = init()
            return self._value  # type: ignore[return-value]
