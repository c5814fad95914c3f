"""
Submission guard — the single in-flight flag.

    if not guard.acquire():
        return Error(SubmissionInProgress())
    try:
        ...
    finally:
        guard.release()

acquire() checks and sets in one step with no await in between, which is
atomic on a single event loop.
"""

from __future__ import annotations


class SubmissionGuard:
    __slots__ = ("_busy",)

    def __init__(self) -> None:
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def acquire(self) -> bool:
        if self._busy:
            return False
        self._busy = True
        return True

    def release(self) -> None:
        self._busy = False


__all__ = ("SubmissionGuard",)
