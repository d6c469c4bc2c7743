"""
Cancellation
Cooperative cancellation context shared by one pipeline run
"""
from typing import Optional


class CancellationToken:
    """
    Best-effort cancellation flag.

    Work checks `cancelled` at its own checkpoints; nothing is interrupted,
    so a provider call already being awaited still completes.
    """

    def __init__(self):
        self._cancelled = False
        self._reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> bool:
        """Flag the run as cancelled; returns False when it already was"""
        if self._cancelled:
            return False
        self._cancelled = True
        self._reason = reason
        return True

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled}, reason={self._reason!r})"
