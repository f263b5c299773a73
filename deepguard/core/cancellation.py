"""
Cooperative cancellation token bound to an attempt budget.

The polling loop asks the token for permission before every attempt.
The token trips either when the budget is spent or when `cancel()` is
called from outside. It holds no event-loop or thread primitives, so the
same loop logic runs under asyncio or a thread-pool scheduler.
"""

from typing import Optional


class CancellationToken:
    def __init__(self, max_attempts: int):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.attempts = 0
        self._reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._reason is not None or self.attempts >= self.max_attempts

    @property
    def reason(self) -> Optional[str]:
        if self._reason:
            return self._reason
        if self.attempts >= self.max_attempts:
            return "attempt budget exhausted"
        return None

    @property
    def remaining(self) -> int:
        return max(self.max_attempts - self.attempts, 0)

    def cancel(self, reason: str = "cancelled") -> None:
        if self._reason is None:
            self._reason = reason

    def consume(self) -> bool:
        """Claim one attempt. Returns False (and claims nothing) once tripped."""
        if self.cancelled:
            return False
        self.attempts += 1
        return True
