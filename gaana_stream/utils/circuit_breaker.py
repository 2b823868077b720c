"""
Circuit breaker guarding calls to the upstream stream-url endpoint.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Optional

log = logging.getLogger(__name__)


class CircuitState(Enum):
    """States of the circuit breaker."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Blocking requests
    HALF_OPEN = "half_open"  # Probing whether the upstream recovered


class CircuitBreakerError(Exception):
    """Raised when a call is attempted while the circuit is open."""


class CircuitBreaker:
    """
    Stops calling an upstream that keeps failing.

    After `failure_threshold` consecutive failures the circuit opens and every
    call fails fast with CircuitBreakerError. Once `recovery_timeout` seconds
    have passed a single probe is let through (HALF_OPEN) while every other
    caller keeps failing fast; the probe's outcome either closes the circuit
    again or re-opens it. A cancelled probe leaves the circuit open so the next
    caller probes instead.

    Usage:
        async with breaker:
            await do_request()
    """

    def __init__(
        self,
        name: str = "upstream",
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: Optional[float] = None
        self._probe_task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def probe_in_flight(self) -> bool:
        return self._probe_task is not None

    def _seconds_until_probe(self) -> float:
        if self._opened_at is None:
            return 0.0
        return max(0.0, self.recovery_timeout - (time.monotonic() - self._opened_at))

    def _record_success(self) -> None:
        if self._state == CircuitState.HALF_OPEN:
            log.info(f"[green]✓ Circuit '{self.name}' recovered.[/green]")
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at = None

    def _record_failure(self) -> None:
        self._failure_count += 1

        if self._state == CircuitState.HALF_OPEN:
            log.warning(
                f"[yellow]Circuit '{self.name}': recovery probe failed, "
                "re-opening.[/yellow]"
            )
            self._open()
        elif (
            self._state == CircuitState.CLOSED
            and self._failure_count >= self.failure_threshold
        ):
            log.error(
                f"[red]✗ Circuit '{self.name}' opened after "
                f"{self._failure_count} consecutive failures. "
                f"Calls blocked for {self.recovery_timeout}s.[/red]"
            )
            self._open()

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = time.monotonic()

    async def __aenter__(self) -> "CircuitBreaker":
        async with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                raise CircuitBreakerError(
                    f"Circuit '{self.name}' is half-open and a recovery probe "
                    "is already in flight."
                )
            if self._state == CircuitState.OPEN:
                remaining = self._seconds_until_probe()
                if remaining > 0:
                    raise CircuitBreakerError(
                        f"Circuit '{self.name}' is open. "
                        f"Retry in {remaining:.0f} seconds."
                    )
                log.info(f"[yellow]Circuit '{self.name}' half-open, probing.[/yellow]")
                self._state = CircuitState.HALF_OPEN
                self._probe_task = asyncio.current_task()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        async with self._lock:
            is_probe = (
                self._probe_task is not None
                and self._probe_task is asyncio.current_task()
            )
            if is_probe:
                self._probe_task = None

            cancelled = exc_type is not None and issubclass(
                exc_type, asyncio.CancelledError
            )
            if cancelled:
                if is_probe:
                    # Timeout already elapsed, so the next caller probes
                    self._state = CircuitState.OPEN
            # Only the probe decides recovery while half-open
            elif is_probe or self._state != CircuitState.HALF_OPEN:
                if exc_type is None:
                    self._record_success()
                else:
                    self._record_failure()
        return False
