import asyncio
import time
from enum import Enum
from typing import Callable, Any, Optional
from lora.config import logger
from lora.exceptions import CircuitBreakerOpenException

class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

class CircuitBreaker:
    """
    Guards one external verifier. After ``failure_threshold`` consecutive
    failures every call is rejected until ``recovery_timeout`` has passed,
    then a single probe decides whether the circuit closes again.

    Timeouts imposed by the caller cancel the awaited call and are not
    counted here; only errors raised by the call are.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        expected_exception: type = Exception,
        name: Optional[str] = None
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception
        self.name = name or "unnamed"
        
        self._failure_count = 0
        self._opened_at: Optional[float] = None
        self._state = CircuitState.CLOSED
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state
    
    @property
    def failure_count(self) -> int:
        return self._failure_count

    async def call(self, func: Callable, *args, **kwargs) -> Any:
        async with self._lock:
            if self._state == CircuitState.OPEN:
                if self._should_attempt_reset():
                    logger.info(
                        f"Circuit breaker {self.name}: probing in half-open state",
                        extra={"circuit_breaker": self.name, "state": "half_open"}
                    )
                    self._state = CircuitState.HALF_OPEN
                else:
                    raise CircuitBreakerOpenException(self.name, self._failure_count)

        try:
            result = await func(*args, **kwargs)
        except self.expected_exception:
            await self._on_failure()
            raise
        await self._on_success()
        return result

    def reset(self):
        self._failure_count = 0
        self._opened_at = None
        self._state = CircuitState.CLOSED

    def _should_attempt_reset(self) -> bool:
        return (
            self._opened_at is not None
            and time.monotonic() - self._opened_at >= self.recovery_timeout
        )

    async def _on_success(self):
        async with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                logger.info(
                    f"Circuit breaker {self.name}: probe succeeded, closing circuit",
                    extra={"circuit_breaker": self.name, "state": "closed"}
                )
            self.reset()

    async def _on_failure(self):
        async with self._lock:
            self._failure_count += 1
            if self._state == CircuitState.HALF_OPEN or self._failure_count >= self.failure_threshold:
                if self._state != CircuitState.OPEN:
                    logger.error(
                        f"Circuit breaker {self.name}: opening circuit",
                        extra={
                            "circuit_breaker": self.name,
                            "failure_count": self._failure_count,
                            "threshold": self.failure_threshold,
                            "state": "open"
                        }
                    )
                self._state = CircuitState.OPEN
                self._opened_at = time.monotonic()
