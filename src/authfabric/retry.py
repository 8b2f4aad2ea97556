import asyncio
import logging
import random
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .errors import AuthFabricError, NetworkError
from .types import RetryConfig

T = TypeVar("T")


class RetryExecutor:
    """Runs an idempotent operation with bounded attempts and exponential backoff.

    Only AuthFabricError instances are classified; the retryable kinds are
    Network and ServerError. Anything else is returned to the caller on the
    first failure, as is any exception outside the taxonomy.

    Args:
        config (RetryConfig | None): backoff settings; defaults to RetryConfig()
        sleep (Callable | None): blocking sleep used by execute()
        async_sleep (Callable | None): coroutine sleep used by aexecute()
        rng (random.Random | None): source for jitter
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        sleep: Callable[[float], None] | None = None,
        async_sleep: Callable[[float], Awaitable[None]] | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or RetryConfig()
        self._sleep = sleep or time.sleep
        self._async_sleep = async_sleep or asyncio.sleep
        self._rng = rng or random.Random()
        self._logger = logging.getLogger("authfabric.retry")

    # ------------------------ classification ------------------------
    @staticmethod
    def should_retry(error: BaseException) -> bool:
        return isinstance(error, AuthFabricError) and error.retryable

    # ------------------------ backoff ------------------------
    def base_delay(self, attempt: int) -> float:
        """Delay before attempt+1, without jitter."""
        cfg = self.config
        try:
            delay = cfg.initial_delay * (cfg.backoff_multiplier**attempt)
        except OverflowError:
            # growth already passed any finite cap
            return cfg.max_delay
        return min(delay, cfg.max_delay)

    def calculate_delay(self, attempt: int) -> float:
        base = self.base_delay(attempt)
        jitter = 0.0
        if self.config.jitter_factor > 0:
            spread = base * self.config.jitter_factor
            jitter = self._rng.uniform(-spread, spread)
        return max(0.0, base + jitter)

    def _next_delay(self, attempt: int, error: AuthFabricError) -> float | None:
        """Return the pause before the next attempt, or None when the loop must stop."""
        if not self.should_retry(error):
            return None
        if attempt + 1 >= self.config.max_attempts:
            self._logger.warning(
                f"giving up after {attempt + 1} attempts kind={error.kind.value}"
            )
            return None
        delay = self.calculate_delay(attempt)
        self._logger.info(
            f"attempt {attempt + 1}/{self.config.max_attempts} failed "
            f"kind={error.kind.value}; retrying in {delay:.3f}s"
        )
        return delay

    # ------------------------ sync ------------------------
    def execute(self, operation: Callable[[], T]) -> T:
        if self.config.max_attempts == 0:
            raise NetworkError("Max retries exceeded")
        attempt = 0
        while True:
            try:
                return operation()
            except AuthFabricError as e:
                delay = self._next_delay(attempt, e)
                if delay is None:
                    raise
            self._sleep(delay)
            attempt += 1

    # ------------------------ async ------------------------
    async def aexecute(self, operation: Callable[[], Awaitable[T]]) -> T:
        if self.config.max_attempts == 0:
            raise NetworkError("Max retries exceeded")
        attempt = 0
        while True:
            try:
                return await operation()
            except AuthFabricError as e:
                delay = self._next_delay(attempt, e)
                if delay is None:
                    raise
            await self._async_sleep(delay)
            attempt += 1
