"""Exponential backoff with jitter around upstream LLM calls."""
from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from quizgen.errors import GenerationError

if TYPE_CHECKING:
    from quizgen.providers.base import LLMProvider

_log = logging.getLogger("quizgen.retry")

T = TypeVar("T")


@dataclass
class RetryPolicy:
    max_attempts: int = 3
    initial_delay: float = 0.5  # seconds
    max_delay: float = 5.0
    factor: float = 2.0
    jitter: tuple[float, float] = (0.85, 1.15)

    def delay_for(self, retry_number: int) -> float:
        """Un-jittered delay before retry *retry_number* (1-based)."""
        return min(self.initial_delay * self.factor ** (retry_number - 1), self.max_delay)

    async def run(
        self,
        fn: Callable[[], Awaitable[T]],
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rand: Callable[[float, float], float] = random.uniform,
    ) -> T:
        """Await ``fn()`` until it succeeds or attempts run out.

        Any exception counts as transient. After the last attempt the error
        is re-raised as ``GenerationError`` chained to the original.
        """
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1 (got {self.max_attempts})")
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await fn()
            except Exception as e:
                if attempt == self.max_attempts:
                    _log.warning("Failed after %d attempts: %s", self.max_attempts, e)
                    raise GenerationError(
                        f"upstream call failed after {self.max_attempts} attempts: {e}"
                    ) from e
                delay = self.delay_for(attempt) * rand(*self.jitter)
                _log.info(
                    "Attempt %d/%d failed (%s), retrying in %.0fms",
                    attempt, self.max_attempts, e, delay * 1000,
                )
                await sleep(delay)
        raise AssertionError("unreachable")


class RetryingGenerator:
    """An ``LLMProvider`` call wrapped in a ``RetryPolicy``.

    Only failed calls are retried; a reply that arrives but cannot be parsed
    is returned as-is.
    """

    def __init__(
        self,
        llm: LLMProvider,
        policy: RetryPolicy | None = None,
        temperature: float = 0.7,
        max_tokens: int = 8192,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rand: Callable[[float, float], float] = random.uniform,
    ):
        self.llm = llm
        self.policy = policy or RetryPolicy()
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._sleep = sleep
        self._rand = rand

    async def generate(
        self,
        prompt: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        temp = self.temperature if temperature is None else temperature
        tokens = self.max_tokens if max_tokens is None else max_tokens

        async def call() -> str:
            return await self.llm.generate(prompt, temperature=temp, max_tokens=tokens)

        return await self.policy.run(call, sleep=self._sleep, rand=self._rand)

    def name(self) -> str:
        return self.llm.name()
