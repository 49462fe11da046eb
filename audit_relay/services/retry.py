from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Tuple, Type, TypeVar

from audit_relay.core.errors import RetriesExhaustedError, RetryAbortedError, UpstreamRetryableError

T = TypeVar("T")

logger = logging.getLogger(__name__)

MAX_RETRY_ATTEMPTS = 3
BASE_RETRY_DELAY = 1.0
DEFAULT_RETRY_ON: Tuple[Type[BaseException], ...] = (UpstreamRetryableError, asyncio.TimeoutError)


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    RETRYABLE = "retryable"
    TERMINAL = "terminal"


@dataclass
class RetryAttempt:
    index: int
    outcome: AttemptOutcome
    delay: float = 0.0
    error: Optional[str] = None


def backoff_delay(attempt: int, base: float = BASE_RETRY_DELAY) -> float:
    """Delay to wait after the given (1-based) attempt fails: base, 2*base, 4*base..."""
    return base * (2 ** (attempt - 1))


async def run_with_retry(
    operation: str,
    call: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = MAX_RETRY_ATTEMPTS,
    attempt_timeout: float | None = None,
    retry_on: Tuple[Type[BaseException], ...] = DEFAULT_RETRY_ON,
    should_abort: Callable[[BaseException], bool] | None = None,
    backoff_base: float = BASE_RETRY_DELAY,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    history: List[RetryAttempt] | None = None,
) -> T:
    """Run ``call`` until it returns, sequentially and at most ``max_attempts`` times.

    Exceptions outside ``retry_on`` are terminal and propagate untouched. A
    retryable exception for which ``should_abort`` is true stops the loop with
    :class:`RetryAbortedError`; otherwise the loop backs off exponentially and
    raises :class:`RetriesExhaustedError` once the attempts are used up.
    ``history`` collects one :class:`RetryAttempt` per attempt when given.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    retryable = tuple(retry_on) + (asyncio.TimeoutError,)
    last_error: BaseException | None = None

    for attempt in range(1, max_attempts + 1):
        logger.info("%s - attempt %s/%s", operation, attempt, max_attempts)
        try:
            if attempt_timeout is not None:
                result = await asyncio.wait_for(call(), timeout=attempt_timeout)
            else:
                result = await call()
        except retryable as exc:
            last_error = exc
            error_text = describe_error(exc)
            logger.warning("%s - attempt %s/%s failed: %s", operation, attempt, max_attempts, error_text)

            if should_abort is not None and should_abort(exc):
                _record(history, attempt, AttemptOutcome.TERMINAL, error=error_text)
                logger.error("%s - non-retryable failure, giving up", operation)
                raise RetryAbortedError(operation, attempt, exc) from exc

            if attempt < max_attempts:
                delay = backoff_delay(attempt, backoff_base)
                _record(history, attempt, AttemptOutcome.RETRYABLE, delay=delay, error=error_text)
                logger.info("%s - waiting %.1fs before retry", operation, delay)
                await sleep(delay)
            else:
                _record(history, attempt, AttemptOutcome.RETRYABLE, error=error_text)
        except Exception as exc:
            _record(history, attempt, AttemptOutcome.TERMINAL, error=describe_error(exc))
            raise
        else:
            _record(history, attempt, AttemptOutcome.SUCCESS)
            return result

    logger.error("%s - all %s attempts failed", operation, max_attempts)
    raise RetriesExhaustedError(operation, max_attempts, last_error) from last_error


def describe_error(exc: BaseException) -> str:
    text = str(exc)
    if text:
        return text
    if isinstance(exc, asyncio.TimeoutError):
        return "Request timed out"
    return exc.__class__.__name__


def _record(
    history: List[RetryAttempt] | None,
    index: int,
    outcome: AttemptOutcome,
    *,
    delay: float = 0.0,
    error: str | None = None,
) -> None:
    if history is not None:
        history.append(RetryAttempt(index=index, outcome=outcome, delay=delay, error=error))
