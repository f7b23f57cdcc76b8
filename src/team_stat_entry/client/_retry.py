import logging
from collections.abc import Callable
from typing import Any

from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from team_stat_entry.domain.errors import TransientNetworkError

logger = logging.getLogger(__name__)


def read_retry(
    label: str, *, attempts: int = 3, initial_wait: float = 1.0, max_wait: float = 10.0
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Return a tenacity retry decorator for idempotent reads.

    Only ``TransientNetworkError`` is retried; a warning naming *label* is
    logged before each new attempt. Writes are never wrapped with this.
    """

    def _log_retry(retry_state: RetryCallState) -> None:
        logger.warning("Retrying %s (attempt %d): %s", label, retry_state.attempt_number, retry_state.outcome)

    return retry(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential_jitter(initial=initial_wait, max=max_wait, jitter=initial_wait),
        retry=retry_if_exception_type(TransientNetworkError),
        before_sleep=_log_retry,
        reraise=True,
    )
