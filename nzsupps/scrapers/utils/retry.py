"""Retry policy for anti-bot interstitial pages."""

import re

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from nzsupps.core.exceptions import InterstitialError


logger = structlog.get_logger(__name__)

INTERSTITIAL_TITLE = re.compile(
    r"just a moment|verify you are human|attention required", re.IGNORECASE
)

# Seconds to let a challenge page clear before the single retry
DEFAULT_INTERSTITIAL_WAIT = 12.0
SPRINTFIT_INTERSTITIAL_WAIT = 10.0


def is_interstitial_title(title: str) -> bool:
    return bool(INTERSTITIAL_TITLE.search(title or ""))


def _log_interstitial(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "interstitial_detected",
        url=getattr(error, "url", None),
        title=getattr(error, "title", None),
        wait_seconds=retry_state.next_action.sleep if retry_state.next_action else None,
    )


def interstitial_retry(wait_seconds: float = DEFAULT_INTERSTITIAL_WAIT) -> AsyncRetrying:
    """One timed retry when a navigation lands on an interstitial.

    Usage:
        async for attempt in interstitial_retry(10):
            with attempt:
                ...

    Args:
        wait_seconds: Fixed pause before the second attempt

    Returns:
        AsyncRetrying controller that re-raises InterstitialError after two tries
    """
    return AsyncRetrying(
        stop=stop_after_attempt(2),
        wait=wait_fixed(wait_seconds),
        retry=retry_if_exception_type(InterstitialError),
        before_sleep=_log_interstitial,
        reraise=True,
    )
