import functools
import logging
import re

from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception

from ifa_architect import config

logger = logging.getLogger(__name__)

QUOTA_MARKERS = ("quota", "resource_exhausted", "rate limit", "too many requests")
# bare 429 counts only in status-code position
_STATUS_429_RE = re.compile(r"(?:^|\b(?:http\S*|status|code|error)\W{0,3})429\b")


class ProposalError(Exception):
    """Base exception for the proposal builder."""
    pass

class QuotaExceededError(ProposalError):
    pass

class ExternalServiceError(ProposalError):
    pass

class MalformedPayloadError(ProposalError):
    pass

class RecommendationError(ProposalError):
    pass


def is_quota_error(exc: BaseException) -> bool:
    """True when an external AI call was rejected for rate/quota reasons."""
    if isinstance(exc, QuotaExceededError):
        return True
    for attr in ("status_code", "status", "code"):
        value = getattr(exc, attr, None)
        if value == 429 or str(value).upper() == "RESOURCE_EXHAUSTED":
            return True
    message = str(exc).lower().strip()
    return bool(_STATUS_429_RE.search(message)) or any(marker in message for marker in QUOTA_MARKERS)


def log_quota_retry(retry_state):
    logger.warning(
        "AI quota exceeded (attempt %d). Retrying in %.1fs...",
        retry_state.attempt_number,
        retry_state.next_action.sleep if retry_state.next_action else 0.0,
    )


def quota_retry(max_attempts=None, initial_delay=None, max_delay=None):
    """
    Retry decorator for external AI calls.

    Only quota/rate-limit failures are retried, with exponential backoff
    (initial_delay, 2x, 4x, ... capped at max_delay). Any other exception
    propagates on the first attempt; exhaustion re-raises the last error.
    """
    max_attempts = config.AI_RETRY_MAX_ATTEMPTS if max_attempts is None else max_attempts
    initial_delay = config.AI_RETRY_INITIAL_DELAY if initial_delay is None else initial_delay
    max_delay = config.AI_RETRY_MAX_DELAY if max_delay is None else max_delay
    return retry(
        stop=stop_after_attempt(max(max_attempts, 1)),
        wait=wait_exponential(multiplier=initial_delay, min=initial_delay, max=max_delay),
        retry=retry_if_exception(is_quota_error),
        before_sleep=log_quota_retry,
        reraise=True,
    )


def graceful_fallback(fallback_value):
    """Decorator to return a fallback value upon failure of an async call."""
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in {func.__name__}: {str(e)}. Using fallback.")
                return fallback_value() if callable(fallback_value) else fallback_value
        return wrapper
    return decorator
