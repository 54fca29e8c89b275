"""
Retry helpers for the remote collaborator clients.

The orchestrator never retries; a building whose collaborator call fails is
recorded as an error. Transient transport failures are retried here, inside
the HTTP clients, before an error ever reaches the pipeline.

Usage:
    from portfolio_advisor.utils.retry import RetryableRequest, RetryConfig

    with RetryableRequest("https://api.example.org", config=RetryConfig(max_retries=2)) as api:
        payload = api.post_json("/financial/risk-assessment", {"project_lifetime": 20})
"""

import functools
import logging
import random
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar

import requests

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_exceptions: Tuple[Type[Exception], ...] = field(
        default_factory=lambda: (
            requests.ConnectionError,
            requests.Timeout,
            ConnectionError,
            TimeoutError,
        )
    )
    retryable_status_codes: Tuple[int, ...] = (429, 500, 502, 503, 504)


DEFAULT_RETRY_CONFIG = RetryConfig(
    max_retries=3,
    base_delay=1.0,
    max_delay=30.0,
)


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Delay before the next attempt (exponential backoff, optional jitter).

    Args:
        attempt: Current attempt number (0-indexed)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    delay = min(
        config.base_delay * (config.exponential_base ** attempt),
        config.max_delay,
    )

    if config.jitter:
        # Up to 25% extra
        delay = delay * (1 + random.uniform(0, 0.25))

    return delay


def should_retry_exception(exc: Exception, config: RetryConfig) -> bool:
    """Check if exception is retryable."""
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code in config.retryable_status_codes

    return isinstance(exc, config.retryable_exceptions)


def retry_with_backoff(
    func: Optional[Callable[..., T]] = None,
    *,
    config: Optional[RetryConfig] = None,
    max_retries: Optional[int] = None,
    on_retry: Optional[Callable[[Exception, int], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[..., T]:
    """
    Decorator for retrying a blocking call with exponential backoff.

    Works both bare and with arguments:

        @retry_with_backoff
        def fetch(): ...

        @retry_with_backoff(max_retries=2)
        def fetch(): ...

    Args:
        func: Function to retry
        config: Full retry configuration
        max_retries: Override for max retries
        on_retry: Callback called on each retry (exc, attempt)
        sleep: Sleep function (injectable for tests)
    """
    config = config or RetryConfig()
    if max_retries is not None:
        config = replace(config, max_retries=max_retries)

    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(config.max_retries + 1):
                try:
                    return fn(*args, **kwargs)
                except Exception as exc:
                    if not should_retry_exception(exc, config):
                        logger.debug(f"Non-retryable exception: {type(exc).__name__}")
                        raise

                    if attempt >= config.max_retries:
                        logger.error(
                            f"All {config.max_retries} retries failed for {fn.__name__}"
                        )
                        raise

                    delay = calculate_delay(attempt, config)
                    logger.warning(
                        f"Retry {attempt + 1}/{config.max_retries} for {fn.__name__} "
                        f"after {delay:.1f}s (error: {exc})"
                    )
                    if on_retry:
                        on_retry(exc, attempt)
                    sleep(delay)

            raise RuntimeError("Retry logic error")

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator


class RetryableRequest:
    """
    JSON-over-HTTP session with retry on transient failures.

    Usage:
        with RetryableRequest(base_url, token="...") as api:
            data = api.post_json("/forecasting/estimate", payload)
    """

    def __init__(
        self,
        base_url: str,
        config: Optional[RetryConfig] = None,
        timeout: float = 120.0,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.config = config or DEFAULT_RETRY_CONFIG
        self.timeout = timeout
        self.token = token
        # Shared across executor threads.
        self._session = session if session is not None else requests.Session()

    @property
    def session(self) -> requests.Session:
        return self._session

    def __enter__(self) -> "RetryableRequest":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        self._session.close()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def post_json(self, path: str, payload: Dict[str, Any]) -> Any:
        """POST a JSON body and return the decoded JSON reply."""
        session = self._session
        url = f"{self.base_url}{path}"

        @retry_with_backoff(config=self.config)
        def _request() -> Any:
            response = session.post(
                url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()

        return _request()
