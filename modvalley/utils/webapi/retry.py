"""
Web API retry logic with exponential backoff.

This module provides retry functionality for update-check requests to handle
transient failures like 503 Service Unavailable, timeouts, and connection errors.
"""

import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, TypeVar

import requests
from loguru import logger

# Type variable for generic decorator
F = TypeVar("F", bound=Callable[..., Any])

DEFAULT_TIMEOUT = 30


@dataclass
class WebAPIRetryConfig:
    """
    Configuration for web API retry behavior.

    :param max_retries: Maximum number of retry attempts (default: 3)
    :param backoff_factor: Exponential backoff multiplier (default: 1.0).
                          Delay calculated as: backoff_factor * (2 ** attempt)
    :param retry_on_timeout: Whether to retry on timeout errors (default: True)
    :param retry_on_connection_error: Whether to retry on connection errors (default: True)
    """

    max_retries: int = 3
    backoff_factor: float = 1.0
    retry_on_timeout: bool = True
    retry_on_connection_error: bool = True


def should_retry_exception(exc: Exception, config: WebAPIRetryConfig) -> bool:
    """
    Determine if an exception warrants a retry attempt.

    Retryable errors include:
    - HTTP 500, 502, 503, 504 (server errors)
    - Timeout errors (if enabled in config)
    - Connection errors (if enabled in config)

    HTTP 429 is not retried: it means the Nexus hourly quota is spent and
    retrying only burns more of it.

    :param exc: The exception to evaluate
    :param config: Retry configuration
    :return: True if the error should be retried, False otherwise
    """
    if isinstance(exc, requests.HTTPError):
        if exc.response is not None:
            return exc.response.status_code in {500, 502, 503, 504}
        return False

    if isinstance(exc, requests.Timeout):
        return config.retry_on_timeout

    if isinstance(exc, requests.ConnectionError):
        return config.retry_on_connection_error

    return False


def retry_api_call(config: WebAPIRetryConfig) -> Callable[[F], F]:
    """
    Decorator to add retry logic with exponential backoff to a function.

    Usage:
        @retry_api_call(config=WebAPIRetryConfig(max_retries=3))
        def my_api_call():
            return requests.get("https://smapi.io/...")

    :param config: Retry configuration
    :return: Decorated function with retry logic
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(config.max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if not should_retry_exception(e, config):
                        logger.debug(
                            f"{func.__name__} failed with non-retryable error: "
                            f"{e.__class__.__name__}"
                        )
                        raise

                    if attempt >= config.max_retries:
                        logger.warning(
                            f"{func.__name__} failed after {config.max_retries} retry attempts: "
                            f"{e.__class__.__name__}"
                        )
                        raise

                    delay = config.backoff_factor * (2**attempt)
                    logger.info(
                        f"{func.__name__} attempt {attempt + 1}/{config.max_retries + 1} failed "
                        f"({e.__class__.__name__}), retrying in {delay:.1f}s..."
                    )
                    time.sleep(delay)

            raise RuntimeError("Retry logic failed unexpectedly")

        return wrapper  # type: ignore

    return decorator


def api_request_with_retry(
    method: str,
    url: str,
    json: Any = None,
    headers: dict[str, str] | None = None,
    config: WebAPIRetryConfig | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> requests.Response:
    """
    Make an HTTP request with retry logic.

    Automatically calls raise_for_status() to trigger retries on bad status codes.

    :param method: HTTP method ("POST" or "GET")
    :param url: URL to request
    :param json: Optional JSON body for POST requests
    :param headers: Optional request headers
    :param config: Retry configuration (uses defaults if None)
    :param timeout: Per-attempt timeout in seconds
    :return: Response object from requests library
    :raises requests.HTTPError: On non-retryable HTTP errors or after max retries
    :raises requests.RequestException: On other request failures after max retries
    """
    if config is None:
        config = WebAPIRetryConfig()

    @retry_api_call(config=config)
    def _make_request() -> requests.Response:
        if method.upper() == "POST":
            response = requests.post(url, json=json, headers=headers, timeout=timeout)
        elif method.upper() == "GET":
            response = requests.get(url, headers=headers, timeout=timeout)
        else:
            raise ValueError(f"Unsupported HTTP method: {method}")

        response.raise_for_status()
        return response

    return _make_request()
