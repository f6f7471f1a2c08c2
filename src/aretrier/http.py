r"""Building blocks for retrying httpx requests.

This module provides an operation factory that sends a request through an
``httpx.AsyncClient`` and a decision policy driven by the response status
code and the server's ``Retry-After`` header.

Example:
    ```pycon
    >>> import asyncio
    >>> import httpx
    >>> from aretrier import configure
    >>> from aretrier.future import AsyncioAdapter
    >>> from aretrier.http import http_operation, retry_after_policy
    >>> attempt = configure(AsyncioAdapter())
    >>> async def main():
    ...     async with httpx.AsyncClient() as client:
    ...         return await attempt(
    ...             http_operation(client, "GET", "https://api.example.com/data"),
    ...             retry_after_policy(default_delay=500),
    ...         )
    ...
    >>> response = asyncio.run(main())  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_RETRY_DELAY",
    "RETRY_STATUS_CODES",
    "http_operation",
    "parse_retry_after",
    "retry_after_policy",
]

import logging
from contextlib import suppress
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger: logging.Logger = logging.getLogger(__name__)

# Default delay in milliseconds when the server gives no Retry-After
DEFAULT_RETRY_DELAY = 1000.0

# HTTP status codes worth retrying
# 429: Too Many Requests - Rate limiting
# 500: Internal Server Error - Temporary server issue
# 502: Bad Gateway - Upstream server error
# 503: Service Unavailable - Server overloaded or down
# 504: Gateway Timeout - Upstream server timeout
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


def parse_retry_after(retry_after_header: str | None) -> float | None:
    """Parse the value of a Retry-After header.

    The header holds either a number of seconds (e.g., "120") or an
    HTTP-date (e.g., "Wed, 21 Oct 2015 07:28:00 GMT").

    Args:
        retry_after_header: The header value, or None if the header is
            absent.

    Returns:
        The number of seconds to wait, or None if the header is absent or
        cannot be parsed. Dates in the past give 0.0.

    Example:
        ```pycon
        >>> from aretrier.http import parse_retry_after
        >>> parse_retry_after("120")
        120.0
        >>> parse_retry_after(None) is None
        True
        >>> parse_retry_after("soon") is None
        True

        ```
    """
    if retry_after_header is None:
        return None

    with suppress(ValueError):
        return max(0.0, float(retry_after_header))

    try:
        retry_date: datetime = parsedate_to_datetime(retry_after_header)
        delta_seconds = (retry_date - datetime.now(timezone.utc)).total_seconds()
        return max(0.0, delta_seconds)
    except (ValueError, TypeError, OverflowError):
        logger.debug(f"Failed to parse Retry-After header: {retry_after_header!r}")
        return None


def http_operation(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs: Any,
) -> Callable[[BaseException | None, int], Awaitable[httpx.Response]]:
    """Create an operation factory sending one HTTP request per attempt.

    Args:
        client: The client used to send the requests.
        method: The HTTP method (e.g., "GET", "POST").
        url: The URL to request.
        **kwargs: Additional keyword arguments passed to
            ``client.request``.

    Returns:
        The operation factory. Its attempts fail with
        ``httpx.HTTPStatusError`` for 4xx and 5xx responses and with the
        ``httpx.TransportError`` raised by the client for network
        failures.
    """

    async def operation(error: BaseException | None, attempt: int) -> httpx.Response:
        if error is not None:
            logger.debug(f"{method} {url}: attempt {attempt + 1} after {error!r}")
        response = await client.request(method, url, **kwargs)
        response.raise_for_status()
        return response

    return operation


def retry_after_policy(
    default_delay: float = DEFAULT_RETRY_DELAY,
    status_forcelist: tuple[int, ...] = RETRY_STATUS_CODES,
) -> Callable[[BaseException | None, int, Callable[[Any], None]], float | bool]:
    """Create a decision policy for the errors of ``http_operation``.

    Transport errors and responses with a status code in
    ``status_forcelist`` are retried. The delay is the one requested by
    the server through Retry-After, or ``default_delay``. Any other error
    is final. The policy never gives up on its own: combine it with your
    own condition to bound the number of attempts.

    Args:
        default_delay: The delay in milliseconds when the server does not
            send a usable Retry-After header. Must be >= 0.
        status_forcelist: The status codes to retry.

    Returns:
        The decision policy.

    Raises:
        ValueError: If ``default_delay`` is negative.

    Example:
        ```pycon
        >>> import httpx
        >>> from aretrier.http import retry_after_policy
        >>> policy = retry_after_policy(default_delay=250)
        >>> policy(httpx.ConnectError("refused"), 1, print)
        250
        >>> policy(ValueError("bad payload"), 1, print)
        False

        ```
    """
    if default_delay < 0:
        msg = f"default_delay must be >= 0, got {default_delay}"
        raise ValueError(msg)

    def policy(
        error: BaseException | None,
        attempt: int,  # noqa: ARG001
        decide: Callable[[Any], None],  # noqa: ARG001
    ) -> float | bool:
        if isinstance(error, httpx.HTTPStatusError):
            status_code = error.response.status_code
            if status_code not in status_forcelist:
                logger.debug(f"Status {status_code} is not retryable")
                return False
            retry_after = parse_retry_after(error.response.headers.get("Retry-After"))
            if retry_after is None:
                return default_delay
            return retry_after * 1000.0
        if isinstance(error, httpx.TransportError):
            return default_delay
        return False

    return policy
