"""
Low-level HTTP request helper shared by every remote store.
Handles JSON requests with retry-on-timeout and uniform response checking.
"""
import asyncio
import logging
import aiohttp

from .const import REQUEST_TIMEOUT, REQUEST_ATTEMPTS

_LOGGER = logging.getLogger(__name__)


class ApiResponseError(Exception):
    """Exception raised when the backend answers with a JSON error body."""
    def __init__(self, status: int, error_json: dict):
        self.status = status
        self.error_json = error_json
        super().__init__(f"API Error (HTTP {status}): {error_json}")


async def check_api_availability(base_url: str, timeout: int = 15) -> bool:
    """
    Check if the backend is reachable by sending a HEAD request.

    Args:
        base_url: Root URL of the backend
        timeout: Timeout in seconds for the HEAD request

    Returns:
        True if the backend answered below HTTP 500, False otherwise
    """
    try:
        timeout_config = aiohttp.ClientTimeout(total=timeout)
        async with aiohttp.ClientSession(timeout=timeout_config) as session:
            async with session.head(base_url) as response:
                if response.status >= 500:
                    _LOGGER.warning("Backend %s is not healthy (status %s)", base_url, response.status)
                    return False
                return True
    except (asyncio.TimeoutError, TimeoutError):
        _LOGGER.warning("Timeout while checking %s", base_url)
        return False
    except aiohttp.ClientError as e:
        _LOGGER.warning("Backend %s is not reachable: %s", base_url, e)
        return False


async def make_request(
    method: str,
    url: str,
    headers: dict | None = None,
    payload: dict | None = None,
    params: dict | None = None,
    timeout: float = REQUEST_TIMEOUT,
    max_attempts: int = REQUEST_ATTEMPTS,
):
    """
    Make an HTTP request with automatic retry on timeout.

    Args:
        method: HTTP method (GET, POST, PUT)
        url: Target URL for the request
        headers: HTTP headers dictionary (optional)
        payload: JSON payload for POST/PUT requests (optional)
        params: URL query parameters (optional)
        timeout: Base timeout in seconds (multiplied by attempt number for each retry)
        max_attempts: Maximum number of attempts; 1 disables retrying

    Returns:
        Parsed JSON response

    Raises:
        asyncio.TimeoutError: If every attempt timed out
        ApiResponseError: If the backend returned a JSON error body
        ValueError: If the response is not JSON or the method is unsupported
        aiohttp.ClientError: For connection level failures
    """
    method = method.upper()
    if method not in ("GET", "POST", "PUT"):
        raise ValueError(f"Unsupported HTTP method: {method}")
    headers = {"accept": "application/json", **(headers or {})}

    for attempt in range(max_attempts):
        # Timeout grows with each attempt
        timeout_config = aiohttp.ClientTimeout(total=timeout * (attempt + 1))
        try:
            async with aiohttp.ClientSession(timeout=timeout_config) as session:
                async with session.request(
                    method, url, headers=headers, json=payload, params=params
                ) as response:
                    return await _process_response(response, url)

        except (asyncio.TimeoutError, TimeoutError):
            if attempt < max_attempts - 1:
                _LOGGER.debug("Timeout on %s %s (attempt %s), retrying", method, url, attempt + 1)
                continue
            _LOGGER.warning(
                "Timeout on %s request to %s after %s attempts",
                method, url, max_attempts
            )
            raise

    raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")


async def _process_response(response, url: str):
    """
    Check the status and content type of a response and return its JSON body.

    Raises:
        ApiResponseError: For error statuses carrying a JSON body
        ValueError: For non-JSON responses
    """
    content_type = response.headers.get('Content-Type', '')

    if 200 <= response.status < 300:
        if 'application/json' in content_type:
            return await response.json()
        _LOGGER.warning(
            "Unexpected content type in successful response: %s (status %s) from %s",
            content_type, response.status, url
        )
        text = await response.text()
        raise ValueError(f"Expected JSON but got {content_type}: {text[:200]}")

    if 'application/json' in content_type:
        raise ApiResponseError(response.status, await response.json())

    # Non-JSON error response (e.g. HTML error page)
    text = await response.text()
    _LOGGER.warning(
        "Received non-JSON error response from %s: status %s, content-type: %s, body preview: %s",
        url, response.status, content_type, text[:200]
    )
    raise ValueError(
        f"HTTP {response.status} with {content_type} "
        f"(expected application/json) from {url}"
    )
