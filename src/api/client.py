# manages the http connection to the store backend, helpers internal to api package
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx

from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

_token: Optional[str] = None


class ApiError(Exception):
    """
    Raised when the backend answers with an error, or cannot be reached
    (status_code is None in that case).
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def unreachable(self) -> bool:
        return self.status_code is None


def set_token(token: Optional[str]) -> None:
    """Bearer token attached to every following request; None to drop it."""
    global _token
    _token = token


def get_token() -> Optional[str]:
    return _token


def _headers() -> dict:
    headers = {"Accept": "application/json"}
    if _token:
        headers["Authorization"] = f"Bearer {_token}"
    return headers


@asynccontextmanager
async def connect() -> AsyncIterator[httpx.AsyncClient]:
    """Async context manager yielding a client bound to the backend base url."""
    client = httpx.AsyncClient(
        base_url=config.API_BASE_URL,
        headers=_headers(),
        timeout=config.REQUEST_TIMEOUT,
    )
    try:
        yield client
    finally:
        await client.aclose()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("pesan", "message", "error"):
            if body.get(key):
                return str(body[key])
    return f"Request failed with status {response.status_code}"


def unwrap(response: httpx.Response) -> Any:
    """
    Return the payload of a response.

    The backend answers either with the bare data or with an envelope
    {"status": bool, "pesan": str, "data": ...}; both are accepted.
    """
    if response.status_code >= 400:
        message = _error_message(response)
        _logger.error(f"{response.request.method} {response.request.url.path}: "
                      f"{response.status_code} {message}")
        raise ApiError(message, response.status_code)

    if response.status_code == 204 or not response.content:
        return None

    try:
        body = response.json()
    except ValueError as e:
        raise ApiError("Malformed response from server", response.status_code) from e

    if isinstance(body, dict) and "status" in body and isinstance(body["status"], bool):
        if not body["status"]:
            raise ApiError(body.get("pesan") or "Request rejected", response.status_code)
        return body.get("data")
    return body


async def request(method: str, path: str, **kwargs) -> Any:
    """Send one request and unwrap the answer, mapping transport errors to ApiError."""
    try:
        async with connect() as client:
            response = await client.request(method, path, **kwargs)
    except httpx.HTTPError as e:
        _logger.warning(f"{method} {path} failed: {e!r}")
        raise ApiError("No response from server") from e
    return unwrap(response)
