"""HTTP client abstraction for the GitLab API.

This module provides:
- HttpClient: Protocol for HTTP requests (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
- encode_multipart: multipart/form-data body for a single file field
"""

from __future__ import annotations

import json
import mimetypes
import ssl
import threading
import urllib.error
import urllib.request
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from glrel import __version__
from glrel.core.result import Err, Ok, Result

if TYPE_CHECKING:
    from glrel.core.config import ProxyConfig

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
    "encode_multipart",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
        body: Response body, when the server sent one
    """

    url: str
    status: int
    message: str
    body: str = ""

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int
    body: bytes

    def json(self) -> object:
        """Decode the body as JSON.

        Raises:
            ValueError: The body is not valid UTF-8 JSON.
        """
        return json.loads(self.body.decode("utf-8"))


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP requests.

    Implementations must be safe to call from several threads at once;
    asset uploads share one client.
    """

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        """Send a request.

        Args:
            method: HTTP method (GET, POST, PUT)
            url: Absolute URL
            headers: Extra request headers
            body: Raw request body

        Returns:
            Ok with the response for 2xx statuses, or Err with HttpError
        """
        ...


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - An optional HTTP/HTTPS proxy
    - Timeout handling
    """

    def __init__(
        self,
        *,
        timeout: float = 60.0,
        proxy: ProxyConfig | None = None,
        user_agent: str = f"glrel/{__version__}",
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        handlers: list[urllib.request.BaseHandler] = [
            urllib.request.HTTPSHandler(context=ssl.create_default_context()),
        ]
        if proxy is not None:
            handlers.append(urllib.request.ProxyHandler(proxy.as_handler_map()))
        else:
            # Proxy selection is done by resolve_config; ignore ambient env vars.
            handlers.append(urllib.request.ProxyHandler({}))
        self._opener = urllib.request.build_opener(*handlers)

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        req = urllib.request.Request(
            url,
            data=body,
            method=method,
            headers={"User-Agent": self.user_agent, **(headers or {})},
        )
        try:
            with self._opener.open(req, timeout=self.timeout) as response:
                return Ok(HttpResponse(status=response.status, body=response.read()))
        except urllib.error.HTTPError as e:
            try:
                detail = e.read().decode("utf-8", errors="replace")
            except OSError:
                detail = ""
            return Err(HttpError(url=url, status=e.code, message=str(e.reason), body=detail))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


def encode_multipart(field_name: str, path: Path) -> tuple[str, bytes]:
    """Encode one file as a multipart/form-data body.

    Returns:
        (content type header value, body bytes)

    Raises:
        OSError: The file cannot be read.
    """
    boundary = f"----glrel{uuid.uuid4().hex}"
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    filename = path.name.replace('"', "%22")
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{field_name}"; filename="{filename}"\r\n'
        f"Content-Type: {content_type}\r\n\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--\r\n".encode("utf-8")
    return f"multipart/form-data; boundary={boundary}", head + path.read_bytes() + tail


@dataclass(frozen=True, slots=True)
class RecordedRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: bytes | None

    def json(self) -> object:
        return json.loads((self.body or b"").decode("utf-8"))


def _empty_responses() -> dict[tuple[str, str], HttpResponse | HttpError]:
    return {}


def _empty_calls() -> list[RecordedRequest]:
    return []


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are keyed by (method, url); unknown requests answer 404.

    Usage:
        client = MockHttpClient()
        client.set_json("POST", "https://gitlab.com/api/v4/projects/1/releases", {})
        client.request("POST", "https://gitlab.com/api/v4/projects/1/releases")
        assert client.calls[0].method == "POST"
    """

    responses: dict[tuple[str, str], HttpResponse | HttpError] = field(
        default_factory=_empty_responses
    )
    calls: list[RecordedRequest] = field(default_factory=_empty_calls)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def set_json(self, method: str, url: str, payload: object, status: int = 200) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.responses[(method, url)] = HttpResponse(status=status, body=body)

    def set_error(self, method: str, url: str, status: int, message: str = "error") -> None:
        self.responses[(method, url)] = HttpError(url=url, status=status, message=message)

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        with self._lock:
            self.calls.append(RecordedRequest(method, url, dict(headers or {}), body))
            response = self.responses.get((method, url))

        if response is None:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def find(self, method: str, url: str) -> list[RecordedRequest]:
        return [c for c in self.calls if c.method == method and c.url == url]
