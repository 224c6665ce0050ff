"""HTTP request plumbing shared by the entity modules, plus in-memory requesters for tests."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable
from urllib.parse import urlencode, urlsplit

JSON_CONTENT_TYPE = "application/json"


def _dump(payload: Any) -> bytes:
    """Encode a payload as compact UTF-8 JSON."""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def _plain(value: Any) -> Any:
    """Turn a model (anything with ``to_dict``) or plain data into JSON-compatible data."""
    if hasattr(value, "to_dict"):
        value = value.to_dict()
    return json.loads(json.dumps(value))


class ApiError(Exception):
    """Base class for errors raised while talking to the API."""


class UnexpectedStatusError(ApiError):
    """The server answered with a status code the operation does not accept."""

    def __init__(self, status_code: int, body: bytes = b"") -> None:
        super().__init__(f"unexpected status code: {status_code}")
        self.status_code = status_code
        self.body = body


class DecodeError(ApiError):
    """A response or request body could not be decoded as JSON."""


@dataclass
class Request:
    """An outgoing HTTP request."""

    method: str
    url: str
    body: bytes | None = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    def json(self) -> Any:
        """Decode the body as JSON; ``None`` when there is no body."""
        if self.body is None:
            return None
        try:
            return json.loads(self.body)
        except ValueError as exc:
            raise DecodeError(f"invalid JSON in request body: {exc}") from exc


@dataclass
class Response:
    """An HTTP response as returned by a requester."""

    status_code: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON, raising :class:`DecodeError` on failure."""
        try:
            return json.loads(self.body)
        except ValueError as exc:
            raise DecodeError(f"invalid JSON in response body: {exc}") from exc


@runtime_checkable
class Requester(Protocol):
    """Anything that can send a :class:`Request` and knows the API base URL."""

    base_url: str

    def do_request(self, request: Request) -> Response:
        """Send the request and return the response."""
        raise NotImplementedError  # pragma: no cover - protocol definition


def call(
    requester: Requester,
    method: str,
    path: str,
    *,
    query: Mapping[str, object] | None = None,
    payload: Any = None,
    ok_statuses: Iterable[int] | None = None,
) -> Response:
    """Build a request for ``path`` under the requester's base URL and send it.

    Query parameters are encoded in key order. A ``payload`` is sent as JSON.
    When ``ok_statuses`` is given, any other status raises
    :class:`UnexpectedStatusError`.
    """
    url = f"{requester.base_url}{path}"
    if query:
        url += "?" + urlencode(sorted((key, str(value)) for key, value in query.items()))

    headers: dict[str, str] = {}
    body: bytes | None = None
    if payload is not None:
        body = _dump(_plain(payload))
        headers["Content-Type"] = JSON_CONTENT_TYPE

    response = requester.do_request(Request(method, url, body, headers))

    if ok_statuses is not None and response.status_code not in frozenset(ok_statuses):
        raise UnexpectedStatusError(response.status_code, response.body)
    return response


def decode(response: Response) -> Any:
    """Decode a response body as JSON."""
    return response.json()


@dataclass
class MockResponse:
    """A canned answer for an in-memory requester."""

    status_code: int = 200
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    error: Exception | None = None


@dataclass
class RecordedRequest:
    """What an in-memory requester saw of a request."""

    method: str
    url: str
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    @classmethod
    def _from_request(cls, request: Request) -> RecordedRequest:
        body = request.body.decode("utf-8") if request.body is not None else ""
        return cls(request.method, request.url, body, dict(request.headers))


def _unexpected_request_response() -> MockResponse:
    return MockResponse(
        status_code=500,
        body='{"error": "Unexpected request"}',
        headers={"Content-Type": JSON_CONTENT_TYPE},
    )


@dataclass
class MockClient:
    """Requester that answers from responses registered per method and path."""

    base_url: str = ""
    default_response: MockResponse = field(default_factory=_unexpected_request_response)
    responses: dict[tuple[str, str], MockResponse] = field(default_factory=dict)
    last_request: RecordedRequest | None = None

    def add_response(self, method: str, path: str, response: MockResponse) -> None:
        """Register the answer for requests with this method and URL path."""
        self.responses[(method.upper(), path)] = response

    def do_request(self, request: Request) -> Response:
        self.last_request = RecordedRequest._from_request(request)
        mock = self.responses.get(
            (request.method.upper(), request.path), self.default_response
        )
        if mock.error is not None:
            raise mock.error
        return Response(mock.status_code, mock.body.encode("utf-8"), dict(mock.headers))


@dataclass
class ExpectingMockClient:
    """Requester that checks method, URL and body against expectations before answering."""

    base_url: str = ""
    expected_method: str = ""
    expected_url: str = ""
    expected_body: Any = None
    mock_response: MockResponse | None = None
    last_request: RecordedRequest | None = None

    def do_request(self, request: Request) -> Response:
        self.last_request = RecordedRequest._from_request(request)

        if self.expected_method and self.expected_method != request.method:
            raise ApiError(
                f"unexpected method: {request.method}, expected: {self.expected_method}"
            )

        if self.expected_url:
            expected_url = self.expected_url.split("?", 1)[0]
            actual_url = request.url.split("?", 1)[0]
            if not actual_url.endswith(expected_url):
                raise ApiError(
                    f"unexpected URL: {actual_url}, expected one ending in: {expected_url}"
                )

        if self.expected_body is not None and request.body is not None:
            expected = _plain(self.expected_body)
            try:
                actual = json.loads(request.body)
            except ValueError:
                actual = None
            if actual != expected:
                raise ApiError(
                    f"unexpected request body: {request.body.decode('utf-8', 'replace')}, "
                    f"expected: {json.dumps(expected, ensure_ascii=False)}"
                )

        if self.mock_response is None:
            raise ApiError("no mock response configured")
        if self.mock_response.error is not None:
            raise self.mock_response.error

        headers = dict(self.mock_response.headers)
        headers.setdefault("Content-Type", JSON_CONTENT_TYPE)
        return Response(
            self.mock_response.status_code,
            self.mock_response.body.encode("utf-8"),
            headers,
        )