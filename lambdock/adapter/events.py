"""API Gateway proxy event payloads (format 1.0 and 2.0) and normalized request/response types.

The payload format is chosen by the event's explicit "version" field; REST
API proxy events carry no version and are treated as 1.0.
"""

import base64
import enum
from dataclasses import dataclass, field


class UnsupportedPayloadVersion(ValueError):
    """The event declares a payload format version this adapter does not handle."""


class PayloadVersion(enum.Enum):
    V1 = "1.0"
    V2 = "2.0"


@dataclass(frozen=True)
class Request:
    """Normalized HTTP request handed to the application router."""

    method: str
    path: str
    query: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None
    raw_body: bytes | None = None


@dataclass(frozen=True)
class Response:
    """Normalized HTTP response returned by the application router."""

    status: int
    headers: dict[str, str | list[str]] = field(default_factory=dict)
    body: str | None = None


def _decode_body(event: dict) -> tuple[str | None, bytes | None]:
    """Return the body as text and as bytes.

    Binary payloads are not valid UTF-8: their text form has replacement
    characters and raw_body keeps the exact bytes.
    """
    body = event.get("body")
    if body is None:
        return None, None
    if event.get("isBase64Encoded"):
        raw = base64.b64decode(body)
        return raw.decode("utf-8", errors="replace"), raw
    return body, body.encode("utf-8")


def _normalize_headers(headers: dict | None) -> dict[str, str]:
    return {k.lower(): v for k, v in (headers or {}).items() if v is not None}


def _route_path(event: dict, raw_path: str) -> str:
    """Path relative to the version prefix.

    Routes are mounted as /{version}/{proxy+}; the proxy parameter holds the rest.
    """
    proxy = (event.get("pathParameters") or {}).get("proxy")
    if proxy is not None:
        return "/" + proxy
    return raw_path


def _flatten_headers(headers: dict) -> dict[str, str]:
    return {k: ",".join(v) if isinstance(v, list) else v for k, v in headers.items() if v is not None}


@dataclass(frozen=True)
class ProxyEventV1:
    """REST API (payload format 1.0) event."""

    raw: dict
    version = PayloadVersion.V1

    def to_request(self) -> Request:
        query = {k: v for k, v in (self.raw.get("queryStringParameters") or {}).items() if v is not None}
        body, raw_body = _decode_body(self.raw)
        return Request(
            method=self.raw["httpMethod"],
            path=_route_path(self.raw, self.raw["path"]),
            query=query,
            headers=_normalize_headers(self.raw.get("headers")),
            body=body,
            raw_body=raw_body,
        )

    def to_result(self, response: Response) -> dict:
        return {
            "statusCode": response.status,
            "body": response.body if response.body is not None else "",
            "headers": _flatten_headers(response.headers),
        }


@dataclass(frozen=True)
class ProxyEventV2:
    """HTTP API (payload format 2.0) event."""

    raw: dict
    version = PayloadVersion.V2

    def to_request(self) -> Request:
        query = {k: v for k, v in (self.raw.get("queryStringParameters") or {}).items() if v is not None}
        body, raw_body = _decode_body(self.raw)
        return Request(
            method=self.raw["requestContext"]["http"]["method"],
            path=_route_path(self.raw, self.raw["rawPath"]),
            query=query,
            headers=_normalize_headers(self.raw.get("headers")),
            body=body,
            raw_body=raw_body,
        )

    def to_result(self, response: Response) -> dict:
        result = {
            "statusCode": response.status,
            "headers": _flatten_headers(response.headers),
        }
        if response.body is not None:
            result["body"] = response.body
        return result


ProxyEvent = ProxyEventV1 | ProxyEventV2


def parse_event(event: dict) -> ProxyEvent:
    """Dispatch on the payload format version."""
    raw_version = event.get("version", PayloadVersion.V1.value)
    try:
        version = PayloadVersion(raw_version)
    except ValueError:
        raise UnsupportedPayloadVersion(f"Unsupported payload format version: {raw_version!r}") from None

    if version is PayloadVersion.V2:
        return ProxyEventV2(event)
    return ProxyEventV1(event)
