"""Request adapter between API Gateway proxy events and an application router."""

from lambdock.adapter.events import (
    PayloadVersion,
    ProxyEventV1,
    ProxyEventV2,
    Request,
    Response,
    UnsupportedPayloadVersion,
    parse_event,
)
from lambdock.adapter.handler import make_handler

__all__ = [
    "PayloadVersion",
    "ProxyEventV1",
    "ProxyEventV2",
    "Request",
    "Response",
    "UnsupportedPayloadVersion",
    "make_handler",
    "parse_event",
]
