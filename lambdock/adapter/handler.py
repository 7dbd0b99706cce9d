"""Wrap an application router as a Lambda handler."""

import json
import logging

from lambdock.adapter.events import Request, Response, parse_event

logger = logging.getLogger(__name__)

_INTERNAL_ERROR = Response(
    status=500,
    headers={"content-type": "application/json"},
    body=json.dumps({"error": "Internal Server Error"}),
)


def make_handler(router, create_context=None, on_error=None):
    """Build a Lambda entry point around *router*.

    Args:
        router: callable(request: Request, ctx) -> Response
        create_context: optional callable(event, context) -> ctx passed to the router
        on_error: optional callable(error, request, event) invoked when the router raises;
            request is None if the event could not be turned into a Request

    Returns:
        handler(event, context) -> dict in the result shape of the event's payload version.
    """

    def handler(event, context):
        proxy_event = parse_event(event)
        request: Request | None = None
        try:
            request = proxy_event.to_request()
            ctx = create_context(event, context) if create_context is not None else None
            response = router(request, ctx)
        except Exception as e:
            if request is None:
                logger.exception("Malformed proxy event")
            else:
                logger.exception(f"Unhandled error for {request.method} {request.path}")
            if on_error is not None:
                on_error(e, request, event)
            response = _INTERNAL_ERROR
        return proxy_event.to_result(response)

    return handler
