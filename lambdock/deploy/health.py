"""Liveness probe for a freshly deployed endpoint."""

import logging
import time

import httpx

from lambdock.aws.errors import HealthCheckFailed

logger = logging.getLogger(__name__)

HEALTH_PATH = "/health"


def probe_health(url, retries=5, connect_timeout=2.0, timeout=5.0, transport=None) -> float:
    """GET *url* until it answers 2xx, with no delay between attempts.

    Returns:
        Elapsed seconds until the successful response.

    Raises:
        HealthCheckFailed: no successful response within *retries* attempts.
    """
    start = time.monotonic()
    last_error = "no attempt made"
    with httpx.Client(timeout=httpx.Timeout(timeout, connect=connect_timeout), transport=transport) as client:
        for attempt in range(1, retries + 1):
            try:
                resp = client.get(url)
            except httpx.TransportError as e:
                last_error = f"{type(e).__name__}: {e}"
                logger.info(f"Health check attempt {attempt}/{retries} failed: {last_error}")
                continue
            if resp.is_success:
                return time.monotonic() - start
            last_error = f"HTTP {resp.status_code}"
            logger.info(f"Health check attempt {attempt}/{retries} failed: {last_error}")

    elapsed = time.monotonic() - start
    raise HealthCheckFailed(f"Health check of {url} failed after {retries} attempts in {elapsed:.2f}s: {last_error}")
