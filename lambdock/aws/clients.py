"""boto3 client construction.

Clients are created once per run and handed to FunctionClient/GatewayClient,
so tests can substitute fakes without patching module globals.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any

import boto3

logger = logging.getLogger(__name__)


@dataclass
class AwsClients:
    """The raw boto3 clients a deploy run talks to."""

    lambda_: Any
    apigateway: Any
    iam: Any
    region: str


def make_clients(region: str) -> AwsClients:
    """Create lambda, apigateway and iam clients for *region*.

    Honors AWS_ENDPOINT_URL so a run can target a local emulator.
    """
    endpoint_url = os.environ.get("AWS_ENDPOINT_URL")
    if endpoint_url:
        logger.info(f"Using AWS endpoint {endpoint_url} (region: {region})")
    session = boto3.session.Session(region_name=region)
    return AwsClients(
        lambda_=session.client("lambda", endpoint_url=endpoint_url),
        apigateway=session.client("apigateway", endpoint_url=endpoint_url),
        iam=session.client("iam", endpoint_url=endpoint_url),
        region=region,
    )
