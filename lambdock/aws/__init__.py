"""AWS access: client handles, function and gateway wrappers, error taxonomy."""

from lambdock.aws.clients import AwsClients, make_clients
from lambdock.aws.errors import (
    EXIT_FAILURE,
    EXIT_RERUN,
    ApiNotFound,
    DeployError,
    ErrorKind,
    FunctionUpdateTimeout,
    HealthCheckFailed,
    IntegrationMissing,
    ResourceConflict,
    RoleNotFound,
    classify,
)
from lambdock.aws.functions import FunctionClient, FunctionInfo
from lambdock.aws.gateway import ApiResource, GatewayClient, endpoint_url, execute_api_arn, lambda_integration_uri

__all__ = [
    "AwsClients",
    "make_clients",
    "EXIT_FAILURE",
    "EXIT_RERUN",
    "ApiNotFound",
    "DeployError",
    "ErrorKind",
    "FunctionUpdateTimeout",
    "HealthCheckFailed",
    "IntegrationMissing",
    "ResourceConflict",
    "RoleNotFound",
    "classify",
    "FunctionClient",
    "FunctionInfo",
    "ApiResource",
    "GatewayClient",
    "endpoint_url",
    "execute_api_arn",
    "lambda_integration_uri",
]
