"""Tests for botocore error classification and the deploy error hierarchy."""

import pytest
from botocore.exceptions import ClientError

from lambdock.aws.errors import (
    EXIT_FAILURE,
    EXIT_RERUN,
    ApiNotFound,
    DeployError,
    ErrorKind,
    HealthCheckFailed,
    IntegrationMissing,
    ResourceConflict,
    classify,
)


def _client_error(code, message="", operation="Op"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@pytest.mark.parametrize(
    "code,message,kind",
    [
        ("ResourceConflictException", "Function already exist: fn", ErrorKind.RESOURCE_CONFLICT),
        ("ResourceNotFoundException", "Function not found", ErrorKind.NOT_FOUND),
        ("NotFoundException", "Invalid stage identifier specified", ErrorKind.NOT_FOUND),
        ("NoSuchEntity", "The role with name x cannot be found.", ErrorKind.NOT_FOUND),
        ("BadRequestException", "No integration defined for method", ErrorKind.INTEGRATION_MISSING),
    ],
)
def test_classify_known_conditions(code, message, kind):
    assert classify(_client_error(code, message)) is kind


@pytest.mark.parametrize(
    "code,message",
    [
        ("BadRequestException", "Invalid resource identifier specified"),
        ("AccessDeniedException", "not authorized"),
        ("ThrottlingException", "Rate exceeded"),
    ],
)
def test_classify_unknown_conditions(code, message):
    assert classify(_client_error(code, message)) is None


def test_classify_without_error_block():
    assert classify(ClientError({}, "Op")) is None


def test_resource_conflict_asks_for_rerun():
    err = ResourceConflict("versioned-fn-abc", "Function already exist")
    assert err.exit_code == EXIT_RERUN
    assert err.function_name == "versioned-fn-abc"
    assert "versioned-fn-abc" in str(err)
    assert "Function already exist" in str(err)


@pytest.mark.parametrize("cls", [ApiNotFound, IntegrationMissing, HealthCheckFailed])
def test_other_errors_are_generic_failures(cls):
    err = cls("detail")
    assert isinstance(err, DeployError)
    assert err.exit_code == EXIT_FAILURE
    assert str(err) == "detail"
