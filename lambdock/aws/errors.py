"""Deployment error taxonomy and botocore error classification."""

import enum

from botocore.exceptions import ClientError

EXIT_FAILURE = 1
EXIT_RERUN = 75  # EX_TEMPFAIL: conflicting state was cleaned up, run deploy again

_INTEGRATION_MISSING_MESSAGE = "No integration defined for method"


class ErrorKind(enum.Enum):
    """Known remote failure conditions the deploy flow reacts to."""

    ROLE_NOT_FOUND = "role_not_found"
    API_NOT_FOUND = "api_not_found"
    FUNCTION_UPDATE_TIMEOUT = "function_update_timeout"
    RESOURCE_CONFLICT = "resource_conflict"
    INTEGRATION_MISSING = "integration_missing"
    HEALTH_CHECK_FAILED = "health_check_failed"
    NOT_FOUND = "not_found"


def error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def error_message(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Message", "")


def classify(error: ClientError) -> ErrorKind | None:
    """Map a botocore ClientError onto an ErrorKind, or None if it is not a known condition.

    This is the only place that inspects AWS error codes and messages.
    """
    code = error_code(error)
    if code == "ResourceConflictException":
        return ErrorKind.RESOURCE_CONFLICT
    if code in ("ResourceNotFoundException", "NotFoundException", "NoSuchEntity"):
        return ErrorKind.NOT_FOUND
    if code == "BadRequestException" and error_message(error).startswith(_INTEGRATION_MISSING_MESSAGE):
        return ErrorKind.INTEGRATION_MISSING
    return None


class DeployError(Exception):
    """Base class for fatal deploy conditions with a known cause."""

    kind: ErrorKind
    exit_code = EXIT_FAILURE


class RoleNotFound(DeployError):
    kind = ErrorKind.ROLE_NOT_FOUND


class ApiNotFound(DeployError):
    kind = ErrorKind.API_NOT_FOUND


class FunctionUpdateTimeout(DeployError):
    kind = ErrorKind.FUNCTION_UPDATE_TIMEOUT


class ResourceConflict(DeployError):
    """A same-named function exists in a broken state.

    The deploy flow deletes it and exits with EXIT_RERUN instead of retrying.
    """

    kind = ErrorKind.RESOURCE_CONFLICT
    exit_code = EXIT_RERUN

    def __init__(self, function_name, detail=""):
        self.function_name = function_name
        message = f"Function '{function_name}' is in a conflicting state"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class IntegrationMissing(DeployError):
    kind = ErrorKind.INTEGRATION_MISSING


class HealthCheckFailed(DeployError):
    kind = ErrorKind.HEALTH_CHECK_FAILED
