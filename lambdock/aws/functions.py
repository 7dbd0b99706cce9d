"""Cloud function client: role lookup and Lambda function lifecycle calls."""

import logging
import time
from dataclasses import dataclass

from botocore.exceptions import ClientError

from lambdock.aws.errors import (
    ErrorKind,
    FunctionUpdateTimeout,
    ResourceConflict,
    RoleNotFound,
    classify,
    error_message,
)

logger = logging.getLogger(__name__)

APIGATEWAY_PRINCIPAL = "apigateway.amazonaws.com"
INVOKE_STATEMENT_ID = "lambdock-apigateway-invoke"

# Lambda keeps invoking functions that went Inactive after idling; they reactivate on demand.
LIVE_STATES = {"Active", "Inactive"}


@dataclass
class FunctionInfo:
    """Subset of a Lambda function configuration the deploy flow needs."""

    name: str
    arn: str
    state: str = "Active"
    last_update_status: str | None = None
    state_reason: str = ""

    @classmethod
    def from_configuration(cls, cfg: dict) -> "FunctionInfo":
        return cls(
            name=cfg["FunctionName"],
            arn=cfg["FunctionArn"],
            state=cfg.get("State", "Active"),
            last_update_status=cfg.get("LastUpdateStatus"),
            state_reason=cfg.get("StateReason") or cfg.get("LastUpdateStatusReason") or "",
        )

    @property
    def is_live(self) -> bool:
        return self.state in LIVE_STATES and self.last_update_status in (None, "Successful")

    @property
    def is_failed(self) -> bool:
        return self.state == "Failed" or self.last_update_status == "Failed"


class FunctionClient:
    """Thin wrapper over the Lambda and IAM calls used by a deploy run."""

    def __init__(self, lambda_client, iam_client, dry_run=False):
        self._lambda = lambda_client
        self._iam = iam_client
        self.dry_run = dry_run

    def get_role_arn(self, role_name: str) -> str:
        """Resolve the execution role ARN. Raises RoleNotFound if the role does not exist."""
        try:
            response = self._iam.get_role(RoleName=role_name)
        except ClientError as e:
            if classify(e) is ErrorKind.NOT_FOUND:
                raise RoleNotFound(f"IAM role '{role_name}' not found") from e
            raise
        return response["Role"]["Arn"]

    def get_function(self, name: str) -> FunctionInfo | None:
        """Return the function's configuration, or None if it does not exist."""
        try:
            response = self._lambda.get_function(FunctionName=name)
        except ClientError as e:
            if classify(e) is ErrorKind.NOT_FOUND:
                return None
            raise
        return FunctionInfo.from_configuration(response["Configuration"])

    def create_function(self, name: str, role_arn: str, zip_bytes: bytes, config) -> FunctionInfo:
        """Create the function from a zip body and the declared runtime settings.

        Raises ResourceConflict when a same-named function already exists.
        """
        if self.dry_run:
            logger.info(f"[dry-run] create function {name} ({len(zip_bytes)} bytes, handler={config.handler})")
            return FunctionInfo(name=name, arn=f"arn:aws:lambda:{config.region}:000000000000:function:{name}")

        try:
            response = self._lambda.create_function(
                FunctionName=name,
                Runtime=config.runtime,
                Role=role_arn,
                Handler=config.handler,
                Code={"ZipFile": zip_bytes},
                MemorySize=config.memory_size,
                Timeout=config.timeout,
                Environment={"Variables": config.function_environment()},
                Publish=False,
            )
        except ClientError as e:
            if classify(e) is ErrorKind.RESOURCE_CONFLICT:
                raise ResourceConflict(name, error_message(e)) from e
            raise
        return FunctionInfo.from_configuration(response)

    def wait_until_active(self, name: str, timeout=30, interval=1.0) -> FunctionInfo:
        """Poll until the function leaves its transitional state.

        Raises FunctionUpdateTimeout if it fails or is still pending after *timeout* seconds.
        """
        if self.dry_run:
            logger.info(f"[dry-run] Poll every {interval}s (up to {timeout}s) for {name} to become active")
            return FunctionInfo(name=name, arn="")

        deadline = time.monotonic() + timeout
        info = None
        while True:
            info = self.get_function(name)
            if info is not None:
                if info.is_live:
                    return info
                if info.is_failed:
                    raise FunctionUpdateTimeout(f"Function '{name}' failed to become active: {info.state_reason or info.state}")
            if time.monotonic() >= deadline:
                break
            time.sleep(interval)

        last = info.state if info else "missing"
        raise FunctionUpdateTimeout(f"Timeout after {timeout}s waiting for function '{name}' to become active (last: '{last}')")

    def grant_invoke(self, name: str, source_arn=None, principal=APIGATEWAY_PRINCIPAL):
        """Allow *principal* to invoke the function, restricted to *source_arn* when given."""
        if self.dry_run:
            logger.info(f"[dry-run] add invoke permission for {principal} on {name} (source: {source_arn or 'any'})")
            return
        kwargs = {}
        if source_arn:
            kwargs["SourceArn"] = source_arn
        try:
            self._lambda.add_permission(
                FunctionName=name,
                StatementId=INVOKE_STATEMENT_ID,
                Action="lambda:InvokeFunction",
                Principal=principal,
                **kwargs,
            )
        except ClientError as e:
            if classify(e) is not ErrorKind.RESOURCE_CONFLICT:
                raise
            logger.info(f"Invoke permission already granted on {name}.")

    def delete_function(self, name: str):
        if self.dry_run:
            logger.info(f"[dry-run] delete function {name}")
            return
        self._lambda.delete_function(FunctionName=name)
