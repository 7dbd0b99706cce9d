"""Deployment reconciler: bring the function and its gateway binding to the live state for one version.

States: function query -> {already complete | create function | gateway only}
-> gateway query -> {already wired | rewire} -> stage deployment -> verify.
Recovery is limited to two known conditions: a conflicting function is
deleted and the run halts (exit code asks for a re-run), and dangling
unintegrated gateway resources are pruned before retrying the stage
deployment once. Every other error propagates unchanged.
"""

import enum
import logging
from dataclasses import dataclass

from lambdock.aws.errors import IntegrationMissing, ResourceConflict
from lambdock.aws.functions import FunctionClient, FunctionInfo
from lambdock.aws.gateway import ApiResource, GatewayClient, endpoint_url, execute_api_arn, lambda_integration_uri
from lambdock.build.bundle import Artifact
from lambdock.config.types import DeployConfig
from lambdock.deploy.health import HEALTH_PATH, probe_health
from lambdock.deploy.resources import PROXY_PATH_PART, Binding, BindingState, find_incomplete_resources, inspect_binding

logger = logging.getLogger(__name__)


class Outcome(enum.Enum):
    ALREADY_DEPLOYED = "already_deployed"
    DEPLOYED = "deployed"


@dataclass
class DeployResult:
    """What a reconcile run ended with."""

    version: str
    url: str
    outcome: Outcome
    health_seconds: float | None = None


def function_name(service_name: str, version: str) -> str:
    return f"{service_name}-{version}"


def _account_id(function_arn: str) -> str:
    # arn:aws:lambda:{region}:{account}:function:{name}
    return function_arn.split(":")[4]


def prune_incomplete_resources(gateway: GatewayClient, rest_api_id: str) -> list[ApiResource]:
    """Delete unintegrated resource trees left by earlier failed runs. Returns what was deleted."""
    resources = gateway.list_resources(rest_api_id)
    incomplete = find_incomplete_resources(resources)
    for resource in incomplete:
        logger.info(f"Deleting incomplete resource: {resource.id} {resource.path}")
        gateway.delete_resource(rest_api_id, resource.id)
    return incomplete


class Reconciler:
    """Drives one deployment of one version, start to finish.

    Args:
        functions: FunctionClient (or a compatible fake).
        gateway: GatewayClient (or a compatible fake).
        config: resolved DeployConfig.
        probe: callable(url, retries, connect_timeout, timeout) -> elapsed seconds.
        dry_run: if True, skip the health probe (mutations are logged by the clients).
    """

    def __init__(self, functions: FunctionClient, gateway: GatewayClient, config: DeployConfig, probe=probe_health, dry_run=False):
        self.functions = functions
        self.gateway = gateway
        self.config = config
        self.probe = probe
        self.dry_run = dry_run
        self._role_arn = None

    def run(self, artifact: Artifact, version: str) -> DeployResult:
        cfg = self.config
        name = function_name(cfg.service_name, version)

        # Step 1: function for this version
        info = self.functions.get_function(name)
        function_existed = info is not None
        if info is None:
            function_arn = self._create_function(name, artifact)
        else:
            function_arn = self._ensure_function_live(info)

        # Step 2: gateway binding for this version
        rest_api_id = self.gateway.get_rest_api_id(cfg.gateway_name)
        url = endpoint_url(rest_api_id, cfg.region, cfg.stage_name, version)
        binding = inspect_binding(
            self.gateway.list_resources(rest_api_id),
            self.gateway.stage_paths(rest_api_id, cfg.stage_name),
            version,
        )

        if binding.state is BindingState.LIVE and function_existed:
            logger.info(f"Skipping deployment as {version} is already deployed")
            logger.info(f"Endpoint: {url}")
            return DeployResult(version=version, url=url, outcome=Outcome.ALREADY_DEPLOYED)

        if function_existed:
            logger.info(f"Function {name} exists but its gateway binding is {binding.state.value}, wiring gateway only")

        # Idempotent; covers a function created by a run that stopped before granting
        self.functions.grant_invoke(name, source_arn=execute_api_arn(cfg.region, _account_id(function_arn), rest_api_id))

        # Step 3: wire missing resources
        if binding.state in (BindingState.MISSING, BindingState.PARTIAL):
            self._wire(rest_api_id, binding, version, function_arn)

        # Step 4: publish the stage
        if binding.state is not BindingState.LIVE:
            self._deploy_stage(rest_api_id)

        # Step 5: verify
        health_url = f"{url}{HEALTH_PATH}"
        if self.dry_run:
            logger.info(f"[dry-run] Skipping health check of {health_url}")
            health_seconds = None
        else:
            logger.info(f"Waiting for health check at {health_url}...")
            health_seconds = self.probe(
                health_url,
                retries=cfg.probe.retries,
                connect_timeout=cfg.probe.connect_timeout,
                timeout=cfg.probe.timeout,
            )
            logger.info(f"Health check passed in {health_seconds:.2f}s")

        logger.info(f"\nEndpoint: {url}")
        logger.info(f"Function: {name}")
        logger.info(f"Status: {'dry-run (not deployed)' if self.dry_run else 'deployed'}")
        return DeployResult(version=version, url=url, outcome=Outcome.DEPLOYED, health_seconds=health_seconds)

    def _get_role_arn(self) -> str:
        if self._role_arn is None:
            self._role_arn = self.functions.get_role_arn(self.config.role_name)
        return self._role_arn

    def _create_function(self, name: str, artifact: Artifact) -> str:
        role_arn = self._get_role_arn()
        logger.info(f"Creating function {name}...")
        try:
            info = self.functions.create_function(name, role_arn, artifact.read_bytes(), self.config)
        except ResourceConflict:
            logger.warning(f"Function {name} already exists in a conflicting state, deleting it. Re-run the deploy.")
            self.functions.delete_function(name)
            raise

        logger.info(f"Waiting for function {name} to become active...")
        self.functions.wait_until_active(name, timeout=self.config.function_wait_timeout)
        return info.arn

    def _ensure_function_live(self, info: FunctionInfo) -> str:
        if info.is_failed:
            logger.warning(f"Function {info.name} is in a failed state, deleting it. Re-run the deploy.")
            self.functions.delete_function(info.name)
            raise ResourceConflict(info.name, info.state_reason or "function is in Failed state")
        if not info.is_live:
            logger.info(f"Function {info.name} is {info.state}, waiting for it to become active...")
            self.functions.wait_until_active(info.name, timeout=self.config.function_wait_timeout)
        return info.arn

    def _wire(self, rest_api_id: str, binding: Binding, version: str, function_arn: str):
        """Create whatever part of /{version}/{proxy+} -> function is missing."""
        logger.info(f"Wiring gateway routes /{version}/{PROXY_PATH_PART}...")
        if binding.version_resource is not None:
            version_id = binding.version_resource.id
        else:
            version_id = self.gateway.create_resource(rest_api_id, binding.root_id, version)

        proxy = binding.proxy_resource
        proxy_id = proxy.id if proxy is not None else self.gateway.create_resource(rest_api_id, version_id, PROXY_PATH_PART)

        if proxy is None or not proxy.has_method:
            self.gateway.put_method(rest_api_id, proxy_id)

        uri = lambda_integration_uri(self.config.region, function_arn)
        self.gateway.put_integration(rest_api_id, proxy_id, uri, self._get_role_arn())

    def _deploy_stage(self, rest_api_id: str):
        stage = self.config.stage_name
        logger.info(f"Deploying stage '{stage}'...")
        try:
            self.gateway.create_deployment(rest_api_id, stage)
        except IntegrationMissing:
            logger.info("Deploy failed due to incomplete API resources, trying to recover...")
            prune_incomplete_resources(self.gateway, rest_api_id)
            self.gateway.create_deployment(rest_api_id, stage)
