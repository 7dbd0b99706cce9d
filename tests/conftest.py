"""Shared pytest fixtures: sample config, bundle factory, in-memory AWS fakes."""

import os
import subprocess
import sys
import zipfile

import pytest

from lambdock.aws.errors import ApiNotFound, IntegrationMissing, ResourceConflict, RoleNotFound
from lambdock.aws.functions import FunctionInfo
from lambdock.aws.gateway import ApiResource
from lambdock.config import DeployConfig

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))

REST_API_ID = "abc123"
ROLE_ARN = "arn:aws:iam::123456789012:role/versioned-fn-lambda-role"


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def run_cli(project_root):
    """Return a callable that invokes the lambdock CLI as a subprocess."""

    def _run(*args, cwd=None, env=None):
        result = subprocess.run(
            [sys.executable, "-m", "lambdock.lambdock", *args],
            capture_output=True,
            text=True,
            cwd=cwd or project_root,
            env={**os.environ, "PYTHONPATH": project_root, **(env or {})},
        )
        return result.returncode, result.stdout, result.stderr

    return _run


@pytest.fixture
def sample_config():
    """A resolved config with one secret."""
    config = DeployConfig(
        region="eu-west-1",
        service_name="versioned-fn",
        role_name="versioned-fn-lambda-role",
        gateway_name="versioned-fn-gateway",
        stage_name="staging",
        environment={"LOG_LEVEL": "info"},
        secrets=["TELEMETRY_API_KEY"],
    )
    config.resolved_secrets = {"TELEMETRY_API_KEY": "tk_test_secret_value"}
    config.probe.retries = 3
    return config


@pytest.fixture
def make_bundle(tmp_path):
    """Return a factory that writes a zip bundle from a {name: content} mapping."""

    def _make(files, name="handler.zip", order=None):
        zip_path = tmp_path / name
        names = order if order is not None else list(files)
        with zipfile.ZipFile(zip_path, "w") as zf:
            for entry in names:
                zf.writestr(entry, files[entry])
        return zip_path

    return _make


# ── In-memory AWS fakes ─────────────────────────────────────────────


class FakeFunctionClient:
    """Stands in for FunctionClient; records every mutating call in .calls."""

    def __init__(self, functions=None, roles=None, create_conflict=False):
        self.functions = {f.name: f for f in (functions or [])}
        self.roles = roles if roles is not None else {"versioned-fn-lambda-role": ROLE_ARN}
        self.create_conflict = create_conflict
        self.calls = []

    def get_role_arn(self, role_name):
        if role_name not in self.roles:
            raise RoleNotFound(f"IAM role '{role_name}' not found")
        return self.roles[role_name]

    def get_function(self, name):
        return self.functions.get(name)

    def create_function(self, name, role_arn, zip_bytes, config):
        self.calls.append(("create_function", name))
        if self.create_conflict:
            raise ResourceConflict(name, "Function already exist")
        info = FunctionInfo(name=name, arn=f"arn:aws:lambda:eu-west-1:123456789012:function:{name}", state="Pending")
        self.functions[name] = info
        return info

    def wait_until_active(self, name, timeout=30, interval=1.0):
        info = self.functions[name]
        info.state = "Active"
        return info

    def grant_invoke(self, name, source_arn=None):
        self.calls.append(("grant_invoke", name, source_arn))

    def delete_function(self, name):
        self.calls.append(("delete_function", name))
        self.functions.pop(name, None)


class FakeGatewayClient:
    """Stands in for GatewayClient over an in-memory resource tree.

    create_deployment fails with IntegrationMissing while any resource has a
    method without integration, like API Gateway does.
    """

    def __init__(self, resources=None, deployed_paths=None, api_name="versioned-fn-gateway", always_fail_deploy=False):
        self.api_name = api_name
        self.resources = {r.id: r for r in (resources or [ApiResource(id="root", path="/")])}
        self.deployed_paths = set(deployed_paths or ())
        self.always_fail_deploy = always_fail_deploy
        self.calls = []
        self._next_id = 0

    def get_rest_api_id(self, name):
        if name != self.api_name:
            raise ApiNotFound(f"REST API '{name}' not found")
        return REST_API_ID

    def list_resources(self, rest_api_id):
        return [ApiResource(**vars(r)) for r in self.resources.values()]

    def stage_paths(self, rest_api_id, stage_name):
        return set(self.deployed_paths)

    def create_resource(self, rest_api_id, parent_id, path_part):
        parent = self.resources[parent_id]
        path = parent.path.rstrip("/") + "/" + path_part
        self._next_id += 1
        resource_id = f"res{self._next_id}"
        self.resources[resource_id] = ApiResource(id=resource_id, path=path, path_part=path_part, parent_id=parent_id)
        self.calls.append(("create_resource", path))
        return resource_id

    def put_method(self, rest_api_id, resource_id):
        self.resources[resource_id].has_method = True
        self.calls.append(("put_method", self.resources[resource_id].path))

    def put_integration(self, rest_api_id, resource_id, uri, credentials):
        self.resources[resource_id].integrated = True
        self.calls.append(("put_integration", self.resources[resource_id].path, uri, credentials))

    def create_deployment(self, rest_api_id, stage_name):
        self.calls.append(("create_deployment", stage_name))
        dangling = [r for r in self.resources.values() if r.has_method and not r.integrated]
        if dangling or self.always_fail_deploy:
            raise IntegrationMissing("No integration defined for method")
        self.deployed_paths = {r.path for r in self.resources.values() if r.integrated}

    def delete_resource(self, rest_api_id, resource_id):
        path = self.resources[resource_id].path
        self.calls.append(("delete_resource", path))
        for rid, r in list(self.resources.items()):
            if r.path == path or r.path.startswith(path + "/"):
                del self.resources[rid]


@pytest.fixture
def fake_functions():
    return FakeFunctionClient()


@pytest.fixture
def fake_gateway():
    return FakeGatewayClient()


@pytest.fixture
def fake_probe():
    """Health probe stand-in that always succeeds and records its URLs."""

    class _Probe:
        def __init__(self):
            self.urls = []

        def __call__(self, url, retries=5, connect_timeout=2.0, timeout=5.0):
            self.urls.append(url)
            return 0.25

    return _Probe()
