"""Pure inspection of a REST API resource tree: version bindings and deployment litter."""

import enum
from dataclasses import dataclass

from lambdock.aws.gateway import ApiResource

PROXY_PATH_PART = "{proxy+}"
ROOT_PATH = "/"


class BindingState(enum.Enum):
    """How far a version's /{version}/{proxy+} tree has been wired."""

    MISSING = "missing"  # no /{version} resource
    PARTIAL = "partial"  # some of segment, proxy, method, integration missing
    WIRED = "wired"  # fully integrated, not in the deployed stage yet
    LIVE = "live"  # included in the stage's current deployment


@dataclass
class Binding:
    """Observed gateway state for one version."""

    state: BindingState
    root_id: str
    version_resource: ApiResource | None = None
    proxy_resource: ApiResource | None = None

    @property
    def proxy_path(self) -> str | None:
        return self.proxy_resource.path if self.proxy_resource else None


def version_path(version: str) -> str:
    return f"/{version}"


def proxy_path(version: str) -> str:
    return f"/{version}/{PROXY_PATH_PART}"


def root_resource(resources: list[ApiResource]) -> ApiResource:
    for resource in resources:
        if resource.path == ROOT_PATH:
            return resource
    raise ValueError("REST API has no root resource '/'")


def inspect_binding(resources: list[ApiResource], stage_paths: set[str], version: str) -> Binding:
    """Classify the gateway wiring for *version*."""
    by_path = {r.path: r for r in resources}
    root = root_resource(resources)
    version_resource = by_path.get(version_path(version))
    proxy_resource = by_path.get(proxy_path(version))

    if version_resource is None:
        state = BindingState.MISSING
    elif proxy_resource is None or not proxy_resource.integrated:
        state = BindingState.PARTIAL
    elif proxy_resource.path in stage_paths:
        state = BindingState.LIVE
    else:
        state = BindingState.WIRED

    return Binding(state=state, root_id=root.id, version_resource=version_resource, proxy_resource=proxy_resource)


def is_path_prefix(prefix: str, path: str) -> bool:
    """True if *prefix* equals *path* or is one of its ancestor paths (segment-wise)."""
    if prefix == ROOT_PATH:
        return True
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def find_incomplete_resources(resources: list[ApiResource]) -> list[ApiResource]:
    """Resources left behind by interrupted runs that block stage deployments.

    A resource is incomplete if it is not on the path to any integrated
    resource. Deleting a resource deletes its children, so for nested
    incomplete resources only one is returned: {proxy+} segments are always
    kept, other resources only when no incomplete descendant exists.
    """
    integrated_paths = sorted(r.path for r in resources if r.integrated)

    incomplete = [
        r for r in resources if r.path != ROOT_PATH and not any(is_path_prefix(r.path, p) for p in integrated_paths)
    ]

    return [
        r
        for r in incomplete
        if r.path_part == PROXY_PATH_PART
        or not any(other.id != r.id and is_path_prefix(r.path, other.path) for other in incomplete)
    ]
