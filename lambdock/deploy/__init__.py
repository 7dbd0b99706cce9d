"""Deploy library: reconciliation, gateway resource inspection, health probing."""

from lambdock.deploy.health import HEALTH_PATH, probe_health
from lambdock.deploy.reconcile import (
    DeployResult,
    Outcome,
    Reconciler,
    function_name,
    prune_incomplete_resources,
)
from lambdock.deploy.resources import (
    PROXY_PATH_PART,
    Binding,
    BindingState,
    find_incomplete_resources,
    inspect_binding,
)

__all__ = [
    "HEALTH_PATH",
    "probe_health",
    "DeployResult",
    "Outcome",
    "Reconciler",
    "function_name",
    "prune_incomplete_resources",
    "PROXY_PATH_PART",
    "Binding",
    "BindingState",
    "find_incomplete_resources",
    "inspect_binding",
]
