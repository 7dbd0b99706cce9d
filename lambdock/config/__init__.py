"""Deployment configuration loading."""

from lambdock.config.config import DEFAULT_CONFIG_PATH, load_config, resolve_secrets
from lambdock.config.types import BuildConfig, DeployConfig, ProbeConfig

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "BuildConfig",
    "DeployConfig",
    "ProbeConfig",
    "load_config",
    "resolve_secrets",
]
