"""Config loading: YAML file, environment overrides, secret resolution."""

import logging
import os

import yaml

from lambdock.config.types import DeployConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "lambdock.yaml"


def _load_raw_config(config_path):
    """Read the YAML mapping, or an empty mapping if the file is empty."""
    if not os.path.isfile(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path) as f:
        raw = yaml.safe_load(f)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping, got {type(raw).__name__}")
    return raw


def resolve_secrets(config: DeployConfig, environ=None) -> DeployConfig:
    """Fill config.resolved_secrets from the environment.

    Every declared secret must be set: the configuration has to be fully
    resolved before it is fingerprinted.
    """
    environ = os.environ if environ is None else environ
    missing = [name for name in config.secrets if not environ.get(name)]
    if missing:
        raise ValueError(f"Missing required secret env var(s): {', '.join(missing)}")
    config.resolved_secrets = {name: environ[name] for name in config.secrets}
    return config


def load_config(config_path=DEFAULT_CONFIG_PATH, region=None, environ=None) -> DeployConfig:
    """Load and resolve the deployment config.

    Precedence for the region: file < $AWS_REGION < *region* argument.
    """
    environ = os.environ if environ is None else environ
    config = DeployConfig.from_dict(_load_raw_config(config_path))

    if environ.get("AWS_REGION"):
        config.region = environ["AWS_REGION"]
    if region:
        config.region = region

    return resolve_secrets(config, environ)
