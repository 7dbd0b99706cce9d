"""CLI commands: deploy, version, prune."""

import logging
import sys

from lambdock.config import DEFAULT_CONFIG_PATH, load_config
from lambdock.redact import register_secret_env_vars

logger = logging.getLogger(__name__)


def add_common_arguments(parser, dry_run=True):
    """Arguments shared by every command."""
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help=f"Path to deploy config (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--region", default=None, help="AWS region (default: $AWS_REGION or the config file)")
    if dry_run:
        parser.add_argument("--dry-run", action="store_true", help="Read remote state but only log mutations")


def load_cli_config(args):
    """Load the config for a CLI handler, exiting with status 1 on config errors."""
    try:
        config = load_config(args.config, region=args.region)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    register_secret_env_vars(config.secrets)
    return config
