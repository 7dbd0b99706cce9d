"""Version command: build the bundle and print its version without calling AWS.

Building still runs pip when external_dependencies is non-empty.
"""

import logging
import os

from lambdock.build import build_artifact
from lambdock.commands import add_common_arguments, load_cli_config
from lambdock.versioning import compute_version

logger = logging.getLogger(__name__)


def handle_version(args):
    """CLI handler for 'version'."""
    config = load_cli_config(args)
    project_root = os.path.dirname(os.path.abspath(args.config))
    artifact = build_artifact(config, project_root)
    print(compute_version(artifact.path, config))


def register_version_command(subparsers):
    """Register the version subcommand."""
    parser = subparsers.add_parser("version", help="Print the content-addressed version of the current build")
    add_common_arguments(parser, dry_run=False)
    parser.set_defaults(func=handle_version)
