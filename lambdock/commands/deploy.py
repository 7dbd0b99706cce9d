"""Deploy command: build, version, reconcile, verify."""

import logging
import os
import sys

from lambdock.aws import DeployError, FunctionClient, GatewayClient, make_clients
from lambdock.build import build_artifact
from lambdock.commands import add_common_arguments, load_cli_config
from lambdock.deploy import Reconciler
from lambdock.versioning import compute_version

logger = logging.getLogger(__name__)


def run_deploy(config, project_root, clients, dry_run=False):
    """Full deploy pipeline for one project. Returns the DeployResult.

    Raises DeployError subclasses for known fatal conditions.
    """
    artifact = build_artifact(config, project_root)
    version = compute_version(artifact.path, config)

    reconciler = Reconciler(
        functions=FunctionClient(clients.lambda_, clients.iam, dry_run=dry_run),
        gateway=GatewayClient(clients.apigateway, dry_run=dry_run),
        config=config,
        dry_run=dry_run,
    )
    return reconciler.run(artifact, version)


def handle_deploy(args):
    """CLI handler for 'deploy'."""
    config = load_cli_config(args)
    project_root = os.path.dirname(os.path.abspath(args.config))

    clients = make_clients(config.region)
    try:
        run_deploy(config, project_root, clients, dry_run=args.dry_run)
    except DeployError as e:
        logger.error(f"Error: {e}")
        sys.exit(e.exit_code)


def register_deploy_command(subparsers):
    """Register the deploy subcommand."""
    parser = subparsers.add_parser("deploy", help="Build and deploy the handler behind the API gateway")
    add_common_arguments(parser)
    parser.set_defaults(func=handle_deploy)
