"""Prune command: delete unintegrated API gateway resources left by interrupted deploys."""

import logging
import sys

from lambdock.aws import DeployError, GatewayClient, make_clients
from lambdock.commands import add_common_arguments, load_cli_config
from lambdock.deploy import prune_incomplete_resources

logger = logging.getLogger(__name__)


def handle_prune(args):
    """CLI handler for 'prune'."""
    config = load_cli_config(args)
    clients = make_clients(config.region)
    gateway = GatewayClient(clients.apigateway, dry_run=args.dry_run)
    try:
        rest_api_id = gateway.get_rest_api_id(config.gateway_name)
    except DeployError as e:
        logger.error(f"Error: {e}")
        sys.exit(e.exit_code)

    deleted = prune_incomplete_resources(gateway, rest_api_id)
    if deleted:
        logger.info(f"Pruned {len(deleted)} incomplete resource(s) from {config.gateway_name}.")
    else:
        logger.info(f"No incomplete resources in {config.gateway_name}.")


def register_prune_command(subparsers):
    """Register the prune subcommand."""
    parser = subparsers.add_parser("prune", help="Delete incomplete API gateway resources")
    add_common_arguments(parser)
    parser.set_defaults(func=handle_prune)
