#!/usr/bin/env python3
"""Versioned serverless deploy tool: CLI entrypoint."""

import argparse

from lambdock.commands.deploy import register_deploy_command
from lambdock.commands.prune import register_prune_command
from lambdock.commands.version import register_version_command
from lambdock.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(description="Versioned serverless deploy tool")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging, including AWS SDK output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_deploy_command(subparsers)
    register_version_command(subparsers)
    register_prune_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging(verbose=args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
