"""CLI logging setup: plain %(message)s format on stdout, secrets redacted."""

import logging
import sys

from lambdock.redact import SecretRedactingFilter


def setup_cli_logging(verbose=False):
    """Configure the root logger so log lines read like print() output.

    botocore is kept at WARNING unless *verbose*, its INFO output is noise
    for a deploy run.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(SecretRedactingFilter())
    root.addHandler(handler)
    if not verbose:
        for name in ("botocore", "boto3", "urllib3", "httpx", "httpcore"):
            logging.getLogger(name).setLevel(logging.WARNING)
