"""Content-addressed deploy versions.

The version is derived from what the bundle contains (not from the zip
container), from the deploy logic itself, and from the resolved config.
Identical inputs always give the same version; the version names every
remote resource and decides whether a deploy is already live.
"""

import hashlib
import json
import logging
import shutil
import tempfile
import time
import zipfile
from pathlib import Path

from lambdock.build.bundle import VENDOR_DIR
from lambdock.config.types import DeployConfig

logger = logging.getLogger(__name__)

VERSION_LENGTH = 14

# Sub-trees whose bytes are not reproducible across installs or interpreter runs.
# Installed dependencies are covered by the requirements.txt manifest instead.
_NON_DETERMINISTIC_DIRS = (VENDOR_DIR,)
_IGNORED_DIR_NAMES = {"__pycache__"}


def _file_digest(root: Path, path: Path) -> str:
    hasher = hashlib.sha256()
    hasher.update(path.relative_to(root).as_posix().encode())
    hasher.update(b"\0")
    hasher.update(path.read_bytes())
    return hasher.hexdigest()


def hash_tree(root, pattern="*") -> str:
    """Order-independent fingerprint of all files under *root* matching *pattern*.

    Each file is hashed on its own (relative path + content), the per-file
    digests are sorted, and the sorted concatenation is hashed.
    """
    root = Path(root)
    digests = sorted(
        _file_digest(root, p)
        for p in root.rglob(pattern)
        if p.is_file() and not _IGNORED_DIR_NAMES.intersection(p.relative_to(root).parts)
    )
    return hashlib.sha256("\n".join(digests).encode()).hexdigest()


def hash_artifact(artifact_path, scratch_dir=None) -> str:
    """Fingerprint the extracted contents of a zip bundle.

    Extraction happens in a temporary directory that is removed on every
    exit path, including errors.
    """
    with tempfile.TemporaryDirectory(prefix="lambdock-", dir=scratch_dir) as tmp:
        with zipfile.ZipFile(artifact_path) as zf:
            zf.extractall(tmp)
        for name in _NON_DETERMINISTIC_DIRS:
            shutil.rmtree(Path(tmp) / name, ignore_errors=True)
        return hash_tree(tmp)


def hash_deploy_logic() -> str:
    """Fingerprint of the lambdock package sources, so deploy behavior changes force a redeploy."""
    return hash_tree(Path(__file__).parent, pattern="*.py")


def compute_version(artifact_path, config: DeployConfig, deploy_logic_hash=None, scratch_dir=None) -> str:
    """Compute the stable version identifier for a bundle and config."""
    t_start = time.monotonic()

    entries = {
        "artifact": hash_artifact(artifact_path, scratch_dir=scratch_dir),
        "deploy_logic": deploy_logic_hash if deploy_logic_hash is not None else hash_deploy_logic(),
        "config": config.fingerprint(),
    }
    canonical = json.dumps(entries, sort_keys=True, separators=(",", ":"))
    version = hashlib.sha256(canonical.encode()).hexdigest()[:VERSION_LENGTH]

    logger.info(f"Computed version in {(time.monotonic() - t_start) * 1000:.0f}ms: {version}")
    return version
