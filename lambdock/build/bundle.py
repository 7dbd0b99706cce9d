"""Artifact builder: copy handler sources, write the dependency manifest, zip."""

import logging
import re
import shutil
import subprocess
import sys
import zipfile
from dataclasses import dataclass
from pathlib import Path

from lambdock.config.types import DeployConfig

logger = logging.getLogger(__name__)

MANIFEST_NAME = "requirements.txt"
VENDOR_DIR = "vendor"

_REQUIREMENT_NAME_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


@dataclass
class Artifact:
    """A built deployment bundle on disk."""

    path: Path

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


def _normalize_name(name: str) -> str:
    return re.sub(r"[-_.]+", "-", name).lower()


def filter_requirements(lines, allowlist) -> list[str]:
    """Keep only requirement lines whose package name is in *allowlist*.

    Everything else is expected to be bundled with the sources.
    """
    allowed = {_normalize_name(n) for n in allowlist}
    kept = []
    for line in lines:
        stripped = line.split("#", 1)[0].strip()
        if not stripped or stripped.startswith("-"):
            continue
        m = _REQUIREMENT_NAME_RE.match(stripped)
        if m and _normalize_name(m.group(1)) in allowed:
            kept.append(stripped)
    return kept


def _write_manifest(config: DeployConfig, project_root: Path, dist: Path) -> list[str]:
    requirements_path = project_root / config.build.requirements
    lines = requirements_path.read_text().splitlines() if requirements_path.is_file() else []
    kept = filter_requirements(lines, config.external_dependencies)
    (dist / MANIFEST_NAME).write_text("".join(f"{r}\n" for r in kept))
    return kept


def _install_dependencies(dist: Path):
    """Install the manifest into dist/vendor. Output is not bit-reproducible."""
    cmd = [sys.executable, "-m", "pip", "install", "--quiet", "-r", str(dist / MANIFEST_NAME), "--target", str(dist / VENDOR_DIR)]
    logger.info(f"Installing external dependencies: {' '.join(cmd)}")
    subprocess.run(cmd, check=True)


def zip_directory(src: Path, zip_path: Path):
    """Zip *src* recursively with entries in sorted order, relative to *src*."""
    with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as zf:
        for file in sorted(p for p in src.rglob("*") if p.is_file()):
            zf.write(file, file.relative_to(src).as_posix())


def build_artifact(config: DeployConfig, project_root) -> Artifact:
    """Build the deployable zip from the handler sources.

    Layout of the bundle root: handler sources, requirements.txt, vendor/.
    """
    project_root = Path(project_root)
    source_dir = project_root / config.build.source_dir
    dist_root = project_root / config.build.dist_dir
    package_dir = dist_root / "package"
    zip_path = dist_root / config.build.artifact_name

    if not source_dir.is_dir():
        raise FileNotFoundError(f"Handler source directory not found: {source_dir}")

    shutil.rmtree(dist_root, ignore_errors=True)
    package_dir.mkdir(parents=True)

    logger.info(f"Building {zip_path} from {source_dir}...")
    shutil.copytree(source_dir, package_dir, dirs_exist_ok=True, ignore=shutil.ignore_patterns("__pycache__", "*.pyc"))

    if _write_manifest(config, project_root, package_dir):
        _install_dependencies(package_dir)

    zip_directory(package_dir, zip_path)
    return Artifact(path=zip_path)
