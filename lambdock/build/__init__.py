"""Deployment bundle building."""

from lambdock.build.bundle import MANIFEST_NAME, VENDOR_DIR, Artifact, build_artifact, filter_requirements, zip_directory

__all__ = [
    "MANIFEST_NAME",
    "VENDOR_DIR",
    "Artifact",
    "build_artifact",
    "filter_requirements",
    "zip_directory",
]
