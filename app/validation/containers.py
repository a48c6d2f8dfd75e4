"""
Container kinds and their format / compatibility checks.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import NamedTuple

from app.schema.validation import CheckResult, ContainerKind
from app.validation.archive import check_zip_compatibility, check_zip_format
from app.validation.glb import check_glb_compatibility, check_glb_format
from app.validation.gltf import check_gltf_compatibility, check_gltf_format

__all__ = (
    "CONTAINER_CHECKS",
    "EXTENSION_KINDS",
    "ContainerChecks",
    "container_kind_for",
)


class ContainerChecks(NamedTuple):
    check_format: Callable[[bytes], CheckResult]
    check_compatibility: Callable[[bytes], CheckResult]


EXTENSION_KINDS: dict[str, ContainerKind] = {
    ".glb": ContainerKind.glb,
    ".gltf": ContainerKind.gltf,
    ".zip": ContainerKind.zip,
}

CONTAINER_CHECKS: dict[ContainerKind, ContainerChecks] = {
    ContainerKind.glb: ContainerChecks(check_glb_format, check_glb_compatibility),
    ContainerKind.gltf: ContainerChecks(check_gltf_format, check_gltf_compatibility),
    ContainerKind.zip: ContainerChecks(check_zip_format, check_zip_compatibility),
}


def container_kind_for(filename: str) -> ContainerKind | None:
    """Resolve the container kind from the file extension; None when unsupported."""
    return EXTENSION_KINDS.get(Path(filename).suffix.lower())
