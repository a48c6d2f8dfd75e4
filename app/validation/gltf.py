"""
glTF JSON document checks, shared by every container kind.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Iterable, Iterator
from typing import Any

from app.schema.validation import CheckResult

__all__ = (
    "MIN_GLTF_VERSION",
    "check_asset",
    "check_gltf_compatibility",
    "check_gltf_format",
    "external_uris",
    "load_gltf",
    "structural_advisories",
)

MIN_GLTF_VERSION = 2.0

_LEADING_FLOAT = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

_NO_SCENES = "No scenes defined. Some AR viewers may not display the model correctly."
_NO_MESHES = "No meshes found in model"
_NO_MATERIALS = "No materials defined. Model may appear without textures in AR viewers."
_HAS_ANIMATIONS = "Model contains animations. Ensure AR viewer supports animated models."


def load_gltf(data: bytes) -> Any:
    """Decode UTF-8 (BOM tolerant, lossy) and parse JSON. Raises ValueError subclasses."""
    text = data.decode("utf-8-sig", errors="replace")

    def reject_constant(name: str) -> Any:
        # NaN and Infinity are Python extensions, not JSON
        raise json.JSONDecodeError(f"Unexpected token {name}", text, max(text.find(name), 0))

    return json.loads(text, parse_constant=reject_constant)


def _field(doc: Any, key: str) -> Any:
    return doc.get(key) if isinstance(doc, dict) else None


def _is_missing(value: Any) -> bool:
    # Mirrors JSON falsiness: null, false, 0, NaN and "" count as absent.
    if value is None or value is False or value == "":
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or math.isnan(value)
    return False


def _is_empty(value: Any) -> bool:
    return _is_missing(value) or (isinstance(value, (list, str)) and len(value) == 0)


def _has_items(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0


def _parse_version(value: Any) -> float:
    """Parse the leading float of a version value; NaN when there is none."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    match = _LEADING_FLOAT.match(str(value))
    if match is None:
        return math.nan
    return float(match.group(0))


def _format_version(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def check_asset(doc: Any, *, in_archive: bool = False) -> str | None:
    """
    Check the required `asset.version` of a parsed document.

    Returns the failure message, or None when the asset block is acceptable.
    Unparseable versions compare as NaN and are let through.
    """
    asset = _field(doc, "asset")
    if _is_missing(asset):
        if in_archive:
            return "GLTF file missing required 'asset' property"
        return "Missing required 'asset' property"

    version = _field(asset, "version")
    if _is_missing(version):
        return "GLTF file missing version" if in_archive else "Missing GLTF version"

    if _parse_version(version) < MIN_GLTF_VERSION:
        return f"GLTF version {_format_version(version)} not supported. Use 2.0+"

    return None


def external_uris(doc: Any) -> Iterator[tuple[str, int, str]]:
    """Yield (kind, index, uri) for every buffer and image stored outside the document."""
    for kind, key in (("buffer", "buffers"), ("image", "images")):
        entries = _field(doc, key)
        if not isinstance(entries, list):
            continue
        for index, entry in enumerate(entries):
            uri = _field(entry, "uri")
            if isinstance(uri, str) and uri and not uri.startswith("data:"):
                yield kind, index, uri


def structural_advisories(doc: Any, resource_warnings: Iterable[str] = ()) -> CheckResult:
    """
    Scene, mesh, material and animation rules applied to every glTF document.

    A model without meshes is rejected; the rest are warnings.
    `resource_warnings` are reported between the material and animation notes.
    """
    warnings: list[str] = []

    if _is_empty(_field(doc, "scenes")):
        warnings.append(_NO_SCENES)

    if _is_empty(_field(doc, "meshes")):
        return CheckResult(valid=False, message=_NO_MESHES, warnings=warnings)

    if _is_missing(_field(doc, "materials")):
        warnings.append(_NO_MATERIALS)

    warnings.extend(resource_warnings)

    if _has_items(_field(doc, "animations")):
        warnings.append(_HAS_ANIMATIONS)

    return CheckResult(valid=True, message="Model structure valid", warnings=warnings)


def check_gltf_format(data: bytes) -> CheckResult:
    try:
        doc = load_gltf(data)
    except json.JSONDecodeError:
        return CheckResult(valid=False, message="Invalid JSON format")
    except (ValueError, RecursionError) as exc:
        return CheckResult(valid=False, message=f"GLTF parsing error: {exc}")

    failure = check_asset(doc)
    if failure:
        return CheckResult(valid=False, message=failure)

    return CheckResult(valid=True, message="Valid GLTF format", detail="Valid GLTF format")


def check_gltf_compatibility(data: bytes) -> CheckResult:
    try:
        doc = load_gltf(data)
    except (ValueError, RecursionError) as exc:
        return CheckResult(valid=False, message=f"GLTF structure check failed: {exc}")

    resource_warnings: list[str] = []
    for kind, index, _uri in external_uris(doc):
        if kind == "buffer":
            resource_warnings.append(
                f"External buffer {index} referenced. Ensure all resources are uploaded together."
            )
        else:
            resource_warnings.append(
                f"External image {index} referenced. Ensure all textures are uploaded together."
            )

    result = structural_advisories(doc, resource_warnings)
    if result.valid:
        result.message = "GLTF structure valid"
    return result
