"""
Binary glTF (GLB) container checks.
"""

from __future__ import annotations

import struct

from app.schema.validation import CheckResult, GlbHeader
from app.validation.gltf import load_gltf, structural_advisories

__all__ = (
    "CHUNK_TYPE_JSON",
    "GLB_MAGIC",
    "GlbError",
    "check_glb_compatibility",
    "check_glb_format",
    "parse_glb_header",
    "read_json_chunk",
)

GLB_MAGIC = 0x46546C67  # b"glTF"
GLB_VERSION = 2
CHUNK_TYPE_JSON = 0x4E4F534A  # b"JSON"

_HEADER = struct.Struct("<III")
_CHUNK_HEADER = struct.Struct("<II")


class GlbError(ValueError):
    pass


def parse_glb_header(data: bytes) -> GlbHeader:
    """Unpack the 12-byte little-endian GLB header."""
    if len(data) < _HEADER.size:
        raise GlbError("File too small to be valid GLB")
    return GlbHeader._make(_HEADER.unpack_from(data, 0))


def read_json_chunk(data: bytes) -> bytes:
    """Return the payload of the first chunk, which must be the JSON chunk."""
    offset = _HEADER.size
    if len(data) < offset + _CHUNK_HEADER.size:
        raise GlbError("Invalid GLB structure: missing JSON chunk")

    chunk_length, chunk_type = _CHUNK_HEADER.unpack_from(data, offset)
    if chunk_type != CHUNK_TYPE_JSON:
        raise GlbError("Invalid GLB structure: missing JSON chunk")

    start = offset + _CHUNK_HEADER.size
    payload = data[start : start + chunk_length]
    if len(payload) != chunk_length:
        raise GlbError("Failed to parse GLB JSON chunk")
    return payload


def check_glb_format(data: bytes) -> CheckResult:
    try:
        header = parse_glb_header(data)
    except GlbError as exc:
        return CheckResult(valid=False, message=str(exc))

    if header.magic != GLB_MAGIC:
        return CheckResult(valid=False, message="Invalid GLB file: incorrect magic number")

    if header.version != GLB_VERSION:
        return CheckResult(
            valid=False,
            message=f"Unsupported GLB version: {header.version}. Only version 2 supported.",
        )

    if header.length != len(data):
        return CheckResult(valid=False, message="GLB file length mismatch")

    return CheckResult(valid=True, message="Valid GLB format", detail="Valid GLB format")


def check_glb_compatibility(data: bytes) -> CheckResult:
    try:
        chunk = read_json_chunk(data)
    except GlbError as exc:
        return CheckResult(valid=False, message=str(exc))

    try:
        doc = load_gltf(chunk)
    except (ValueError, RecursionError):
        return CheckResult(valid=False, message="Failed to parse GLB JSON chunk")

    result = structural_advisories(doc)
    if result.valid:
        result.message = "GLB structure valid"
    return result
