"""
ZIP-packaged glTF checks: locate the main document and resolve its resources.
"""

from __future__ import annotations

import io
import zipfile
import zlib
from pathlib import PurePosixPath
from urllib.parse import unquote

from app.core.config import settings
from app.schema.validation import ArchiveMember, CheckResult
from app.validation.gltf import (
    check_asset,
    external_uris,
    load_gltf,
    structural_advisories,
)

__all__ = (
    "check_zip_compatibility",
    "check_zip_format",
    "content_type_for",
    "find_gltf_entries",
    "list_members",
    "resolve_zip_path",
)

_CONTENT_TYPES: dict[str, str] = {
    ".gltf": "model/gltf+json",
    ".glb": "model/gltf-binary",
    ".bin": "application/octet-stream",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".ktx2": "image/ktx2",
}

# Raised by zipfile while reading a damaged, encrypted or exotic member
_MEMBER_READ_ERRORS = (zipfile.BadZipFile, zlib.error, NotImplementedError, RuntimeError, EOFError)


def resolve_zip_path(base_dir: str, relative_path: str) -> str:
    """
    Join an archive-relative URI onto the directory of the glTF document.

    Works on `/`-delimited segments: `.` and empty segments are dropped and
    `..` removes the previous segment (never climbing above the archive root).
    """
    path = relative_path[2:] if relative_path.startswith("./") else relative_path

    normalized: list[str] = []
    for part in (base_dir + path).split("/"):
        if part == "..":
            if normalized:
                normalized.pop()
        elif part and part != ".":
            normalized.append(part)

    return "/".join(normalized)


def content_type_for(name: str) -> str:
    return _CONTENT_TYPES.get(PurePosixPath(name).suffix.lower(), "application/octet-stream")


def find_gltf_entries(zf: zipfile.ZipFile) -> list[str]:
    """Non-directory members named `*.gltf` (case-insensitive), in archive order."""
    return [
        info.filename
        for info in zf.infolist()
        if not info.is_dir() and info.filename.lower().endswith(".gltf")
    ]


def list_members(data: bytes) -> list[ArchiveMember]:
    """Describe the files packaged in an archive. Empty for unreadable archives."""
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            return [
                ArchiveMember(
                    name=info.filename,
                    size_bytes=info.file_size,
                    content_type=content_type_for(info.filename),
                )
                for info in zf.infolist()
                if not info.is_dir()
            ]
    except zipfile.BadZipFile:
        return []


def _base_dir(entry_name: str) -> str:
    head, sep, _ = entry_name.rpartition("/")
    return head + sep


def _resource_present(names: set[str], base_dir: str, uri: str) -> bool:
    # glTF URIs may be percent-encoded; archives store the decoded name.
    resolved = resolve_zip_path(base_dir, uri)
    return resolved in names or resolve_zip_path(base_dir, unquote(uri)) in names


def _format_from_archive(zf: zipfile.ZipFile) -> CheckResult:
    gltf_entries = find_gltf_entries(zf)

    if not gltf_entries:
        return CheckResult(valid=False, message="No GLTF file found in ZIP archive")

    if len(gltf_entries) > 1:
        return CheckResult(
            valid=False,
            message=(
                f"Multiple GLTF files found in ZIP ({len(gltf_entries)}). "
                f"ZIP should contain only one main GLTF file."
            ),
        )

    entry_name = gltf_entries[0]
    try:
        doc = load_gltf(zf.read(entry_name))
    except (ValueError, RecursionError):
        return CheckResult(valid=False, message="GLTF file in ZIP contains invalid JSON")

    failure = check_asset(doc, in_archive=True)
    if failure:
        return CheckResult(valid=False, message=failure)

    names = set(zf.namelist())
    base_dir = _base_dir(entry_name)
    missing = [
        f"{kind.capitalize()} {index}: {uri}"
        for kind, index, uri in external_uris(doc)
        if not _resource_present(names, base_dir, uri)
    ]
    if missing:
        return CheckResult(
            valid=False,
            message=f"Missing referenced resources in ZIP: {', '.join(missing)}",
        )

    return CheckResult(
        valid=True,
        message="Valid ZIP format",
        detail=f"Valid ZIP with GLTF ({entry_name})",
    )


def _compatibility_from_archive(zf: zipfile.ZipFile) -> CheckResult:
    gltf_entries = find_gltf_entries(zf)
    if not gltf_entries:
        return CheckResult(valid=False, message="No GLTF file found in ZIP")

    entry_name = gltf_entries[0]
    doc = load_gltf(zf.read(entry_name))

    names = set(zf.namelist())
    base_dir = _base_dir(entry_name)
    resource_warnings: list[str] = []
    for kind, _index, uri in external_uris(doc):
        if _resource_present(names, base_dir, uri):
            continue
        if kind == "buffer":
            resource_warnings.append(f"Referenced buffer not found in ZIP: {uri}")
        else:
            resource_warnings.append(f"Referenced texture not found in ZIP: {uri}")

    result = structural_advisories(doc, resource_warnings)
    if not result.valid:
        return result

    required = doc.get("extensionsRequired") if isinstance(doc, dict) else None
    if isinstance(required, list) and required:
        result.warnings.append(
            f"Model requires extensions: {', '.join(str(ext) for ext in required)}. "
            f"Ensure AR viewer supports these."
        )

    file_count = sum(1 for info in zf.infolist() if not info.is_dir())
    if file_count > settings.ZIP_MAX_FILE_COUNT:
        result.warnings.append(f"ZIP contains {file_count} files. Large file counts may slow loading.")

    result.message = "ZIP structure valid for AR"
    return result


def check_zip_format(data: bytes) -> CheckResult:
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            return _format_from_archive(zf)
    except zipfile.BadZipFile:
        return CheckResult(valid=False, message="Corrupted or invalid ZIP file")
    except _MEMBER_READ_ERRORS as exc:
        return CheckResult(valid=False, message=f"ZIP validation failed: {exc}")


def check_zip_compatibility(data: bytes) -> CheckResult:
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            return _compatibility_from_archive(zf)
    except (*_MEMBER_READ_ERRORS, ValueError, RecursionError) as exc:
        return CheckResult(valid=False, message=f"ZIP structure check failed: {exc}")
