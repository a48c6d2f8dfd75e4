"""
Validation pipeline: integrity → format → AR compatibility.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import aiofiles
import aiofiles.os

from app.core.config import settings
from app.core.integrity import BYTES_PER_MB, check_file_integrity, format_size_mb
from app.core.log import logger
from app.schema.validation import (
    CheckResult,
    StageName,
    StageStatus,
    ValidationResult,
    ValidationStage,
    ValidationStatus,
)
from app.validation.containers import CONTAINER_CHECKS, container_kind_for

__all__ = (
    "StageCallback",
    "validate_model",
    "validate_model_file",
)

StageCallback = Callable[[list[ValidationStage]], None]

_UNSUPPORTED_STAGE_MESSAGE = "Unsupported file format. Use GLB, GLTF, or ZIP."
_UNSUPPORTED_ISSUE = "File format not supported. AR viewers require GLB, GLTF, or ZIP with GLTF."


async def _run_check(
    check: Callable[[bytes], CheckResult],
    content: bytes,
    failure_prefix: str,
) -> CheckResult:
    """Run a container check off the event loop, turning crashes into failed results."""
    try:
        return await asyncio.to_thread(check, content)
    except Exception as exc:
        logger.exception(f"{failure_prefix} with an unexpected error")
        return CheckResult(valid=False, message=f"{failure_prefix}: {exc}")


def _size_advice(size: int) -> list[str]:
    if size > settings.WARNING_SIZE_MB * BYTES_PER_MB:
        return [f"Large file size ({format_size_mb(size)}) may cause performance issues on mobile AR devices"]
    if size > settings.OPTIMAL_SIZE_MB * BYTES_PER_MB:
        return [
            f"File size ({format_size_mb(size)}) is above optimal "
            f"{settings.OPTIMAL_SIZE_MB}MB for best AR performance"
        ]
    return []


def _verdict(stages: list[ValidationStage]) -> ValidationStatus:
    # `ready` wins whenever every stage passed, even with collected warnings.
    if all(s.status == StageStatus.passed for s in stages):
        return ValidationStatus.ready
    if any(s.status == StageStatus.failed for s in stages):
        return ValidationStatus.error
    return ValidationStatus.warning


async def validate_model(
    content: bytes,
    filename: str,
    size: int | None = None,
    on_stage_update: StageCallback | None = None,
) -> ValidationResult:
    """
    Validate a 3D model for AR viewing.

    Runs the integrity, format and AR-compatibility stages in order, stopping
    at the first failed stage. `on_stage_update` receives a snapshot of all
    three stages after every transition. Never raises for bad input.
    """
    if size is None:
        size = len(content)

    kind = container_kind_for(filename)
    stages = [ValidationStage(stage=name) for name in StageName]
    integrity, fmt, compat = stages
    issues: list[str] = []

    def emit() -> None:
        if on_stage_update is not None:
            on_stage_update([s.model_copy() for s in stages])

    def finish() -> ValidationResult:
        status = _verdict(stages)
        logger.info(f"Validated {filename}: status={status}, issues={len(issues)}")
        return ValidationResult(
            status=status,
            issues=issues,
            container=kind,
            stages=[s.model_copy() for s in stages],
        )

    def fail(stage: ValidationStage, message: str, issue: str | None = None) -> ValidationResult:
        stage.status = StageStatus.failed
        stage.message = message
        issues.append(issue or message)
        emit()
        return finish()

    logger.debug(f"Validating {filename} ({size} bytes, container={kind})")
    emit()

    # --- 1. File integrity ---
    integrity.status = StageStatus.processing
    emit()

    result = check_file_integrity(size)
    if not result.valid:
        return fail(integrity, result.message)

    integrity.status = StageStatus.passed
    integrity.message = result.message

    # --- 2. Format validation ---
    fmt.status = StageStatus.processing
    emit()

    if kind is None:
        return fail(fmt, _UNSUPPORTED_STAGE_MESSAGE, _UNSUPPORTED_ISSUE)

    checks = CONTAINER_CHECKS[kind]
    result = await _run_check(checks.check_format, content, "Format validation failed")
    if not result.valid:
        return fail(fmt, result.message)

    fmt.status = StageStatus.passed
    fmt.message = result.detail or f"Valid {kind.upper()} format detected"

    # --- 3. AR compatibility ---
    compat.status = StageStatus.processing
    emit()

    result = await _run_check(checks.check_compatibility, content, "AR compatibility check failed")
    warnings = list(result.warnings)
    if result.valid:
        warnings.extend(_size_advice(size))
    issues.extend(warnings)

    if result.valid:
        compat.status = StageStatus.passed
        compat.message = "Model is compatible with warnings" if warnings else "Model is fully AR-compatible"
    else:
        compat.status = StageStatus.failed
        compat.message = result.message
        issues.append(result.message)

    emit()
    return finish()


async def validate_model_file(
    file_path: str,
    on_stage_update: StageCallback | None = None,
) -> ValidationResult:
    """
    Read a model from disk and validate it.

    Empty and oversized files are rejected by the integrity stage without
    being read.
    """
    size = (await aiofiles.os.stat(file_path)).st_size
    max_bytes = settings.MAX_UPLOAD_SIZE_MB * BYTES_PER_MB
    if size <= 0 or size > max_bytes:
        return await validate_model(b"", file_path, size=size, on_stage_update=on_stage_update)

    async with aiofiles.open(file_path, "rb") as f:
        content = await f.read(max_bytes + 1)
    return await validate_model(content, file_path, on_stage_update=on_stage_update)
