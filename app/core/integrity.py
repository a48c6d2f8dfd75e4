"""
File integrity checks: size limits applied before any byte inspection.
"""

from __future__ import annotations

from app.core.config import settings
from app.core.log import logger
from app.schema.validation import CheckResult

__all__ = (
    "BYTES_PER_MB",
    "check_file_integrity",
    "format_size_mb",
)

BYTES_PER_MB = 1024 * 1024


def format_size_mb(size: int) -> str:
    return f"{size / BYTES_PER_MB:.2f}MB"


def check_file_integrity(size: int) -> CheckResult:
    """
    Reject empty and oversized files.

    Files above the recommended size pass; they are only logged.
    """
    if size <= 0:
        return CheckResult(valid=False, message="File is empty")

    max_mb = settings.MAX_UPLOAD_SIZE_MB
    if size > max_mb * BYTES_PER_MB:
        return CheckResult(
            valid=False,
            message=f"File too large ({format_size_mb(size)}). Maximum {max_mb}MB.",
        )

    if size > settings.RECOMMENDED_SIZE_MB * BYTES_PER_MB:
        logger.warning(
            f"File size ({format_size_mb(size)}) exceeds recommended "
            f"{settings.RECOMMENDED_SIZE_MB}MB for optimal AR performance"
        )

    return CheckResult(valid=True, message="File integrity verified")
