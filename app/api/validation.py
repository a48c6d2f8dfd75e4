"""
REST API router — model validation endpoints.
"""

import asyncio

from fastapi import APIRouter, Depends, File, UploadFile

from app.api.deps import verify_token
from app.core.config import settings
from app.schema.validation import (
    ArchiveMember,
    ContainerKind,
    FormatLimits,
    FormatsResponse,
    StageName,
    ValidationResponse,
)
from app.validation import validate_model
from app.validation.archive import list_members
from app.validation.containers import EXTENSION_KINDS

__all__ = ("router",)

router = APIRouter(
    prefix="/v1",
    tags=["validation"],
    dependencies=[Depends(verify_token)],
)


@router.get("/auth", tags=["Management"])
async def auth() -> dict[str, str]:
    """
    Simple authentication endpoint to verify API key validity.
    """
    return {"status": "authorized"}


@router.get("/formats")
async def get_formats() -> FormatsResponse:
    """Supported containers, size limits and pipeline stages."""
    return FormatsResponse(
        extensions=list(EXTENSION_KINDS),
        containers=list(ContainerKind),
        stages=list(StageName),
        limits=FormatLimits(
            max_size_mb=settings.MAX_UPLOAD_SIZE_MB,
            recommended_size_mb=settings.RECOMMENDED_SIZE_MB,
            optimal_size_mb=settings.OPTIMAL_SIZE_MB,
            warning_size_mb=settings.WARNING_SIZE_MB,
            zip_max_file_count=settings.ZIP_MAX_FILE_COUNT,
        ),
    )


@router.post("/validate")
async def validate_upload(file: UploadFile = File(...)) -> ValidationResponse:
    """
    Validate an uploaded GLB, glTF or ZIP model for AR viewing.

    Always answers 200 once the pipeline has run; rejection is reported
    through `status` and `issues`.
    """
    filename = file.filename or "unknown"
    content = await file.read()

    result = await validate_model(content, filename)

    members: list[ArchiveMember] = []
    if result.container == ContainerKind.zip:
        members = await asyncio.to_thread(list_members, content)

    return ValidationResponse(
        filename=filename,
        size_bytes=len(content),
        container=result.container,
        status=result.status,
        issues=result.issues,
        stages=result.stages,
        members=members,
    )
