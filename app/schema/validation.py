"""
Model validation models.
"""

from enum import StrEnum
from typing import NamedTuple

from pydantic import BaseModel, Field


class ContainerKind(StrEnum):
    glb = "glb"
    gltf = "gltf"
    zip = "zip"


class StageName(StrEnum):
    file_integrity = "file-integrity"
    format_validation = "format-validation"
    ar_compatibility = "ar-compatibility"


class StageStatus(StrEnum):
    pending = "pending"
    processing = "processing"
    passed = "passed"
    failed = "failed"


class ValidationStatus(StrEnum):
    ready = "ready"
    warning = "warning"
    error = "error"


class GlbHeader(NamedTuple):
    magic: int
    version: int
    length: int


class ValidationStage(BaseModel):
    """One step of the validation pipeline."""

    stage: StageName
    status: StageStatus = StageStatus.pending
    message: str | None = None


class CheckResult(BaseModel):
    """Outcome of a single integrity, format or compatibility check."""

    valid: bool
    message: str
    warnings: list[str] = Field(default_factory=list)
    detail: str | None = Field(
        default=None,
        description="Container-specific confirmation shown on the stage when the check passes",
    )


class ValidationResult(BaseModel):
    """Verdict returned to the caller."""

    status: ValidationStatus
    issues: list[str] = Field(default_factory=list)
    container: ContainerKind | None = None
    stages: list[ValidationStage] = Field(default_factory=list)


class ArchiveMember(BaseModel):
    name: str
    size_bytes: int
    content_type: str


class ValidationResponse(BaseModel):
    """API response for POST /v1/validate."""

    filename: str
    size_bytes: int
    container: ContainerKind | None = None
    status: ValidationStatus
    issues: list[str] = Field(default_factory=list)
    stages: list[ValidationStage] = Field(default_factory=list)
    members: list[ArchiveMember] = Field(
        default_factory=list,
        description="Files packaged alongside the glTF document (ZIP uploads only)",
    )


class FormatLimits(BaseModel):
    max_size_mb: int
    recommended_size_mb: int
    optimal_size_mb: int
    warning_size_mb: int
    zip_max_file_count: int


class FormatsResponse(BaseModel):
    """API response for GET /v1/formats."""

    extensions: list[str]
    containers: list[ContainerKind]
    stages: list[StageName]
    limits: FormatLimits
