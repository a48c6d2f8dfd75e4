"""3D model validation package — GLB, glTF and ZIP-packaged glTF."""

from app.validation.archive import resolve_zip_path
from app.validation.containers import CONTAINER_CHECKS, container_kind_for
from app.validation.pipeline import validate_model, validate_model_file

__all__ = (
    "CONTAINER_CHECKS",
    "container_kind_for",
    "resolve_zip_path",
    "validate_model",
    "validate_model_file",
)
