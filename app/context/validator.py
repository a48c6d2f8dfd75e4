"""
Validator MCP server — model validation tools.
"""

import base64
import binascii

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from app.core.log import logger
from app.validation import validate_model as _validate_model
from app.validation import validate_model_file as _validate_model_file

__all__ = ("server",)

server = FastMCP("Validator")


@server.tool()
async def validate_model(filename: str, content_base64: str) -> str:
    """
    Validate a GLB, glTF or ZIP-packaged glTF model for AR viewing.

    The filename decides the container kind; the content is the raw file, base64 encoded.
    """
    try:
        content = base64.b64decode(content_base64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ToolError(f"content_base64 is not valid base64: {exc}") from exc

    logger.info(f"MCP validation requested for {filename} ({len(content)} bytes)")
    result = await _validate_model(content, filename)
    return result.model_dump_json()


@server.tool()
async def validate_model_file(file_path: str) -> str:
    """Validate a model stored on the server's local disk."""
    try:
        result = await _validate_model_file(file_path)
    except OSError as exc:
        raise ToolError(f"Cannot read {file_path}: {exc}") from exc
    return result.model_dump_json()
