import asyncio
import base64
import json

from fastmcp import Client

from app.context.validator import server
from tests.helpers._model_builders import MB, build_glb


async def _call(tool: str, arguments: dict) -> dict:
    async with Client(server) as mcp_client:
        result = await mcp_client.call_tool(tool, arguments)
    return json.loads(result.content[0].text)


def test_validate_model_tool_returns_verdict() -> None:
    payload = base64.b64encode(build_glb()).decode()
    body = asyncio.run(_call("validate_model", {"filename": "chair.glb", "content_base64": payload}))
    assert body["status"] == "ready"
    assert body["container"] == "glb"
    assert len(body["stages"]) == 3


def test_validate_model_file_tool_reads_from_disk(tmp_path) -> None:
    path = tmp_path / "chair.glb"
    path.write_bytes(build_glb(magic=0))
    body = asyncio.run(_call("validate_model_file", {"file_path": str(path)}))
    assert body["status"] == "error"
    assert body["issues"] == ["Invalid GLB file: incorrect magic number"]


def test_validate_model_file_tool_rejects_oversized_file_by_size(tmp_path) -> None:
    path = tmp_path / "huge.glb"
    with path.open("wb") as f:
        f.truncate(101 * MB)
    body = asyncio.run(_call("validate_model_file", {"file_path": str(path)}))
    assert body["status"] == "error"
    assert body["issues"] == ["File too large (101.00MB). Maximum 100MB."]
