from fastapi.testclient import TestClient

from app.main import app
from tests.helpers._model_builders import build_glb, build_zip, gltf_bytes, gltf_document

client = TestClient(app)

AUTH = {"Authorization": "Bearer test-auth-key"}


def test_health() -> None:
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["version"]


def test_index() -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


def test_api_requires_bearer_token() -> None:
    response = client.get("/v1/auth")
    assert response.status_code in (401, 403)


def test_api_rejects_wrong_token() -> None:
    response = client.get("/v1/auth", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_auth_accepts_configured_token() -> None:
    response = client.get("/v1/auth", headers=AUTH)
    assert response.status_code == 200
    assert response.json() == {"status": "authorized"}


def test_formats_lists_containers_and_limits() -> None:
    response = client.get("/v1/formats", headers=AUTH)
    assert response.status_code == 200
    body = response.json()
    assert body["extensions"] == [".glb", ".gltf", ".zip"]
    assert body["stages"] == ["file-integrity", "format-validation", "ar-compatibility"]
    assert body["limits"]["max_size_mb"] == 100
    assert body["limits"]["zip_max_file_count"] == 50


def test_validate_glb_upload() -> None:
    response = client.post(
        "/v1/validate",
        headers=AUTH,
        files={"file": ("chair.glb", build_glb(), "model/gltf-binary")},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["filename"] == "chair.glb"
    assert body["container"] == "glb"
    assert body["status"] == "ready"
    assert body["issues"] == []
    assert [s["status"] for s in body["stages"]] == ["passed", "passed", "passed"]
    assert body["members"] == []


def test_validate_zip_upload_lists_members() -> None:
    doc = gltf_document(buffers=[{"uri": "scene.bin", "byteLength": 4}])
    content = build_zip({"scene.gltf": gltf_bytes(doc), "scene.bin": b"\x00" * 4})
    response = client.post(
        "/v1/validate",
        headers=AUTH,
        files={"file": ("bundle.zip", content, "application/zip")},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ready"
    members = {m["name"]: m["content_type"] for m in body["members"]}
    assert members == {"scene.gltf": "model/gltf+json", "scene.bin": "application/octet-stream"}


def test_validate_rejected_upload_still_answers_ok() -> None:
    response = client.post(
        "/v1/validate",
        headers=AUTH,
        files={"file": ("notes.txt", b"plain text", "text/plain")},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "error"
    assert body["container"] is None
    assert body["stages"][1]["status"] == "failed"
