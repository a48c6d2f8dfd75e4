import asyncio

import aiofiles
import pytest

from app.schema.validation import (
    ContainerKind,
    StageName,
    StageStatus,
    ValidationStage,
    ValidationStatus,
)
from app.validation.containers import CONTAINER_CHECKS, ContainerChecks, container_kind_for
from app.validation.pipeline import validate_model_file
from tests.helpers._model_builders import (
    MB,
    build_glb,
    build_zip,
    gltf_bytes,
    gltf_document,
    run_validation,
)

_SPEC_MODEL = b'{"asset":{"version":"2.0"},"meshes":[{}],"scenes":[{}],"materials":[{}]}'


def _statuses(stages: list[ValidationStage]) -> list[StageStatus]:
    return [s.status for s in stages]


@pytest.mark.parametrize(
    ("filename", "kind"),
    [
        ("car.glb", ContainerKind.glb),
        ("Car.GLTF", ContainerKind.gltf),
        ("bundle.v2.zip", ContainerKind.zip),
        ("model.obj", None),
        ("README", None),
    ],
)
def test_container_kind_for(filename: str, kind: ContainerKind | None) -> None:
    assert container_kind_for(filename) == kind


def test_well_formed_glb_is_ready_without_issues() -> None:
    result = run_validation(build_glb(json_payload=_SPEC_MODEL), "chair.glb")
    assert result.status == ValidationStatus.ready
    assert result.issues == []
    assert result.container == ContainerKind.glb
    assert [s.message for s in result.stages] == [
        "File integrity verified",
        "Valid GLB format",
        "Model is fully AR-compatible",
    ]


def test_empty_file_fails_integrity_and_stops() -> None:
    result = run_validation(b"", "chair.glb")
    assert result.status == ValidationStatus.error
    assert result.issues == ["File is empty"]
    assert _statuses(result.stages) == [StageStatus.failed, StageStatus.pending, StageStatus.pending]


def test_oversized_file_cites_size() -> None:
    result = run_validation(b"x", "chair.glb", size=101 * MB)
    assert result.status == ValidationStatus.error
    assert result.issues == ["File too large (101.00MB). Maximum 100MB."]
    assert result.stages[1].status == StageStatus.pending


def test_unsupported_extension_fails_format_stage() -> None:
    result = run_validation(b"hello", "notes.txt")
    assert result.status == ValidationStatus.error
    assert result.issues == ["File format not supported. AR viewers require GLB, GLTF, or ZIP with GLTF."]
    assert result.container is None
    assert _statuses(result.stages) == [StageStatus.passed, StageStatus.failed, StageStatus.pending]
    assert result.stages[1].message == "Unsupported file format. Use GLB, GLTF, or ZIP."


def test_bad_magic_never_reaches_compatibility() -> None:
    result = run_validation(build_glb(magic=0xDEADBEEF), "chair.glb")
    assert result.status == ValidationStatus.error
    assert any("incorrect magic number" in issue for issue in result.issues)
    assert _statuses(result.stages) == [StageStatus.passed, StageStatus.failed, StageStatus.pending]


def test_gltf_one_is_rejected() -> None:
    content = gltf_bytes({"asset": {"version": "1.0"}, "meshes": [{}]})
    result = run_validation(content, "scene.gltf")
    assert result.status == ValidationStatus.error
    assert any("not supported. Use 2.0+" in issue for issue in result.issues)


def test_zip_with_two_gltf_entries_is_rejected() -> None:
    doc = gltf_bytes(gltf_document())
    result = run_validation(build_zip({"a.gltf": doc, "b.gltf": doc}), "bundle.zip")
    assert result.status == ValidationStatus.error
    assert any("Multiple GLTF files found in ZIP (2)" in issue for issue in result.issues)


def test_zip_with_missing_texture_fails_format_stage() -> None:
    doc = gltf_document(images=[{"uri": "textures/logo.png"}])
    result = run_validation(build_zip({"scene.gltf": gltf_bytes(doc)}), "bundle.zip")
    assert result.status == ValidationStatus.error
    assert result.stages[1].status == StageStatus.failed
    assert any("textures/logo.png" in issue for issue in result.issues)


def test_zip_format_stage_names_the_gltf_entry() -> None:
    files = {"car/scene.gltf": gltf_bytes(gltf_document()), "car/readme.txt": "hi"}
    result = run_validation(build_zip(files), "car.zip")
    assert result.status == ValidationStatus.ready
    assert result.stages[1].message == "Valid ZIP with GLTF (car/scene.gltf)"


def test_warnings_do_not_downgrade_ready_verdict() -> None:
    # All three stages pass, so the verdict stays `ready`; warnings live only in `issues`.
    result = run_validation(gltf_bytes(gltf_document(materials=None)), "scene.gltf")
    assert "No materials defined. Model may appear without textures in AR viewers." in result.issues
    assert result.stages[2].status == StageStatus.passed
    assert result.stages[2].message == "Model is compatible with warnings"
    assert result.status == ValidationStatus.ready


def test_missing_meshes_fails_compatibility_stage() -> None:
    result = run_validation(gltf_bytes(gltf_document(scenes=None, meshes=[])), "scene.gltf")
    assert result.status == ValidationStatus.error
    assert _statuses(result.stages) == [StageStatus.passed, StageStatus.passed, StageStatus.failed]
    assert result.issues == [
        "No scenes defined. Some AR viewers may not display the model correctly.",
        "No meshes found in model",
    ]


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (6 * MB, "File size (6.00MB) is above optimal 5MB for best AR performance"),
        (25 * MB, "Large file size (25.00MB) may cause performance issues on mobile AR devices"),
    ],
)
def test_size_advice_is_added_to_issues(size: int, expected: str) -> None:
    result = run_validation(gltf_bytes(gltf_document()), "scene.gltf", size=size)
    assert result.issues == [expected]
    assert result.stages[2].message == "Model is compatible with warnings"


def test_size_advice_thresholds_are_exclusive() -> None:
    at_optimal = run_validation(gltf_bytes(gltf_document()), "scene.gltf", size=5 * MB)
    assert at_optimal.issues == []
    assert at_optimal.stages[2].message == "Model is fully AR-compatible"

    at_warning = run_validation(gltf_bytes(gltf_document()), "scene.gltf", size=20 * MB)
    assert at_warning.issues == ["File size (20.00MB) is above optimal 5MB for best AR performance"]


def test_oversized_file_on_disk_is_rejected_without_reading(tmp_path, monkeypatch) -> None:
    path = tmp_path / "huge.glb"
    with path.open("wb") as f:
        f.truncate(101 * MB)

    def refuse_open(*args, **kwargs):
        raise AssertionError("oversized file must not be opened")

    monkeypatch.setattr(aiofiles, "open", refuse_open)
    result = asyncio.run(validate_model_file(str(path)))
    assert result.status == ValidationStatus.error
    assert result.issues == ["File too large (101.00MB). Maximum 100MB."]


def test_empty_file_on_disk_fails_integrity(tmp_path) -> None:
    path = tmp_path / "empty.gltf"
    path.write_bytes(b"")
    result = asyncio.run(validate_model_file(str(path)))
    assert result.issues == ["File is empty"]


def test_model_file_on_disk_is_validated(tmp_path) -> None:
    path = tmp_path / "chair.glb"
    path.write_bytes(build_glb())
    result = asyncio.run(validate_model_file(str(path)))
    assert result.status == ValidationStatus.ready


def test_stage_updates_are_emitted_after_every_transition() -> None:
    snapshots: list[list[ValidationStage]] = []
    run_validation(build_glb(), "chair.glb", on_stage_update=snapshots.append)

    P, R, OK = StageStatus.pending, StageStatus.processing, StageStatus.passed
    assert [_statuses(s) for s in snapshots] == [
        [P, P, P],
        [R, P, P],
        [OK, R, P],
        [OK, OK, R],
        [OK, OK, OK],
    ]
    assert [s.stage for s in snapshots[0]] == list(StageName)


def test_stage_updates_stop_at_terminal_failure() -> None:
    snapshots: list[list[ValidationStage]] = []
    run_validation(b"", "chair.glb", on_stage_update=snapshots.append)
    assert len(snapshots) == 3
    assert snapshots[-1][0].message == "File is empty"


def test_validation_is_idempotent() -> None:
    content = build_zip({"scene.gltf": gltf_bytes(gltf_document(materials=None, animations=[{}]))})
    first = run_validation(content, "bundle.zip")
    second = run_validation(content, "bundle.zip")
    assert first.status == second.status
    assert first.issues == second.issues
    assert first.issues


def test_unexpected_check_errors_become_failed_stage(monkeypatch) -> None:
    def explode(_data: bytes):
        raise RuntimeError("boom")

    monkeypatch.setitem(CONTAINER_CHECKS, ContainerKind.glb, ContainerChecks(explode, explode))
    result = run_validation(build_glb(), "chair.glb")
    assert result.status == ValidationStatus.error
    assert result.issues == ["Format validation failed: boom"]
