from __future__ import annotations

import json
from pathlib import Path

import pytest

from brickctl.app.workspace import Scope, WorkspaceContext
from brickctl.domain.brick import BrickNotFoundError, BrickParseError
from brickctl.domain.location import VersionLocation
from brickctl.domain.manifest import ManifestNotFoundError, ManifestParseError
from brickctl.settings import RuntimeSettings


def _write_index(path: Path, entries: dict[str, Path]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({key: str(value) for key, value in entries.items()}), encoding="utf-8")


def test_entry_point_found_from_nested_directory(runtime_settings: RuntimeSettings, project_root: Path) -> None:
    nested = project_root / "lib" / "src"
    nested.mkdir(parents=True)
    workspace = WorkspaceContext(runtime_settings, nested)
    assert workspace.entry_point() == project_root.resolve()
    assert workspace.manifest_file(Scope.PROJECT) == project_root.resolve() / "bricks.yaml"


def test_entry_point_missing(runtime_settings: RuntimeSettings, tmp_path: Path) -> None:
    lonely = tmp_path / "lonely"
    lonely.mkdir()
    workspace = WorkspaceContext(runtime_settings, lonely)
    assert workspace.has_project() is False
    with pytest.raises(ManifestNotFoundError):
        workspace.entry_point()
    with pytest.raises(ManifestNotFoundError):
        workspace.project_manifest()


def test_global_dir_is_not_a_project(runtime_settings: RuntimeSettings) -> None:
    global_dir = runtime_settings.global_dir
    global_dir.mkdir(parents=True)
    (global_dir / "bricks.yaml").write_text("bricks: {}\n", encoding="utf-8")
    workspace = WorkspaceContext(runtime_settings, global_dir)
    with pytest.raises(ManifestNotFoundError):
        workspace.entry_point()


def test_user_manifest_defaults_to_empty(runtime_settings: RuntimeSettings, tmp_path: Path) -> None:
    workspace = WorkspaceContext(runtime_settings, tmp_path)
    assert workspace.user_manifest().entries == {}
    assert workspace.manifest_file(Scope.USER) == runtime_settings.global_dir / "bricks.yaml"


def test_manifests_are_loaded_once(runtime_settings: RuntimeSettings, project_root: Path) -> None:
    (project_root / "bricks.yaml").write_text("bricks:\n  greeting:\n    version: ^1.0.0\n", encoding="utf-8")
    workspace = WorkspaceContext(runtime_settings, project_root)
    first = workspace.project_manifest()
    assert first.entries == {"greeting": VersionLocation("^1.0.0")}
    (project_root / "bricks.yaml").write_text("bricks: {}\n", encoding="utf-8")
    assert workspace.project_manifest() is first


def test_malformed_project_manifest(runtime_settings: RuntimeSettings, project_root: Path) -> None:
    (project_root / "bricks.yaml").write_text("bricks: {greeting: [\n", encoding="utf-8")
    workspace = WorkspaceContext(runtime_settings, project_root)
    with pytest.raises(ManifestParseError) as excinfo:
        workspace.project_manifest()
    assert str(project_root.resolve() / "bricks.yaml") in str(excinfo.value)


def test_registered_bricks(runtime_settings: RuntimeSettings, project_root: Path, brick_factory) -> None:
    widget = brick_factory("widget", "1.0.0")
    button = brick_factory("button", "0.2.0")
    _write_index(project_root / ".brickctl" / "bricks.json", {"widget_a": widget, "button_b": button})
    workspace = WorkspaceContext(runtime_settings, project_root)
    bricks = workspace.registered_bricks(Scope.PROJECT)
    assert [(b.name, b.version) for b in bricks] == [("button", "0.2.0"), ("widget", "1.0.0")]


def test_all_registered_bricks_merges_scopes(runtime_settings: RuntimeSettings, project_root: Path, brick_factory) -> None:
    _write_index(project_root / ".brickctl" / "bricks.json", {"widget_a": brick_factory("widget")})
    _write_index(runtime_settings.global_dir / "bricks.json", {"hello_b": brick_factory("hello")})
    workspace = WorkspaceContext(runtime_settings, project_root)
    assert [b.name for b in workspace.all_registered_bricks()] == ["widget", "hello"]


def test_registered_bricks_without_project_uses_user_scope(
    runtime_settings: RuntimeSettings, tmp_path: Path, brick_factory
) -> None:
    _write_index(runtime_settings.global_dir / "bricks.json", {"hello_b": brick_factory("hello")})
    lonely = tmp_path / "lonely"
    lonely.mkdir()
    workspace = WorkspaceContext(runtime_settings, lonely)
    assert [b.name for b in workspace.all_registered_bricks()] == ["hello"]


def test_registered_bricks_missing_directory_aborts(
    runtime_settings: RuntimeSettings, project_root: Path, brick_factory, tmp_path: Path
) -> None:
    _write_index(
        project_root / ".brickctl" / "bricks.json",
        {"button_a": brick_factory("button"), "ghost_b": tmp_path / "ghost"},
    )
    workspace = WorkspaceContext(runtime_settings, project_root)
    with pytest.raises(BrickNotFoundError) as excinfo:
        workspace.registered_bricks(Scope.PROJECT)
    assert excinfo.value.directory == tmp_path / "ghost"


def test_registered_bricks_malformed_descriptor_aborts(
    runtime_settings: RuntimeSettings, project_root: Path, brick_factory
) -> None:
    broken = brick_factory("broken")
    (broken / "brick.yaml").write_text("name: [broken\n", encoding="utf-8")
    _write_index(project_root / ".brickctl" / "bricks.json", {"broken_a": broken, "ok_b": brick_factory("ok")})
    workspace = WorkspaceContext(runtime_settings, project_root)
    with pytest.raises(BrickParseError):
        workspace.registered_bricks(Scope.PROJECT)
