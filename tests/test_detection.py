import os
from pathlib import Path

import pytest

from skill_rule.detection import (
    FrameworkDetector,
    all_categories,
    detect_frameworks,
    detect_in_path,
    framework_name,
    is_valid_category,
    manifest_dependencies,
    scan_project,
)


def test_pnpm_monorepo_scenario(project_root: Path, write_text, write_json) -> None:
    write_text(project_root / "pnpm-workspace.yaml", 'packages:\n  - "apps/*"\n')
    write_json(project_root / "apps" / "web" / "package.json", {"dependencies": {"next": "14.0.0"}})
    write_text(project_root / "apps" / "api" / "go.mod", "module example.com/api\n")

    assert detect_frameworks(project_root) == {
        "nextjs": ["apps/web"],
        "golang": ["apps/api"],
    }


def test_root_directory_is_scanned(project_root: Path, write_json, write_text) -> None:
    write_json(
        project_root / "package.json",
        {"dependencies": {"react": "18"}, "devDependencies": {"typescript": "5"}},
    )
    write_text(project_root / "Cargo.toml", "[package]\n")

    detected = detect_frameworks(project_root)
    assert detected == {"react": ["."], "rust": ["."], "typescript": ["."]}


def test_directory_matching_several_frameworks(project_root: Path, write_json, write_text) -> None:
    write_json(project_root / "package.json", {"workspaces": ["apps/*"]})
    write_json(project_root / "apps" / "site" / "package.json", {"dependencies": {"react": "18", "next": "14"}})
    write_text(project_root / "apps" / "site" / "tsconfig.json", "{}")

    detected = detect_frameworks(project_root)
    assert detected["react"] == ["apps/site"]
    assert detected["nextjs"] == ["apps/site"]
    assert detected["typescript"] == ["apps/site"]


def test_locations_accumulate_across_workspaces(project_root: Path, write_json) -> None:
    write_json(project_root / "lerna.json", {"packages": ["packages/*"]})
    write_json(project_root / "packages" / "a" / "package.json", {"dependencies": {"@nestjs/core": "10"}})
    write_json(project_root / "packages" / "b" / "package.json", {"devDependencies": {"@nestjs/core": "10"}})

    assert detect_frameworks(project_root) == {"nestjs": ["packages/a", "packages/b"]}


def test_default_collection_dirs_without_workspace_config(project_root: Path, write_text) -> None:
    write_text(project_root / "apps" / "mobile" / "pubspec.yaml", "name: mobile\n")
    write_text(project_root / "packages" / "core" / "go.mod", "module core\n")
    write_text(project_root / "src-tauri" / "desktop" / "Cargo.toml", "[package]\n")
    write_text(project_root / "packages" / "go.mod", "module ignored\n")

    assert detect_frameworks(project_root) == {
        "flutter": ["apps/mobile"],
        "golang": ["packages/core"],
        "rust": ["src-tauri/desktop"],
    }


def test_defaults_skipped_when_workspace_dirs_resolve(project_root: Path, write_text, write_json) -> None:
    write_json(project_root / "package.json", {"workspaces": ["services/*"]})
    write_text(project_root / "services" / "api" / "go.mod", "module api\n")
    write_text(project_root / "apps" / "mobile" / "pubspec.yaml", "name: mobile\n")

    assert detect_frameworks(project_root) == {"golang": ["services/api"]}


def test_custom_scan_dirs_are_leaves(project_root: Path, write_text) -> None:
    write_text(project_root / "backend" / "go.mod", "module backend\n")
    write_text(project_root / "apps" / "go.mod", "module apps\n")

    detected = detect_frameworks(project_root, ["./backend", "apps", "missing"])
    assert detected == {"golang": ["backend", "apps"]}


def test_empty_project(project_root: Path) -> None:
    result = scan_project(project_root)
    assert result.frameworks == {}
    assert result.skipped == []


@pytest.mark.skipif(
    not hasattr(os, "geteuid") or os.geteuid() == 0,
    reason="permission checks are bypassed for root",
)
def test_unreadable_collection_dir_is_reported(project_root: Path, write_text) -> None:
    write_text(project_root / "go.mod", "module root\n")
    locked = project_root / "apps"
    locked.mkdir()
    locked.chmod(0o000)
    try:
        result = FrameworkDetector().scan(project_root)
    finally:
        locked.chmod(0o755)

    assert result.frameworks == {"golang": ["."]}
    assert [item.path for item in result.skipped] == ["apps"]


def test_detect_in_path(project_root: Path, write_json, write_text) -> None:
    write_json(project_root / "lib" / "package.json", {"dependencies": {"react-dom": "18"}})
    write_text(project_root / "lib" / "next.config.mjs", "export default {}\n")

    assert sorted(detect_in_path(project_root, "./lib")) == ["nextjs", "react"]
    assert detect_in_path(project_root, "./missing") == []


def test_manifest_dependencies_ignores_invalid_json(tmp_path: Path, write_text) -> None:
    write_text(tmp_path / "package.json", "{broken")
    assert manifest_dependencies(tmp_path) == set()
    assert manifest_dependencies(tmp_path / "nowhere") == set()


def test_category_helpers() -> None:
    assert is_valid_category("react")
    assert not is_valid_category("cobol")
    assert framework_name("nextjs") == "Next.js"
    assert framework_name("cobol") == "cobol"
    assert all_categories() == ["flutter", "react", "nextjs", "nestjs", "rust", "golang", "typescript"]
