"""Framework detection with monorepo workspace support."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from skill_rule.constants import DEFAULT_SCAN_DIRS, PACKAGE_JSON
from skill_rule.models import CategoryId, DetectionResult, SkippedDirectory
from skill_rule.utils import path_exists, read_json_safe
from skill_rule.workspaces import WorkspaceService

logger = logging.getLogger(__name__)

ROOT_LOCATION = "."


@dataclass(frozen=True)
class FrameworkDef:
    id: CategoryId
    name: str
    detection_files: tuple[str, ...] = ()
    detection_deps: tuple[str, ...] = ()


FRAMEWORKS: tuple[FrameworkDef, ...] = (
    FrameworkDef(
        id=CategoryId("flutter"),
        name="Flutter",
        detection_files=("pubspec.yaml",),
        detection_deps=("flutter",),
    ),
    FrameworkDef(
        id=CategoryId("react"),
        name="React",
        detection_deps=("react", "react-dom"),
    ),
    FrameworkDef(
        id=CategoryId("nextjs"),
        name="Next.js",
        detection_files=("next.config.js", "next.config.mjs", "next.config.ts"),
        detection_deps=("next",),
    ),
    FrameworkDef(
        id=CategoryId("nestjs"),
        name="NestJS",
        detection_deps=("@nestjs/core",),
    ),
    FrameworkDef(
        id=CategoryId("rust"),
        name="Rust",
        detection_files=("Cargo.toml",),
    ),
    FrameworkDef(
        id=CategoryId("golang"),
        name="Go",
        detection_files=("go.mod",),
    ),
    FrameworkDef(
        id=CategoryId("typescript"),
        name="TypeScript",
        detection_files=("tsconfig.json",),
        detection_deps=("typescript",),
    ),
)


def framework_name(category: str) -> str:
    for framework in FRAMEWORKS:
        if framework.id == category:
            return framework.name
    return category


def is_valid_category(category: str) -> bool:
    return any(framework.id == category for framework in FRAMEWORKS)


def all_categories() -> list[CategoryId]:
    return [framework.id for framework in FRAMEWORKS]


def manifest_dependencies(directory: Path) -> set[str]:
    """Names from package.json dependencies and devDependencies."""
    payload, error = read_json_safe(directory / PACKAGE_JSON)
    if error is not None:
        logger.debug("Ignoring unreadable %s: %s", directory / PACKAGE_JSON, error)
    if not isinstance(payload, dict):
        return set()
    deps: set[str] = set()
    for key in ("dependencies", "devDependencies"):
        section = payload.get(key)
        if isinstance(section, dict):
            deps.update(section.keys())
    return deps


class FrameworkDetector:
    def __init__(
        self,
        frameworks: tuple[FrameworkDef, ...] = FRAMEWORKS,
        workspace_service: Optional[WorkspaceService] = None,
        default_scan_dirs: tuple[str, ...] = DEFAULT_SCAN_DIRS,
    ) -> None:
        self.frameworks = frameworks
        self.workspace_service = workspace_service or WorkspaceService()
        self.default_scan_dirs = default_scan_dirs

    def scan(
        self, project_root: Path, custom_scan_dirs: Optional[list[str]] = None
    ) -> DetectionResult:
        result = DetectionResult()
        workspace_dirs = self.workspace_service.scan_dirs(project_root, result.skipped)
        custom_dirs = [_normalize_dir(item) for item in custom_scan_dirs or []]
        leaves = {ROOT_LOCATION, *workspace_dirs, *custom_dirs}

        candidates: list[str] = [ROOT_LOCATION]
        for directory in (*workspace_dirs, *custom_dirs):
            if directory and directory not in candidates:
                candidates.append(directory)
        if not workspace_dirs:
            for directory in self.default_scan_dirs:
                if directory not in candidates:
                    candidates.append(directory)

        for directory in candidates:
            full_path = project_root if directory == ROOT_LOCATION else project_root / directory
            if not full_path.is_dir():
                continue
            if directory in leaves:
                self.detect_in_dir(full_path, directory, result)
                continue
            for child in self._children(full_path, directory, result.skipped):
                self.detect_in_dir(full_path / child, f"{directory}/{child}", result)

        return result

    def detect_in_dir(self, directory: Path, location: str, result: DetectionResult) -> None:
        deps = manifest_dependencies(directory)
        for framework in self.frameworks:
            if self._matches(framework, directory, deps):
                result.add(framework.id, location)

    def _matches(self, framework: FrameworkDef, directory: Path, deps: set[str]) -> bool:
        if any(path_exists(directory / name) for name in framework.detection_files):
            return True
        return any(dep in deps for dep in framework.detection_deps)

    def _children(
        self, full_path: Path, location: str, skipped: list[SkippedDirectory]
    ) -> list[str]:
        try:
            return sorted(entry.name for entry in os.scandir(full_path) if entry.is_dir())
        except OSError as exc:
            logger.warning("Cannot list %s: %s", full_path, exc)
            skipped.append(SkippedDirectory(path=location, reason=str(exc)))
            return []


def _normalize_dir(value: str) -> str:
    normalized = value.strip().replace("\\", "/").rstrip("/")
    if normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized or ROOT_LOCATION


def scan_project(
    project_root: Path, custom_scan_dirs: Optional[list[str]] = None
) -> DetectionResult:
    return FrameworkDetector().scan(project_root, custom_scan_dirs)


def detect_frameworks(
    project_root: Path, custom_scan_dirs: Optional[list[str]] = None
) -> dict[CategoryId, list[str]]:
    return scan_project(project_root, custom_scan_dirs).frameworks


def detect_in_path(project_root: Path, target_path: str) -> list[CategoryId]:
    location = _normalize_dir(target_path)
    full_path = project_root / target_path
    if not full_path.is_dir():
        return []
    result = DetectionResult()
    FrameworkDetector().detect_in_dir(full_path, location, result)
    return list(result.frameworks)
