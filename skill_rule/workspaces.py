import logging
import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from skill_rule.constants import LERNA_FILENAME, PACKAGE_JSON, PNPM_WORKSPACE_FILENAME
from skill_rule.models import SkippedDirectory
from skill_rule.utils import path_exists, read_json_safe

logger = logging.getLogger(__name__)

_GLOB_TAIL_RE = re.compile(r"/?\*.*$")


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


class WorkspaceService:
    """Resolve monorepo workspace declarations into directories to scan."""

    def pnpm_patterns(self, root: Path) -> list[str]:
        path = root / PNPM_WORKSPACE_FILENAME
        if not path_exists(path):
            return []
        try:
            payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            logger.debug("Ignoring unreadable %s: %s", path, exc)
            return []
        if not isinstance(payload, dict):
            return []
        return _string_list(payload.get("packages"))

    def package_json_patterns(self, root: Path) -> list[str]:
        payload, error = read_json_safe(root / PACKAGE_JSON)
        if error is not None:
            logger.debug("Ignoring unreadable %s: %s", root / PACKAGE_JSON, error)
        if not isinstance(payload, dict):
            return []
        workspaces = payload.get("workspaces")
        if isinstance(workspaces, dict):
            return _string_list(workspaces.get("packages"))
        return _string_list(workspaces)

    def lerna_patterns(self, root: Path) -> list[str]:
        payload, error = read_json_safe(root / LERNA_FILENAME)
        if error is not None:
            logger.debug("Ignoring unreadable %s: %s", root / LERNA_FILENAME, error)
        if not isinstance(payload, dict):
            return []
        return _string_list(payload.get("packages"))

    def declared_patterns(self, root: Path) -> list[str]:
        patterns: list[str] = []
        for pattern in (
            *self.pnpm_patterns(root),
            *self.package_json_patterns(root),
            *self.lerna_patterns(root),
        ):
            if pattern.startswith("!"):
                continue
            if pattern not in patterns:
                patterns.append(pattern)
        return patterns

    def resolve_patterns(
        self,
        root: Path,
        patterns: list[str],
        skipped: Optional[list[SkippedDirectory]] = None,
    ) -> list[str]:
        dirs: list[str] = []
        for pattern in patterns:
            normalized = pattern.strip().removeprefix("./").rstrip("/")
            if "*" in normalized:
                base = _GLOB_TAIL_RE.sub("", normalized)
                for child in self._subdirectories(root, base, skipped):
                    if child not in dirs:
                        dirs.append(child)
            elif normalized and (root / normalized).is_dir() and normalized not in dirs:
                dirs.append(normalized)
        return dirs

    def scan_dirs(
        self, root: Path, skipped: Optional[list[SkippedDirectory]] = None
    ) -> list[str]:
        return self.resolve_patterns(root, self.declared_patterns(root), skipped)

    def _subdirectories(
        self, root: Path, base: str, skipped: Optional[list[SkippedDirectory]]
    ) -> list[str]:
        full_base = root / base if base else root
        if not full_base.is_dir():
            return []
        try:
            names = sorted(
                entry.name
                for entry in os.scandir(full_base)
                if entry.is_dir() and not entry.name.startswith(".")
            )
        except OSError as exc:
            logger.warning("Cannot list %s: %s", full_base, exc)
            if skipped is not None:
                skipped.append(SkippedDirectory(path=base or ".", reason=str(exc)))
            return []
        return [f"{base}/{name}" if base else name for name in names]
