import sys
import json
from pathlib import Path
from typing import Any

from click.testing import CliRunner
import pytest


def _ensure_repo_on_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_ensure_repo_on_path()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)


@pytest.fixture
def write_json():
    def _write(path: Path, payload: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload), encoding="utf-8")

    return _write


@pytest.fixture
def write_text():
    def _write(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def registry_root(tmp_path: Path, write_text) -> Path:
    """Local registry with react (2 rules) and golang (1 rule)."""
    root = tmp_path / "registry"
    write_text(
        root / "rules" / "react" / "hooks.rule.md",
        "---\n"
        "id: react-hooks\n"
        "version: 1.2.0\n"
        "triggers: [useEffect, useState]\n"
        "---\n"
        "\n"
        "# Hooks\n\nSee [patterns](./patterns.md) <!-- load: eager -->\n",
    )
    write_text(
        root / "rules" / "react" / "components.rule.md",
        "---\nid: react-components\nversion: 1.0.0\ntriggers: [jsx]\n---\n\n# Components\n",
    )
    write_text(
        root / "rules" / "golang" / "errors.rule.md",
        "---\nid: golang-errors\nversion: 2.0.0\ntriggers: []\n---\n\n# Errors\n",
    )
    return root


@pytest.fixture
def make_config():
    def _make(
        registry_url: str,
        agents: list[str] | None = None,
        categories: dict[str, dict] | None = None,
        overrides: list[str] | None = None,
        registry_type: str = "local",
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "registry": {"type": registry_type, "url": registry_url},
            "agents": agents if agents is not None else ["cursor", "claude"],
            "categories": categories if categories is not None else {"react": {"enabled": True}},
        }
        if overrides is not None:
            payload["overrides"] = overrides
        return payload

    return _make


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()
