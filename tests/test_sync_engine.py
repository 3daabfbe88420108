from pathlib import Path
from typing import Optional

import pytest

from skill_rule.errors import UnsupportedRegistryError
from skill_rule.models import (
    AgentId,
    CategoryId,
    ProjectConfig,
    SkipReason,
)
from skill_rule.registry import IRegistryAdapter
from skill_rule.registry.local import LocalRegistryAdapter
from skill_rule.rules import parse_rule
from skill_rule.rules.models import Rule
from skill_rule.sync import SyncEngine


class FlakyRegistry(IRegistryAdapter):
    """Local registry that fails for selected categories."""

    def __init__(self, root: Path, failing: set[str]) -> None:
        self._inner = LocalRegistryAdapter(root)
        self._failing = failing

    def fetch_category(self, category: CategoryId) -> list[Rule]:
        if category in self._failing:
            raise RuntimeError(f"boom {category}")
        return self._inner.fetch_category(category)

    def fetch_rule(self, path: str) -> Optional[Rule]:
        return self._inner.fetch_rule(path)

    def list_categories(self) -> list[CategoryId]:
        return self._inner.list_categories()

    def is_available(self) -> bool:
        return self._inner.is_available()


def _config(make_config, registry_root: Path, **kwargs) -> ProjectConfig:
    return ProjectConfig.from_dict(make_config(str(registry_root), **kwargs))


def test_syncs_enabled_category_to_every_agent(project_root: Path, registry_root: Path, make_config) -> None:
    result = SyncEngine(project_root).sync(_config(make_config, registry_root))

    assert result.success is True
    assert result.aborted is False
    assert len(result.synced) == 4
    assert result.skipped == []
    assert result.errors == []
    assert {(item.rule_id, item.agent) for item in result.synced} == {
        ("react-components", AgentId.CURSOR),
        ("react-components", AgentId.CLAUDE),
        ("react-hooks", AgentId.CURSOR),
        ("react-hooks", AgentId.CLAUDE),
    }

    for agent_dir in (".cursor/rules", ".claude/rules"):
        assert (project_root / agent_dir / "react" / "hooks.rule.md").is_file()
        assert (project_root / agent_dir / "react" / "components.rule.md").is_file()
    assert not (project_root / ".cursor" / "rules" / "golang").exists()


def test_synced_records_carry_targets(project_root: Path, registry_root: Path, make_config) -> None:
    result = SyncEngine(project_root).sync(_config(make_config, registry_root, agents=["gemini"]))

    targets = sorted(item.target for item in result.synced)
    assert targets == [
        project_root / ".gemini" / "rules" / "react" / "components.rule.md",
        project_root / ".gemini" / "rules" / "react" / "hooks.rule.md",
    ]
    assert {item.path for item in result.synced} == {
        "rules/react/components.rule.md",
        "rules/react/hooks.rule.md",
    }


def test_written_files_parse_back(project_root: Path, registry_root: Path, make_config) -> None:
    SyncEngine(project_root).sync(_config(make_config, registry_root, agents=["cursor"]))

    target = project_root / ".cursor" / "rules" / "react" / "hooks.rule.md"
    text = target.read_text(encoding="utf-8")
    assert text.startswith("---\nid: react-hooks\nversion: 1.2.0\ntriggers: [useEffect, useState]\n---\n\n")

    written = parse_rule(text, "rules/react/hooks.rule.md")
    source = LocalRegistryAdapter(registry_root).fetch_rule("rules/react/hooks.rule.md")
    assert source is not None
    assert written.meta == source.meta
    assert written.content == source.content


def test_disabled_categories_are_not_synced(project_root: Path, registry_root: Path, make_config) -> None:
    config = _config(
        make_config,
        registry_root,
        categories={"react": {"enabled": False}, "golang": {"enabled": True}},
    )
    result = SyncEngine(project_root).sync(config)

    assert [item.rule_id for item in result.synced] == ["golang-errors", "golang-errors"]
    assert (project_root / ".claude" / "rules" / "golang" / "errors.rule.md").is_file()


def test_unavailable_registry_aborts(project_root: Path, tmp_path: Path, make_config) -> None:
    missing = tmp_path / "no-registry"
    config = ProjectConfig.from_dict(make_config(str(missing)))

    result = SyncEngine(project_root).sync(config)

    assert result.success is False
    assert result.aborted is True
    assert result.synced == []
    assert len(result.errors) == 1
    assert str(missing) in result.errors[0].message
    assert not (project_root / ".cursor").exists()


def test_exclude_records_one_skip_per_agent(project_root: Path, registry_root: Path, make_config) -> None:
    config = _config(
        make_config,
        registry_root,
        categories={"react": {"enabled": True, "exclude": ["hooks"]}},
    )
    result = SyncEngine(project_root).sync(config)

    assert result.success is True
    assert [(item.rule_id, item.agent, item.reason) for item in result.skipped] == [
        ("react-hooks", AgentId.CURSOR, SkipReason.EXCLUDED),
        ("react-hooks", AgentId.CLAUDE, SkipReason.EXCLUDED),
    ]
    assert {item.rule_id for item in result.synced} == {"react-components"}
    assert not (project_root / ".cursor" / "rules" / "react" / "hooks.rule.md").exists()


def test_include_list_drops_other_rules_silently(project_root: Path, registry_root: Path, make_config) -> None:
    config = _config(
        make_config,
        registry_root,
        categories={"react": {"enabled": True, "include": ["components"]}},
    )
    result = SyncEngine(project_root).sync(config)

    assert {item.rule_id for item in result.synced} == {"react-components"}
    assert result.skipped == []
    assert not (project_root / ".claude" / "rules" / "react" / "hooks.rule.md").exists()


@pytest.mark.parametrize("override", ["react-hooks", "hooks"])
def test_overrides_are_skipped_without_writing(
    project_root: Path, registry_root: Path, make_config, override: str
) -> None:
    config = _config(make_config, registry_root, overrides=[override])
    result = SyncEngine(project_root).sync(config)

    assert len(result.synced) == 2
    assert {item.reason for item in result.skipped} == {SkipReason.OVERRIDDEN}
    assert len(result.skipped) == 2
    assert not (project_root / ".cursor" / "rules" / "react" / "hooks.rule.md").exists()


def test_fetch_failure_is_isolated(project_root: Path, registry_root: Path, make_config) -> None:
    config = _config(
        make_config,
        registry_root,
        categories={"golang": {"enabled": True}, "react": {"enabled": True}},
    )
    engine = SyncEngine(
        project_root,
        registry_factory=lambda registry, base_dir: FlakyRegistry(registry_root, {"golang"}),
    )
    result = engine.sync(config)

    assert result.success is False
    assert result.aborted is False
    assert len(result.errors) == 1
    assert result.errors[0].category == "golang"
    assert "boom golang" in str(result.errors[0])
    assert len(result.synced) == 4


def test_write_failure_is_isolated(project_root: Path, registry_root: Path, make_config) -> None:
    (project_root / ".claude").mkdir()
    (project_root / ".claude" / "rules").write_text("not a directory", encoding="utf-8")

    result = SyncEngine(project_root).sync(_config(make_config, registry_root))

    assert result.success is False
    assert {item.agent for item in result.synced} == {AgentId.CURSOR}
    assert len(result.synced) == 2
    assert len(result.errors) == 2
    assert {error.agent for error in result.errors} == {AgentId.CLAUDE}
    assert all(error.cause is not None for error in result.errors)


def test_duplicate_rule_ids_are_reported(
    project_root: Path, registry_root: Path, make_config, write_text
) -> None:
    write_text(
        registry_root / "rules" / "react" / "nested" / "copy.rule.md",
        "---\nid: react-hooks\n---\n\n# Copy\n",
    )
    result = SyncEngine(project_root).sync(_config(make_config, registry_root, agents=["cursor"]))

    assert result.success is False
    assert len(result.synced) == 2
    assert len(result.errors) == 1
    assert result.errors[0].rule_id == "react-hooks"
    assert "rules/react/nested/copy.rule.md" in result.errors[0].message
    written = (project_root / ".cursor" / "rules" / "react" / "hooks.rule.md").read_text(encoding="utf-8")
    assert "# Hooks" in written


def test_rules_sharing_a_target_file_are_reported(
    project_root: Path, registry_root: Path, make_config, write_text
) -> None:
    write_text(
        registry_root / "rules" / "react" / "short.rule.md",
        "---\nid: hooks\n---\n\n# Short\n",
    )
    result = SyncEngine(project_root).sync(_config(make_config, registry_root, agents=["cursor"]))

    assert result.success is False
    assert {item.rule_id for item in result.synced} == {"react-components", "react-hooks"}
    assert len(result.errors) == 1
    assert result.errors[0].rule_id == "hooks"
    assert "react-hooks" in result.errors[0].message
    written = (project_root / ".cursor" / "rules" / "react" / "hooks.rule.md").read_text(encoding="utf-8")
    assert "# Hooks" in written
    assert "# Short" not in written


def test_dry_run_writes_nothing(project_root: Path, registry_root: Path, make_config) -> None:
    result = SyncEngine(project_root, dry_run=True).sync(_config(make_config, registry_root))

    assert result.success is True
    assert len(result.synced) == 4
    assert all(item.target is not None for item in result.synced)
    assert not (project_root / ".cursor").exists()
    assert not (project_root / ".claude").exists()


def test_relative_local_registry_resolves_against_project(
    project_root: Path, registry_root: Path, make_config
) -> None:
    config = _config(make_config, Path("..") / "registry", agents=["copilot"])
    result = SyncEngine(project_root).sync(config)

    assert result.success is True
    assert (project_root / ".github" / "rules" / "react" / "hooks.rule.md").is_file()


def test_http_registry_is_rejected(project_root: Path, make_config) -> None:
    config = ProjectConfig.from_dict(make_config("https://rules.example.com", registry_type="http"))
    with pytest.raises(UnsupportedRegistryError):
        SyncEngine(project_root).sync(config)


def test_summary_counts(project_root: Path, registry_root: Path, make_config) -> None:
    config = _config(
        make_config,
        registry_root,
        categories={"react": {"enabled": True, "exclude": ["components"]}},
    )
    result = SyncEngine(project_root).sync(config)
    assert result.summary() == {"synced": 2, "skipped": 2, "errors": 0}


def test_target_path_strips_category_prefix(project_root: Path, registry_root: Path) -> None:
    rule = LocalRegistryAdapter(registry_root).fetch_rule("rules/golang/errors.rule.md")
    assert rule is not None
    engine = SyncEngine(project_root)
    assert engine.target_path(rule, AgentId.OPENCODE) == (
        project_root / ".opencode" / "rules" / "golang" / "errors.rule.md"
    )
    unprefixed = parse_rule("---\nid: custom\n---\nbody\n", "rules/golang/custom.rule.md")
    assert engine.target_path(unprefixed, AgentId.CURSOR).name == "custom.rule.md"
