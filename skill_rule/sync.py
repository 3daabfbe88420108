"""Sync rules from a registry into each configured agent's rules directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from skill_rule.agents import get_agent_config
from skill_rule.constants import RULE_SUFFIX
from skill_rule.models import (
    AgentId,
    CategoryConfig,
    CategoryId,
    ProjectConfig,
    RegistryConfig,
    RuleId,
    RuleSyncInfo,
    SkipReason,
    SyncError,
    SyncResult,
)
from skill_rule.registry import IRegistryAdapter, create_registry
from skill_rule.rules.models import Rule
from skill_rule.rules.parser import rule_base_name, serialize_rule

logger = logging.getLogger(__name__)

RegistryFactory = Callable[[RegistryConfig, Optional[Path]], IRegistryAdapter]


class SyncEngine:
    def __init__(
        self,
        project_root: Path,
        registry_factory: RegistryFactory = create_registry,
        dry_run: bool = False,
    ) -> None:
        self.project_root = project_root
        self.registry_factory = registry_factory
        self.dry_run = dry_run

    def target_path(self, rule: Rule, agent: AgentId) -> Path:
        agent_config = get_agent_config(agent)
        return (
            self.project_root
            / agent_config.rules_path
            / rule.meta.category
            / f"{rule_base_name(rule)}{RULE_SUFFIX}"
        )

    def sync(self, config: ProjectConfig) -> SyncResult:
        registry = self.registry_factory(config.registry, self.project_root)

        if not registry.is_available():
            logger.warning("Registry not available: %s", config.registry.url)
            return SyncResult(
                success=False,
                errors=[SyncError(message=f"Registry not available: {config.registry.url}")],
                aborted=True,
            )

        result = SyncResult(success=True)
        written: dict[Path, RuleId] = {}

        for category in config.enabled_categories():
            try:
                rules = registry.fetch_category(category)
            except Exception as exc:
                logger.warning("Failed to fetch category %s: %s", category, exc)
                result.errors.append(
                    SyncError(
                        message=f"Failed to fetch category {category}",
                        category=category,
                        cause=exc,
                    )
                )
                continue

            logger.debug("Fetched %d rule(s) for %s", len(rules), category)
            category_config = config.categories[category]
            for rule in rules:
                if self._accept(rule, category, category_config, config, result):
                    self._write_all(rule, category, config.agents, written, result)

        result.success = not result.errors
        return result

    def _accept(
        self,
        rule: Rule,
        category: CategoryId,
        category_config: CategoryConfig,
        config: ProjectConfig,
        result: SyncResult,
    ) -> bool:
        # Include misses are dropped without a skip record; exclude and
        # overrides record one skip per agent.
        base_name = rule_base_name(rule)

        if category_config.include is not None and base_name not in category_config.include:
            logger.debug("Rule %s not in include list for %s", rule.meta.id, category)
            return False

        reason: Optional[SkipReason] = None
        if category_config.exclude is not None and base_name in category_config.exclude:
            reason = SkipReason.EXCLUDED
        elif config.overrides and (
            rule.meta.id in config.overrides or base_name in config.overrides
        ):
            reason = SkipReason.OVERRIDDEN

        if reason is None:
            return True

        logger.debug("Skipping %s (%s)", rule.meta.id, reason.value)
        for agent in config.agents:
            result.skipped.append(
                RuleSyncInfo(
                    rule_id=rule.meta.id,
                    category=category,
                    agent=agent,
                    path=rule.source_path,
                    reason=reason,
                )
            )
        return False

    def _write_all(
        self,
        rule: Rule,
        category: CategoryId,
        agents: list[AgentId],
        written: dict[Path, RuleId],
        result: SyncResult,
    ) -> None:
        # One rule per target file; later rules never overwrite earlier ones.
        for agent in agents:
            target = self.target_path(rule, agent)
            previous = written.get(target)
            if previous is not None:
                if previous == rule.meta.id:
                    message = f"Duplicate rule id {rule.meta.id} for {agent.value} ({rule.source_path})"
                else:
                    message = (
                        f"Rule {rule.meta.id} collides with {previous} at {target.name} "
                        f"for {agent.value} ({rule.source_path})"
                    )
                result.errors.append(
                    SyncError(
                        message=message,
                        rule_id=rule.meta.id,
                        category=category,
                        agent=agent,
                    )
                )
                continue

            try:
                if not self.dry_run:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    target.write_text(serialize_rule(rule), encoding="utf-8")
            except OSError as exc:
                logger.warning("Failed to write %s: %s", target, exc)
                result.errors.append(
                    SyncError(
                        message=f"Failed to write {rule.meta.id} to {agent.value}",
                        rule_id=rule.meta.id,
                        category=category,
                        agent=agent,
                        cause=exc,
                    )
                )
                continue

            written[target] = rule.meta.id
            result.synced.append(
                RuleSyncInfo(
                    rule_id=rule.meta.id,
                    category=category,
                    agent=agent,
                    path=rule.source_path,
                    target=target,
                )
            )
