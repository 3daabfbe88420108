from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, NewType, Optional


RuleId = NewType("RuleId", str)
CategoryId = NewType("CategoryId", str)


def rule_id(value: str) -> RuleId:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid rule id: {value!r}")
    return RuleId(value)


def category_id(value: str) -> CategoryId:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid category id: {value!r}")
    return CategoryId(value)


class AgentId(str, Enum):
    CURSOR = "cursor"
    CLAUDE = "claude"
    COPILOT = "copilot"
    ANTIGRAVITY = "antigravity"
    OPENCODE = "opencode"
    GEMINI = "gemini"


class RegistryType(str, Enum):
    GITHUB = "github"
    LOCAL = "local"
    HTTP = "http"


class SkipReason(str, Enum):
    EXCLUDED = "excluded"
    OVERRIDDEN = "overridden"


@dataclass
class RegistryConfig:
    type: RegistryType
    url: str
    branch: Optional[str] = None
    token: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "RegistryConfig":
        return cls(
            type=RegistryType(payload["type"]),
            url=payload["url"],
            branch=payload.get("branch"),
            token=payload.get("token"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type.value, "url": self.url}
        if self.branch is not None:
            data["branch"] = self.branch
        if self.token is not None:
            data["token"] = self.token
        return data


@dataclass
class CategoryConfig:
    enabled: bool = True
    version: Optional[str] = None
    include: Optional[list[str]] = None
    exclude: Optional[list[str]] = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "CategoryConfig":
        return cls(
            enabled=payload["enabled"],
            version=payload.get("version"),
            include=list(payload["include"]) if "include" in payload else None,
            exclude=list(payload["exclude"]) if "exclude" in payload else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"enabled": self.enabled}
        if self.version is not None:
            data["version"] = self.version
        if self.include is not None:
            data["include"] = list(self.include)
        if self.exclude is not None:
            data["exclude"] = list(self.exclude)
        return data


@dataclass
class ProjectConfig:
    registry: RegistryConfig
    agents: list[AgentId]
    categories: dict[CategoryId, CategoryConfig] = field(default_factory=dict)
    overrides: Optional[list[str]] = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ProjectConfig":
        categories = {
            category_id(key): CategoryConfig.from_dict(value)
            for key, value in payload.get("categories", {}).items()
        }
        overrides = payload.get("overrides")
        return cls(
            registry=RegistryConfig.from_dict(payload["registry"]),
            agents=[AgentId(item) for item in payload["agents"]],
            categories=categories,
            overrides=list(overrides) if overrides is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "registry": self.registry.to_dict(),
            "agents": [agent.value for agent in self.agents],
            "categories": {
                key: value.to_dict() for key, value in self.categories.items()
            },
        }
        if self.overrides is not None:
            data["overrides"] = list(self.overrides)
        return data

    def enabled_categories(self) -> list[CategoryId]:
        return [key for key, value in self.categories.items() if value.enabled is True]


@dataclass(frozen=True)
class RuleSyncInfo:
    rule_id: RuleId
    category: CategoryId
    agent: AgentId
    path: str
    target: Optional[Path] = None
    reason: Optional[SkipReason] = None


@dataclass(frozen=True)
class SyncError:
    message: str
    rule_id: Optional[RuleId] = None
    category: Optional[CategoryId] = None
    agent: Optional[AgentId] = None
    cause: Optional[BaseException] = None

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message} ({self.cause})"


@dataclass
class SyncResult:
    success: bool
    synced: list[RuleSyncInfo] = field(default_factory=list)
    skipped: list[RuleSyncInfo] = field(default_factory=list)
    errors: list[SyncError] = field(default_factory=list)
    aborted: bool = False

    def summary(self) -> dict[str, int]:
        return {
            "synced": len(self.synced),
            "skipped": len(self.skipped),
            "errors": len(self.errors),
        }


@dataclass(frozen=True)
class SkippedDirectory:
    path: str
    reason: str


@dataclass
class DetectionResult:
    frameworks: dict[CategoryId, list[str]] = field(default_factory=dict)
    skipped: list[SkippedDirectory] = field(default_factory=list)

    def add(self, framework: CategoryId, location: str) -> None:
        locations = self.frameworks.setdefault(framework, [])
        if location not in locations:
            locations.append(location)
