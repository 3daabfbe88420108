"""Rule data models."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union

from skill_rule.models import CategoryId, RuleId


class LoadMode(str, Enum):
    EAGER = "eager"
    ON_DEMAND = "on-demand"


@dataclass(frozen=True)
class Unloaded:
    """Reference content that has not been fetched."""


@dataclass(frozen=True)
class Loaded:
    content: str


ReferenceContent = Union[Unloaded, Loaded]

UNLOADED = Unloaded()


@dataclass(frozen=True)
class RuleReference:
    path: str
    load_mode: LoadMode = LoadMode.ON_DEMAND
    content: ReferenceContent = UNLOADED

    @property
    def is_loaded(self) -> bool:
        return isinstance(self.content, Loaded)

    @property
    def text(self) -> Optional[str]:
        if isinstance(self.content, Loaded):
            return self.content.content
        return None

    def loaded(self, content: str) -> "RuleReference":
        return replace(self, content=Loaded(content))


@dataclass(frozen=True)
class RuleMeta:
    id: RuleId
    category: CategoryId
    version: str = "1.0.0"
    triggers: list[str] = field(default_factory=list)
    extends: Optional[RuleId] = None

    def __post_init__(self) -> None:
        if not self.category:
            raise ValueError("Rule category must not be empty")


@dataclass(frozen=True)
class Rule:
    meta: RuleMeta
    content: str
    source_path: str
    references: list[RuleReference] = field(default_factory=list)
