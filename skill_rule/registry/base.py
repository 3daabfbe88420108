from abc import ABC, abstractmethod
from typing import Optional

from skill_rule.models import CategoryId
from skill_rule.rules.models import Rule


class IRegistryAdapter(ABC):
    """A source of rule documents organized by category."""

    @abstractmethod
    def fetch_category(self, category: CategoryId) -> list[Rule]:
        """Return every rule in the category; an absent category yields []."""

    @abstractmethod
    def fetch_rule(self, path: str) -> Optional[Rule]:
        """Return the rule stored at a registry-relative path, if any."""

    @abstractmethod
    def list_categories(self) -> list[CategoryId]:
        raise NotImplementedError

    @abstractmethod
    def is_available(self) -> bool:
        """Cheap reachability probe used before a sync."""
