import os
from pathlib import Path
from typing import Optional

from skill_rule.constants import RULE_SUFFIX, RULES_DIRNAME, SKILL_FILENAME
from skill_rule.models import CategoryId
from skill_rule.registry.base import IRegistryAdapter
from skill_rule.rules.models import Rule
from skill_rule.rules.parser import RuleParser, rule_parser


def is_rule_file(name: str) -> bool:
    return name.endswith(RULE_SUFFIX) or name == SKILL_FILENAME


class LocalRegistryAdapter(IRegistryAdapter):
    def __init__(self, root: Path, parser: Optional[RuleParser] = None) -> None:
        self._root = root
        self._parser = parser or rule_parser

    @property
    def root(self) -> Path:
        return self._root

    @property
    def rules_dir(self) -> Path:
        return self._root / RULES_DIRNAME

    def fetch_category(self, category: CategoryId) -> list[Rule]:
        category_dir = self.rules_dir / category
        if not category_dir.is_dir():
            return []

        rules: list[Rule] = []
        for current, dir_names, file_names in os.walk(category_dir, topdown=True):
            dir_names.sort()
            for name in sorted(file_names):
                if not is_rule_file(name):
                    continue
                path = Path(current) / name
                rules.append(self._parse_file(path))
        return rules

    def fetch_rule(self, path: str) -> Optional[Rule]:
        full_path = self._root / path
        if not full_path.is_file():
            return None
        return self._parse_file(full_path)

    def list_categories(self) -> list[CategoryId]:
        if not self.rules_dir.is_dir():
            return []
        return [
            CategoryId(child.name)
            for child in sorted(self.rules_dir.iterdir())
            if child.is_dir()
        ]

    def is_available(self) -> bool:
        return self.rules_dir.is_dir()

    def _parse_file(self, path: Path) -> Rule:
        text = path.read_text(encoding="utf-8")
        try:
            source_path = path.relative_to(self._root).as_posix()
        except ValueError:
            source_path = path.as_posix()
        return self._parser.parse(text, source_path)
