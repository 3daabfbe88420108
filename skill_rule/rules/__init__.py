from skill_rule.rules.models import (
    LoadMode,
    Loaded,
    Rule,
    RuleMeta,
    RuleReference,
    Unloaded,
)
from skill_rule.rules.parser import (
    RuleParser,
    parse_rule,
    rule_base_name,
    rule_parser,
    serialize_rule,
)

__all__ = [
    "LoadMode",
    "Loaded",
    "Rule",
    "RuleMeta",
    "RuleParser",
    "RuleReference",
    "Unloaded",
    "parse_rule",
    "rule_base_name",
    "rule_parser",
    "serialize_rule",
]
