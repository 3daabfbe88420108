"""Parse and serialize rules with YAML frontmatter."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import yaml

from skill_rule.constants import (
    DEFAULT_RULE_VERSION,
    RULE_SUFFIX,
    RULES_DIRNAME,
    UNKNOWN_CATEGORY,
)
from skill_rule.models import CategoryId, RuleId
from skill_rule.rules.models import LoadMode, Rule, RuleMeta, RuleReference
from skill_rule.utils import to_posix

logger = logging.getLogger(__name__)

_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE
)
_RULE_PATH_RE = re.compile(r"rules/([^/]+)/([^/]+)\.rule\.md$")
_REFERENCE_RE = re.compile(
    r"\[([^\]]+)\]\(([^)]+)\)(?:\s*<!--\s*load:\s*(eager|on-demand)\s*-->)?"
)
_REFERENCE_SUFFIXES = (".md", ".dart", ".ts")


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter mapping, body). Malformed frontmatter yields {}."""
    if text.startswith("\ufeff"):
        text = text[1:]
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return {}, text

    body = text[match.end() :]
    try:
        raw = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        logger.debug("Ignoring malformed frontmatter: %s", exc)
        return {}, body
    if not isinstance(raw, dict):
        return {}, body
    return raw, body


def category_from_path(source_path: str) -> CategoryId:
    parts = to_posix(source_path).split("/")
    if RULES_DIRNAME not in parts:
        return CategoryId(UNKNOWN_CATEGORY)
    index = parts.index(RULES_DIRNAME) + 1
    segment = parts[index] if index < len(parts) else ""
    return CategoryId(segment or UNKNOWN_CATEGORY)


def infer_id_from_path(source_path: str) -> RuleId:
    path = to_posix(source_path)
    match = _RULE_PATH_RE.search(path)
    if match:
        return RuleId(f"{match.group(1)}-{match.group(2)}")
    if path.endswith(RULE_SUFFIX):
        path = path[: -len(RULE_SUFFIX)]
    return RuleId(path.replace("/", "-"))


def parse_references(body: str) -> list[RuleReference]:
    references: list[RuleReference] = []
    for match in _REFERENCE_RE.finditer(body):
        target = match.group(2)
        if not target.endswith(_REFERENCE_SUFFIXES):
            continue
        mode = LoadMode(match.group(3)) if match.group(3) else LoadMode.ON_DEMAND
        references.append(RuleReference(path=target, load_mode=mode))
    return references


class RuleParser:
    def parse(self, raw_document: str, source_path: str) -> Rule:
        data, body = split_frontmatter(raw_document)
        meta = self._parse_meta(data, source_path)
        return Rule(
            meta=meta,
            content=body,
            source_path=source_path,
            references=parse_references(body),
        )

    def _parse_meta(self, data: dict[str, Any], source_path: str) -> RuleMeta:
        raw_id = data.get("id")
        if raw_id is None or not str(raw_id).strip():
            identifier = infer_id_from_path(source_path)
        else:
            identifier = RuleId(str(raw_id))

        raw_version = data.get("version")
        version = DEFAULT_RULE_VERSION if raw_version is None else str(raw_version)

        triggers = data.get("triggers", [])
        if not isinstance(triggers, list):
            triggers = []

        raw_extends = data.get("extends")
        extends = RuleId(str(raw_extends)) if raw_extends is not None else None

        return RuleMeta(
            id=identifier,
            category=category_from_path(source_path),
            version=version,
            triggers=[str(item) for item in triggers],
            extends=extends,
        )


rule_parser = RuleParser()


def parse_rule(raw_document: str, source_path: str) -> Rule:
    return rule_parser.parse(raw_document, source_path)


def _yaml_scalar(value: str, in_flow: bool = False) -> str:
    # Emit plain when YAML reads it back unchanged, double-quoted otherwise.
    probe = f"[{value}]" if in_flow else value
    expected: Any = [value] if in_flow else value
    try:
        loaded = yaml.safe_load(probe)
    except yaml.YAMLError:
        loaded = None
    if value and value == value.strip() and loaded == expected:
        return value
    return json.dumps(value, ensure_ascii=False)


def serialize_rule(rule: Rule) -> str:
    meta = rule.meta
    triggers = ", ".join(_yaml_scalar(item, in_flow=True) for item in meta.triggers)
    lines = [
        "---",
        f"id: {_yaml_scalar(meta.id)}",
        f"version: {_yaml_scalar(meta.version)}",
        f"triggers: [{triggers}]",
    ]
    if meta.extends:
        lines.append(f"extends: {_yaml_scalar(meta.extends)}")
    lines.append("---")
    lines.append("")
    return "\n".join(lines) + rule.content


def rule_base_name(rule: Rule) -> str:
    prefix = f"{rule.meta.category}-"
    identifier = str(rule.meta.id)
    if identifier.startswith(prefix) and len(identifier) > len(prefix):
        return identifier[len(prefix) :]
    return identifier
