"""Registry adapter backed by a GitHub repository."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import quote
from urllib.request import Request, urlopen

from skill_rule.constants import (
    DEFAULT_BRANCH,
    HTTP_TIMEOUT_SECONDS,
    RULE_SUFFIX,
    RULES_DIRNAME,
    USER_AGENT,
)
from skill_rule.errors import InvalidRegistryUrlError
from skill_rule.models import CategoryId
from skill_rule.registry.base import IRegistryAdapter
from skill_rule.rules.models import Rule
from skill_rule.rules.parser import RuleParser, rule_parser

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_RAW_URL = "https://raw.githubusercontent.com"

_REPO_URL_RE = re.compile(r"github\.com[/:]([^/]+)/([^/?#]+)")


def parse_repo_url(url: str) -> tuple[str, str]:
    match = _REPO_URL_RE.search(url)
    if not match:
        raise InvalidRegistryUrlError(url)
    repo = match.group(2).rstrip("/")
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not repo:
        raise InvalidRegistryUrlError(url)
    return match.group(1), repo


@dataclass(frozen=True)
class GitTreeEntry:
    path: str
    type: str
    sha: str = ""


@dataclass(frozen=True)
class GitTree:
    entries: list[GitTreeEntry] = field(default_factory=list)
    truncated: bool = False

    @classmethod
    def from_payload(cls, payload: Any) -> "GitTree":
        if not isinstance(payload, dict):
            return cls()
        entries: list[GitTreeEntry] = []
        for item in payload.get("tree") or []:
            if not isinstance(item, dict):
                continue
            path = item.get("path")
            kind = item.get("type")
            if isinstance(path, str) and isinstance(kind, str):
                entries.append(GitTreeEntry(path=path, type=kind, sha=str(item.get("sha", ""))))
        return cls(entries=entries, truncated=bool(payload.get("truncated", False)))


class GitHubRegistryAdapter(IRegistryAdapter):
    def __init__(
        self,
        url: str,
        branch: Optional[str] = None,
        token: Optional[str] = None,
        timeout: int = HTTP_TIMEOUT_SECONDS,
        parser: Optional[RuleParser] = None,
    ) -> None:
        self.owner, self.repo = parse_repo_url(url)
        self.branch = branch or DEFAULT_BRANCH
        self.token = token
        self.timeout = timeout
        self._parser = parser or rule_parser
        self._tree: Optional[GitTree] = None

    @property
    def headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @property
    def repo_api_url(self) -> str:
        return f"{GITHUB_API_URL}/repos/{self.owner}/{self.repo}"

    @property
    def tree_url(self) -> str:
        return f"{self.repo_api_url}/git/trees/{quote(self.branch, safe='')}?recursive=1"

    def raw_url(self, path: str) -> str:
        return f"{GITHUB_RAW_URL}/{self.owner}/{self.repo}/{self.branch}/{quote(path)}"

    def fetch_category(self, category: CategoryId) -> list[Rule]:
        tree = self.fetch_tree()
        if tree is None:
            return []

        prefix = f"{RULES_DIRNAME}/{category}/"
        rules: list[Rule] = []
        for entry in tree.entries:
            if entry.type != "blob":
                continue
            if not entry.path.startswith(prefix) or not entry.path.endswith(RULE_SUFFIX):
                continue
            rule = self.fetch_rule(entry.path)
            if rule is not None:
                rules.append(rule)
        return rules

    def fetch_rule(self, path: str) -> Optional[Rule]:
        payload = self._get(self.raw_url(path))
        if payload is None:
            return None
        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.warning("Skipping %s: not valid UTF-8 (%s)", path, exc)
            return None
        return self._parser.parse(text, path)

    def list_categories(self) -> list[CategoryId]:
        tree = self.fetch_tree()
        if tree is None:
            return []

        categories: list[CategoryId] = []
        for entry in tree.entries:
            if entry.type != "tree":
                continue
            parts = entry.path.split("/")
            if len(parts) == 2 and parts[0] == RULES_DIRNAME and parts[1]:
                if parts[1] not in categories:
                    categories.append(CategoryId(parts[1]))
        return categories

    def is_available(self) -> bool:
        return self._get(self.repo_api_url) is not None

    def fetch_tree(self) -> Optional[GitTree]:
        if self._tree is not None:
            return self._tree

        payload = self._get(self.tree_url)
        if payload is None:
            return None
        try:
            tree = GitTree.from_payload(json.loads(payload.decode("utf-8")))
        except ValueError as exc:
            logger.warning("Invalid tree response from %s: %s", self.tree_url, exc)
            return None
        if tree.truncated:
            # TODO: page through subtrees when GitHub truncates the recursive listing.
            logger.warning(
                "Tree listing for %s/%s@%s is truncated; some rules may be missing",
                self.owner,
                self.repo,
                self.branch,
            )
        self._tree = tree
        return tree

    def _get(self, url: str) -> Optional[bytes]:
        request = Request(url, headers=self.headers)
        try:
            with urlopen(request, timeout=self.timeout) as response:
                status = getattr(response, "status", 200)
                if not 200 <= status < 300:
                    logger.warning("GET %s returned %s", url, status)
                    return None
                return response.read()
        except (OSError, ValueError) as exc:
            logger.warning("GET %s failed: %s", url, exc)
            return None
