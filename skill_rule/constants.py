from typing import Final


CONFIG_FILENAME: Final[str] = ".rules.json"

RULES_DIRNAME: Final[str] = "rules"
RULE_SUFFIX: Final[str] = ".rule.md"
SKILL_FILENAME: Final[str] = "SKILL.md"
UNKNOWN_CATEGORY: Final[str] = "unknown"
DEFAULT_RULE_VERSION: Final[str] = "1.0.0"

DEFAULT_REGISTRY_URL: Final[str] = "https://github.com/ngxtm/skill-rule"
DEFAULT_BRANCH: Final[str] = "main"
DEFAULT_AGENTS: Final[tuple[str, ...]] = ("cursor", "claude", "copilot")
DEFAULT_INIT_AGENTS: Final[str] = "cursor,claude"

GITHUB_TOKEN_ENV: Final[str] = "GITHUB_TOKEN"
HTTP_TIMEOUT_SECONDS: Final[int] = 20
USER_AGENT: Final[str] = "skill-rule"

PACKAGE_JSON: Final[str] = "package.json"
PNPM_WORKSPACE_FILENAME: Final[str] = "pnpm-workspace.yaml"
LERNA_FILENAME: Final[str] = "lerna.json"

DEFAULT_SCAN_DIRS: Final[tuple[str, ...]] = (
    "apps",
    "packages",
    "src-tauri",
)
