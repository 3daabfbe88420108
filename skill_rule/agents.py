from dataclasses import dataclass

from skill_rule.models import AgentId


@dataclass(frozen=True)
class AgentConfig:
    id: AgentId
    name: str
    rules_path: str
    detection_files: tuple[str, ...]


AGENT_CATALOG: dict[AgentId, AgentConfig] = {
    AgentId.CURSOR: AgentConfig(
        id=AgentId.CURSOR,
        name="Cursor",
        rules_path=".cursor/rules",
        detection_files=(".cursor", ".cursorrules"),
    ),
    AgentId.CLAUDE: AgentConfig(
        id=AgentId.CLAUDE,
        name="Claude Code",
        rules_path=".claude/rules",
        detection_files=(".claude", "CLAUDE.md"),
    ),
    AgentId.COPILOT: AgentConfig(
        id=AgentId.COPILOT,
        name="GitHub Copilot",
        rules_path=".github/rules",
        detection_files=(".github",),
    ),
    AgentId.ANTIGRAVITY: AgentConfig(
        id=AgentId.ANTIGRAVITY,
        name="Antigravity",
        rules_path=".agent/rules",
        detection_files=(".agent",),
    ),
    AgentId.OPENCODE: AgentConfig(
        id=AgentId.OPENCODE,
        name="OpenCode",
        rules_path=".opencode/rules",
        detection_files=(".opencode",),
    ),
    AgentId.GEMINI: AgentConfig(
        id=AgentId.GEMINI,
        name="Gemini",
        rules_path=".gemini/rules",
        detection_files=(".gemini",),
    ),
}


def get_agent_config(agent: AgentId) -> AgentConfig:
    return AGENT_CATALOG[AgentId(agent)]


def all_agents() -> list[AgentConfig]:
    return list(AGENT_CATALOG.values())


def is_valid_agent(value: str) -> bool:
    return value in {agent.value for agent in AgentId}


def parse_agent_list(value: str) -> list[AgentId]:
    """Parse a comma-separated agent list, dropping unknown or repeated ids."""
    agents: list[AgentId] = []
    for item in value.split(","):
        name = item.strip().lower()
        if not is_valid_agent(name):
            continue
        agent = AgentId(name)
        if agent not in agents:
            agents.append(agent)
    return agents
