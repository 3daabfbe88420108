from collections import Counter

from rich.panel import Panel
from rich.table import Column, Table

from skill_rule.agents import AgentConfig
from skill_rule.detection import framework_name
from skill_rule.models import CategoryId, RuleSyncInfo, SyncResult
from skill_rule.tui.enums import SKIP_REASON_STYLE, UIStyle
from skill_rule.utils import compact_home_path


class SyncTable:
    @staticmethod
    def summary_block(result: SyncResult, mode: str) -> Table:
        per_agent = Counter(info.agent.value for info in result.synced)
        chips = [f"{key}={value}" for key, value in sorted(per_agent.items())]
        if not chips:
            chips = ["none"]

        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Mode", mode)
        table.add_row("Synced", str(len(result.synced)))
        table.add_row("Skipped", str(len(result.skipped)))
        table.add_row("Errors", str(len(result.errors)))
        table.add_row("Agents", "  ".join(chips))
        return table

    @staticmethod
    def synced_table(items: list[RuleSyncInfo]) -> Table:
        table = Table(
            Column(header="Rule", width=28),
            Column(header="Agent", width=12),
            Column(header="Target", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for info in items:
            target = compact_home_path(info.target) if info.target is not None else ""
            table.add_row(str(info.rule_id), info.agent.value, target)
        return table

    @staticmethod
    def skipped_table(items: list[RuleSyncInfo]) -> Table:
        table = Table(
            Column(header="Rule", width=28),
            Column(header="Agent", width=12),
            Column(header="Reason", width=12),
            Column(header="Source", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for info in items:
            reason = info.reason.value if info.reason is not None else ""
            style = SKIP_REASON_STYLE.get(info.reason, UIStyle.WHITE.value)
            table.add_row(
                str(info.rule_id),
                info.agent.value,
                f"[{style}]{reason}[/{style}]",
                info.path,
            )
        return table

    @staticmethod
    def stats_panel(result: SyncResult) -> Panel:
        table = Table(show_header=False, box=None)
        for key, value in result.summary().items():
            table.add_row(f"[bold]{key}[/bold]", str(value))
        return Panel(
            table,
            title="sync",
            border_style=UIStyle.GREEN.value if result.success else UIStyle.RED.value,
        )


class DetectionTable:
    @staticmethod
    def frameworks_table(frameworks: dict[CategoryId, list[str]]) -> Table:
        table = Table(
            Column(header="Framework", width=16),
            Column(header="Category", width=14),
            Column(header="Locations", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for category, locations in frameworks.items():
            table.add_row(framework_name(category), str(category), ", ".join(locations))
        return table


class RegistryTable:
    @staticmethod
    def categories_table(counts: dict[CategoryId, int]) -> Table:
        table = Table(
            Column(header="Category", width=20),
            Column(header="Name", width=16),
            Column(header="Rules", width=8, justify="right"),
            expand=True,
            header_style="bold",
        )
        for category, count in counts.items():
            table.add_row(str(category), framework_name(category), str(count))
        return table


class AgentsTable:
    @staticmethod
    def agents_table(items: list[AgentConfig]) -> Table:
        table = Table(
            Column(header="Agent", width=14),
            Column(header="Name", width=18),
            Column(header="Rules path", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for agent in items:
            table.add_row(agent.id.value, agent.name, agent.rules_path)
        return table
