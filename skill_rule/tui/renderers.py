from typing import Optional

from rich.console import Console
from rich.panel import Panel

from skill_rule.agents import AgentConfig
from skill_rule.detection import framework_name
from skill_rule.models import CategoryId, DetectionResult, ProjectConfig, SyncResult
from skill_rule.tui.enums import UIStyle
from skill_rule.tui.tables import AgentsTable, DetectionTable, RegistryTable, SyncTable
from skill_rule.utils import compact_home_path


def _panel(title: str, body, style: str = UIStyle.BLUE.value) -> Panel:
    return Panel(body, title=title, border_style=style, padding=(0, 1))


def _bullets(items: list[str]) -> str:
    return "\n".join([f"- {item}" for item in items])


class SyncConsoleUI:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_detection(self, result: DetectionResult) -> None:
        if not result.frameworks:
            self.console.print(
                _panel(
                    "detection",
                    "No frameworks detected.\nAdd categories with: sr add <category>",
                    style=UIStyle.YELLOW.value,
                )
            )
        else:
            self.console.print(
                _panel(
                    f"detected {len(result.frameworks)} framework(s)",
                    DetectionTable.frameworks_table(result.frameworks),
                    style=UIStyle.GREEN.value,
                )
            )
        if result.skipped:
            lines = [f"{item.path}: {item.reason}" for item in result.skipped]
            self.console.print(_panel("unreadable directories", _bullets(lines), style=UIStyle.YELLOW.value))

    def render_config_exists(self, path: str) -> None:
        self.console.print(
            _panel("init", f"Config already exists: {compact_home_path(path)}", style=UIStyle.YELLOW.value)
        )

    def render_init_result(self, config: ProjectConfig, path: str) -> None:
        categories = ", ".join(str(key) for key in config.categories) or "(none)"
        body = (
            f"Created [bold]{compact_home_path(path)}[/bold]\n"
            f"Registry: {config.registry.url}\n"
            f"Agents: {', '.join(agent.value for agent in config.agents)}\n"
            f"Categories: {categories}"
        )
        self.console.print(_panel("init", body, style=UIStyle.GREEN.value))
        self.render_next('Run "sr sync" to fetch rules.')

    def render_sync_result(self, result: SyncResult, mode: str, verbose: bool = False) -> None:
        self.console.print(
            _panel("sync overview", SyncTable.summary_block(result, mode=mode), style=UIStyle.BLUE.value)
        )
        if result.synced and (verbose or mode == "dry-run"):
            self.console.print(
                _panel("synced rules", SyncTable.synced_table(result.synced), style=UIStyle.CYAN.value)
            )
        if result.skipped:
            self.console.print(
                _panel("skipped rules", SyncTable.skipped_table(result.skipped), style=UIStyle.YELLOW.value)
            )
        if result.errors:
            title = "sync aborted" if result.aborted else "errors"
            self.console.print(
                _panel(title, _bullets([str(error) for error in result.errors]), style=UIStyle.RED.value)
            )
        self.console.print(SyncTable.stats_panel(result))

    def render_categories(self, url: str, counts: dict[CategoryId, int]) -> None:
        if not counts:
            self.console.print(_panel("categories", "No categories found.", style=UIStyle.DIM.value))
            return
        self.console.print(
            _panel(f"categories @ {url}", RegistryTable.categories_table(counts), style=UIStyle.BLUE.value)
        )

    def render_agents(self, items: list[AgentConfig]) -> None:
        self.console.print(_panel("agents", AgentsTable.agents_table(items), style=UIStyle.BLUE.value))

    def render_add_result(
        self,
        added: list[tuple[CategoryId, Optional[str]]],
        existing: list[str],
        warnings: list[str],
    ) -> None:
        lines: list[str] = []
        for category, source in added:
            suffix = f" (from {source})" if source else ""
            lines.append(f"[green]+ {framework_name(category)}{suffix}[/green]")
        for item in existing:
            lines.append(f"[dim]= {item} (already exists)[/dim]")
        if lines:
            style = UIStyle.GREEN.value if added else UIStyle.DIM.value
            self.console.print(_panel(f"added {len(added)} category(s)", "\n".join(lines), style=style))
        self.render_warnings(warnings)

    def render_warnings(self, warnings: list[str]) -> None:
        if warnings:
            self.console.print(_panel("warnings", _bullets(warnings), style=UIStyle.YELLOW.value))

    def render_next(self, text: str) -> None:
        self.console.print(_panel("next", text, style=UIStyle.DIM.value))
