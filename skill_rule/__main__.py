import logging
from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich.console import Console

from skill_rule import __version__
from skill_rule.agents import all_agents, parse_agent_list
from skill_rule.config import ConfigRepository, default_registry
from skill_rule.constants import DEFAULT_BRANCH, DEFAULT_INIT_AGENTS
from skill_rule.detection import detect_in_path, is_valid_category, scan_project
from skill_rule.errors import SyncAppError
from skill_rule.log import configure_logging
from skill_rule.models import (
    CategoryConfig,
    CategoryId,
    ProjectConfig,
    RegistryConfig,
    RegistryType,
    SyncResult,
)
from skill_rule.registry import create_registry
from skill_rule.registry.github import parse_repo_url
from skill_rule.sync import SyncEngine
from skill_rule.tui import SyncConsoleUI


logger = logging.getLogger(__name__)

PATH_PREFIXES = ("./", "../", "/", ".\\")


def _split_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _local_registry(path: Path) -> RegistryConfig:
    return RegistryConfig(type=RegistryType.LOCAL, url=str(path.expanduser().resolve()))


def _registry_from_value(value: Optional[str], root: Path) -> RegistryConfig:
    if not value:
        return default_registry()
    candidate = Path(value).expanduser()
    if not candidate.is_absolute():
        candidate = root / candidate
    if candidate.is_dir():
        return RegistryConfig(type=RegistryType.LOCAL, url=value)
    parse_repo_url(value)
    return RegistryConfig(type=RegistryType.GITHUB, url=value, branch=DEFAULT_BRANCH)


def _load_config(root: Path) -> ProjectConfig:
    try:
        return ConfigRepository(root).load()
    except SyncAppError as exc:
        raise click.ClickException(str(exc))


def _run_sync(
    ui: SyncConsoleUI,
    root: Path,
    config: ProjectConfig,
    dry_run: bool = False,
    verbose: bool = False,
) -> SyncResult:
    try:
        result = SyncEngine(root, dry_run=dry_run).sync(config)
    except SyncAppError as exc:
        raise click.ClickException(str(exc))
    ui.render_sync_result(result, mode="dry-run" if dry_run else "sync", verbose=verbose)
    return result


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="skill-rule")
@click.option(
    "-C",
    "--project-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    help="Project root holding .rules.json.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, project_dir: Path, verbose: bool) -> None:
    """Sync coding rules to AI agents."""
    configure_logging(verbose)
    ctx.obj = {"root": project_dir.resolve(), "verbose": verbose}


@cli.command(help="Initialize rules config for this project.")
@click.option("-a", "--agents", default=DEFAULT_INIT_AGENTS, show_default=True, help="Comma-separated agent list.")
@click.option("-r", "--registry", "registry_value", default=None, help="Registry GitHub URL or local path.")
@click.option("-s", "--scan", default=None, help="Additional directories to scan (comma-separated).")
@click.option("-y", "--yes", is_flag=True, help="Skip prompts, use defaults.")
@click.option("-i", "--interactive", is_flag=True, help="Pick detected categories interactively.")
@click.pass_obj
def init(
    obj: Dict[str, Any],
    agents: str,
    registry_value: Optional[str],
    scan: Optional[str],
    yes: bool,
    interactive: bool,
) -> None:
    ui = SyncConsoleUI(Console())
    root: Path = obj["root"]
    repository = ConfigRepository(root)

    if repository.exists():
        ui.render_config_exists(str(repository.config_path))
        return

    agent_ids = parse_agent_list(agents)
    if not agent_ids:
        raise click.ClickException(f"No valid agents specified: {agents}")

    try:
        registry = _registry_from_value(registry_value, root)
    except SyncAppError as exc:
        raise click.ClickException(str(exc))

    detection = scan_project(root, _split_csv(scan) or None)
    ui.render_detection(detection)

    detected = detection.frameworks
    if interactive and not yes and detected:
        from skill_rule.tui.category_selector import select_categories

        detected = select_categories(detected)

    categories = {category: CategoryConfig(enabled=True) for category in detected}
    config = repository.create(agents=agent_ids, categories=categories, registry=registry)
    ui.render_init_result(config, str(repository.config_path))


@cli.command(help="Sync rules from registry to local agent directories.")
@click.option("--local", "local_path", type=click.Path(path_type=Path), default=None, help="Sync from a local registry path.")
@click.option("--dry-run", is_flag=True, help="Show what would be synced without writing.")
@click.pass_obj
def sync(obj: Dict[str, Any], local_path: Optional[Path], dry_run: bool) -> None:
    ui = SyncConsoleUI(Console())
    root: Path = obj["root"]
    config = _load_config(root)
    if local_path is not None:
        config.registry = _local_registry(local_path)

    result = _run_sync(ui, root, config, dry_run=dry_run, verbose=obj["verbose"])
    if not result.success:
        raise click.exceptions.Exit(1)


@cli.command("list", help="List available categories from registry.")
@click.option("--local", "local_path", type=click.Path(path_type=Path), default=None, help="Use a local registry path.")
@click.pass_obj
def list_categories(obj: Dict[str, Any], local_path: Optional[Path]) -> None:
    ui = SyncConsoleUI(Console())
    root: Path = obj["root"]

    registry_config = default_registry()
    if ConfigRepository(root).exists():
        registry_config = _load_config(root).registry
    if local_path is not None:
        registry_config = _local_registry(local_path)

    try:
        registry = create_registry(registry_config, root)
    except SyncAppError as exc:
        raise click.ClickException(str(exc))
    if not registry.is_available():
        raise click.ClickException(f"Registry not available: {registry_config.url}")

    counts: dict[CategoryId, int] = {}
    warnings: list[str] = []
    for category in registry.list_categories():
        try:
            counts[category] = len(registry.fetch_category(category))
        except Exception as exc:
            logger.warning("Failed to fetch category %s: %s", category, exc)
            warnings.append(f"Failed to fetch category {category} ({exc})")
    ui.render_categories(registry_config.url, counts)
    ui.render_warnings(warnings)


@cli.command(help="List supported AI agents.")
def agents() -> None:
    ui = SyncConsoleUI(Console())
    ui.render_agents(all_agents())


@cli.command(help="Add paths (./lib) or category names (react, nestjs) to config.")
@click.argument("items", nargs=-1, required=True)
@click.option("--sync/--no-sync", "auto_sync", default=True, help="Sync after adding.")
@click.pass_obj
def add(obj: Dict[str, Any], items: tuple[str, ...], auto_sync: bool) -> None:
    ui = SyncConsoleUI(Console())
    root: Path = obj["root"]
    repository = ConfigRepository(root)
    config = _load_config(root)

    added: list[tuple[CategoryId, Optional[str]]] = []
    existing: list[str] = []
    warnings: list[str] = []

    for item in items:
        if item.startswith(PATH_PREFIXES):
            detected = detect_in_path(root, item)
            if not detected:
                warnings.append(f"No frameworks detected in: {item}")
            for category in detected:
                if category in config.categories:
                    existing.append(str(category))
                    continue
                config.categories[category] = CategoryConfig(enabled=True)
                added.append((category, item))
        elif is_valid_category(item):
            category = CategoryId(item)
            if category in config.categories:
                existing.append(item)
                continue
            config.categories[category] = CategoryConfig(enabled=True)
            added.append((category, None))
        else:
            warnings.append(f"Unknown category: {item}")

    if added:
        try:
            repository.save(config)
        except SyncAppError as exc:
            raise click.ClickException(str(exc))
    ui.render_add_result(added, existing, warnings)

    if not added:
        return
    if not auto_sync:
        ui.render_next('Run "sr sync" to fetch rules.')
        return

    result = _run_sync(ui, root, config, verbose=obj["verbose"])
    if not result.success:
        raise click.exceptions.Exit(1)


def main() -> int:
    # Without standalone mode click returns the code of a raised Exit.
    try:
        code = cli(standalone_mode=False)
    except click.exceptions.Abort:
        return 1
    except click.ClickException as exc:
        exc.show()
        return 2
    return code if isinstance(code, int) else 0


if __name__ == "__main__":
    raise SystemExit(main())
