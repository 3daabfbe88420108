"""Interactive Textual-based selector for detected categories."""

from __future__ import annotations

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, SelectionList, Static
from textual.widgets.selection_list import Selection

from skill_rule.detection import framework_name
from skill_rule.models import CategoryId


class CategorySelectorApp(App[list[str]]):
    """Pick which detected categories to enable in a new config."""

    TITLE = "Category Selector"
    DEFAULT_CSS = """
    Screen {
        layout: vertical;
    }
    #info {
        height: 3;
        content-align: center middle;
        background: $primary-darken-2;
        color: $text;
        padding: 0 1;
    }
    SelectionList {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("a", "select_all", "Select All"),
        Binding("n", "select_none", "Select None"),
        Binding("enter", "confirm", "Confirm"),
        Binding("q", "quit_app", "Quit"),
    ]

    def __init__(self, detected: dict[CategoryId, list[str]]) -> None:
        super().__init__()
        self._detected = detected

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(
            f"Detected: {len(self._detected)} | "
            f"Use [a] select all, [n] select none, [enter] confirm",
            id="info",
        )
        selections: list[Selection[str]] = [
            Selection(f"{framework_name(category)} ({', '.join(locations)})", str(category), True)
            for category, locations in self._detected.items()
        ]
        yield SelectionList[str](*selections)
        yield Footer()

    def action_select_all(self) -> None:
        self.query_one(SelectionList).select_all()

    def action_select_none(self) -> None:
        self.query_one(SelectionList).deselect_all()

    def action_confirm(self) -> None:
        selection = self.query_one(SelectionList)
        self.exit([value for value in selection.selected])

    def action_quit_app(self) -> None:
        self.exit([])


def filter_detected(
    detected: dict[CategoryId, list[str]], selected: list[str]
) -> dict[CategoryId, list[str]]:
    """Keep only the selected categories, preserving detection order."""
    chosen = set(selected)
    return {category: locations for category, locations in detected.items() if category in chosen}


def select_categories(detected: dict[CategoryId, list[str]]) -> dict[CategoryId, list[str]]:
    if not detected:
        return {}
    selected = CategorySelectorApp(detected).run()
    return filter_detected(detected, selected or [])
