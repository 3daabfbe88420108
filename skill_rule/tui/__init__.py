from skill_rule.tui.renderers import SyncConsoleUI

__all__ = ["SyncConsoleUI"]
