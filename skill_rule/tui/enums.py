from enum import Enum

from skill_rule.models import SkipReason


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    MAGENTA = "magenta"
    DIM = "dim"
    WHITE = "white"


SKIP_REASON_STYLE = {
    SkipReason.EXCLUDED: UIStyle.YELLOW.value,
    SkipReason.OVERRIDDEN: UIStyle.MAGENTA.value,
}
