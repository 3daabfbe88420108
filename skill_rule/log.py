import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "skill_rule"


def configure_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """Route package logs to a rich handler on stderr."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=verbose,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
