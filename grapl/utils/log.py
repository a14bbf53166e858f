"""Rich output for the ``grapl`` logger hierarchy.

The engine is a library, so only the ``grapl`` logger is touched here;
the root logger and whatever handlers the host application installed on
it are left as they are.
"""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "grapl"


class GraplRichHandler(RichHandler):
    """RichHandler installed by :func:`setup_logging`, recognizable on reinstall."""


def setup_logging(
    verbose: bool = False, console: Optional[Console] = None
) -> logging.Logger:
    """Route ``grapl.*`` records to a Rich console.

    Calling it again replaces the handler from the previous call, so the
    logger never ends up with duplicate output. Records stop propagating to
    the root logger while the handler is installed.

    Args:
        verbose: Show debug records (rewrite counts, cycle traces).
        console: Rich Console to write to; defaults to stderr.

    Returns:
        The configured ``grapl`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for existing in list(logger.handlers):
        if isinstance(existing, GraplRichHandler):
            logger.removeHandler(existing)

    handler = GraplRichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        log_time_format="[%H:%M:%S]",
    )
    handler.setFormatter(logging.Formatter("[%(name)s] %(message)s"))

    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
    return logger
