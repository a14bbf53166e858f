"""Library-facing helpers running the whole pipeline in one call.

``evaluate`` is the path most callers want: parse, resolve definitions if
the text has any, and return the normal form. The individual stages stay
available in their own modules for callers that need finer control.
"""

from __future__ import annotations

import logging
from typing import Optional

from grapl.config import GraplConfig
from grapl.errors import UndefinedVariable
from grapl.expr import GraphExpr, Program
from grapl.normal import normalize
from grapl.parser import Source, parse
from grapl.resolve import resolve
from grapl.serialize import serialize

logger = logging.getLogger("grapl.api")


def evaluate(
    source: Source,
    name: Optional[str] = None,
    config: Optional[GraplConfig] = None,
) -> GraphExpr:
    """Parse text and reduce it to normal form.

    Args:
        source: Expression or program text.
        name: Definition to evaluate instead of the program target.
        config: Configuration for every stage; defaults to
            ``GraplConfig.default()``.

    Returns:
        Normal form of the target expression (or of ``name``).

    Raises:
        GraplError: Any parse, resolution or resource-limit failure.
    """
    config = config or GraplConfig.default()
    parsed = parse(source, config.parser)
    if isinstance(parsed, Program):
        return resolve(parsed, name, config.resolver, config.normalizer)
    if name is not None:
        raise UndefinedVariable(name)
    logger.debug("Input has no definitions; normalizing expression directly")
    return normalize(parsed, config.normalizer)


def evaluate_text(
    source: Source,
    name: Optional[str] = None,
    config: Optional[GraplConfig] = None,
) -> str:
    """Like :func:`evaluate`, returning the serialized normal form."""
    return serialize(evaluate(source, name, config))


__all__ = ["evaluate", "evaluate_text"]
