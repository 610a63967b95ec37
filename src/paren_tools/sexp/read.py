"""
Reading typed values from s-expression text.

Example::

    from paren_tools import read, record, required

    @record
    class Point:
        x: float = required()
        y: float = required()

    point = read(Point, "(x 1.5) (y -2.0)")
"""

from __future__ import annotations

import logging
from typing import Any, List

from paren_tools.config import Config
from paren_tools.exceptions import ReadError

from .lexer import lex
from .protocol import from_parens
from .value import Value

logger = logging.getLogger(__name__)


def _shape_name(shape: Any) -> str:
    return getattr(shape, "__name__", None) or repr(shape)


def read(shape: Any, text: str, *, config=None) -> Any:
    """
    Read a value of the given shape from the whole of ``text``.

    Args:
        shape: Record class, ``Value``, built-in shape or parametrized
            ``list``/``tuple``/``Optional`` of those
        text: Source text
        config: Optional :class:`~paren_tools.config.Config`; its ``[read]``
            section controls the whitespace check and the nesting limit.
            Defaults apply when omitted; pass ``Config.load()`` to use
            project and user config files

    Returns:
        The value read

    Raises:
        ReadError: If the text cannot be lexed, does not match the shape, or
            has forms left over. The error context includes the line and
            column of the offending text.
    """
    if config is None:
        config = Config()

    logger.debug(f"Reading {_shape_name(shape)} from {len(text)} characters")

    try:
        buffer = lex(
            text,
            strict_whitespace=config.read.strict_whitespace,
            max_depth=config.read.max_depth,
        )
        view = buffer.view()
        result = from_parens(shape, view)
        view.expect_end()
    except ReadError as e:
        e.attach_source(text)
        raise
    return result


def read_values(text: str, *, config=None) -> List[Value]:
    """Read every top-level form of ``text`` as a :class:`Value`."""
    return read(List[Value], text, config=config)
