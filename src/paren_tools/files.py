"""
File I/O helpers for s-expression documents.
"""

import logging
from pathlib import Path
from typing import Any

from paren_tools.exceptions import FileNotFoundError as ParenFileNotFoundError
from paren_tools.exceptions import ReadError
from paren_tools.sexp import read, render_pretty

logger = logging.getLogger(__name__)


def read_file(shape: Any, path: str | Path, *, config=None) -> Any:
    """
    Read a value of the given shape from a UTF-8 file.

    Args:
        shape: Shape to read (see :func:`paren_tools.read`)
        path: Path to the file
        config: Optional :class:`~paren_tools.config.Config`

    Returns:
        The value read

    Raises:
        FileNotFoundError: If the file doesn't exist
        ReadError: If the contents cannot be read as ``shape``; the error
            context names the file
    """
    path = Path(path)
    if not path.exists():
        raise ParenFileNotFoundError(
            "S-expression file not found",
            context={"file": str(path)},
            suggestions=["Check that the file path is correct"],
        )

    text = path.read_text(encoding="utf-8")
    logger.debug(f"Read {len(text)} characters from {path}")
    try:
        return read(shape, text, config=config)
    except ReadError as e:
        e.context["file"] = str(path)
        e.args = (e._format_message(),)
        raise


def write_file(value: Any, path: str | Path, width: int | None = None, *, config=None) -> None:
    """
    Pretty-print a value into a UTF-8 file, followed by a newline.

    Args:
        value: Value to write
        path: Path to save to
        width: Target line width (default from config)
        config: Optional :class:`~paren_tools.config.Config`
    """
    path = Path(path)
    text = render_pretty(value, width, config=config)
    path.write_text(text + "\n", encoding="utf-8")
    logger.debug(f"Wrote {len(text) + 1} characters to {path}")
