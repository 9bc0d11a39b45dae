"""Loading and saving list files."""

import logging
import os
from pathlib import Path
from typing import Union

from .document import Document
from .errors import StorageError
from .parser import parse
from .renderer import render

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_document(path: PathLike) -> Document:
    """Load a list file.

    Args:
        path: Path of the list file

    Returns:
        The parsed Document, or an empty one if the file does not exist yet

    Raises:
        StorageError: The file exists but can't be read or decoded
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"{path} does not exist yet, starting an empty list")
        return Document()

    try:
        # newline="" keeps \r\n and \r as written
        with open(path, "r", encoding="utf-8", newline="") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise StorageError(path, str(e)) from e

    logger.debug(f"Loaded list from {path}")
    return parse(content)


def save_document(path: PathLike, doc: Document) -> None:
    """Replace a list file with the rendered Document.

    The text is written to a temporary file next to the target and then
    renamed over it, so the list file is never left half written.

    Raises:
        StorageError: Writing failed, e.g. the directory doesn't exist
    """
    path = Path(path)
    temp_file = path.with_name(f".{path.name}.tmp")
    content = render(doc)

    try:
        with open(temp_file, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(temp_file, path)
    except OSError as e:
        if temp_file.exists():
            temp_file.unlink()
        raise StorageError(path, str(e)) from e

    logger.debug(f"Saved {len(doc)} items to {path}")
