"""Operations that change a Document.

All operations work on in-memory Documents only; writing the result back
to disk is up to the caller, once per command. Batch operations never
abort on an unknown item number: the valid numbers are still applied and
the unknown ones are reported in the result.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .document import Document, Item, Section
from .errors import InvalidInput, ItemNotFound

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Per-number outcome of a batch operation."""

    succeeded: List[int] = field(default_factory=list)
    failures: List[ItemNotFound] = field(default_factory=list)

    @property
    def missing(self) -> List[int]:
        return [failure.number for failure in self.failures]

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class MoveResult(BatchResult):
    """BatchResult of a move, with the number each item got in the destination."""

    renumbered: Dict[int, int] = field(default_factory=dict)


def _unique(numbers: Iterable[int]) -> List[int]:
    seen: List[int] = []
    for number in numbers:
        if number not in seen:
            seen.append(number)
    return seen


def _target_section(doc: Document, section: Optional[str]) -> Optional[Section]:
    if section is None:
        return None
    target = doc.find_section(section)
    if target is None:
        raise InvalidInput(f"There is no section named '{section}' in the list")
    return target


def add_item(
    doc: Document,
    text: str,
    section: Optional[str] = None,
    ascii_checkbox: bool = False,
) -> Item:
    """Append a new, not yet done item.

    Args:
        doc: Document to add to
        text: Item text; surrounding whitespace is dropped
        section: Title of the section to add to (default: the last section)
        ascii_checkbox: Use "[ ]" instead of the emoji checkbox when the
            document has no items to take the style from

    Returns:
        The new Item, numbered one above the current maximum

    Raises:
        InvalidInput: Empty text, text spanning several lines or unknown section
    """
    text = text.strip() if text else ""
    if not text:
        raise InvalidInput("Item text can't be empty")
    if "\n" in text or "\r" in text:
        raise InvalidInput("Item text must be a single line")

    target = _target_section(doc, section)
    inherited = doc.default_ascii_checkbox()
    item = Item(
        number=doc.max_number() + 1,
        text=text,
        done=False,
        eol=doc.newline,
        width=doc.default_width(),
        ascii_checkbox=ascii_checkbox if inherited is None else inherited,
    )
    doc.insert_item(item, target)
    logger.debug(f"Added item {item.number}: {text!r}")
    return item


def set_done(doc: Document, numbers: Iterable[int], done: bool = True) -> BatchResult:
    """Mark items done (or not done) by number."""
    result = BatchResult()
    for number in _unique(numbers):
        item = doc.get(number)
        if item is None:
            result.failures.append(ItemNotFound(number))
            continue
        item.done = done
        result.succeeded.append(number)
    logger.debug(f"Set done={done} on {result.succeeded}, missing {result.missing}")
    return result


def move_items(
    numbers: Iterable[int],
    source: Document,
    dest: Document,
    section: Optional[str] = None,
) -> MoveResult:
    """Move items from one document to another.

    Each moved item keeps its text, done state and attached lines and is
    appended to ``dest`` under the next free number there, in the order
    the numbers were requested. ``source`` and ``dest`` may be the same
    document, which moves items between its sections.

    Raises:
        InvalidInput: ``section`` does not exist in ``dest`` (nothing is moved)
    """
    target = _target_section(dest, section)
    result = MoveResult()
    for number in _unique(numbers):
        if number not in source:
            result.failures.append(ItemNotFound(number))
            continue
        item = source.pop_item(number)
        moved = item.relocated(
            dest.max_number() + 1,
            dest.default_width(),
            dest.newline,
            ascii_checkbox=dest.default_ascii_checkbox(),
        )
        dest.insert_item(moved, target)
        result.succeeded.append(number)
        result.renumbered[number] = moved.number
    logger.debug(f"Moved {result.renumbered}, missing {result.missing}")
    return result


def remove_items(doc: Document, numbers: Iterable[int]) -> BatchResult:
    """Delete items, along with their attached lines."""
    result = BatchResult()
    for number in _unique(numbers):
        if number not in doc:
            result.failures.append(ItemNotFound(number))
            continue
        doc.pop_item(number)
        result.succeeded.append(number)
    return result


def renumber(doc: Document) -> Dict[int, int]:
    """Number items 1..n in document order.

    Numbers reserved by duplicate item lines kept as plain text are
    skipped, so a renumbered item never loses its number to one of them
    when the file is read again.

    Returns:
        Mapping of old number to new number for the items that changed
    """
    changes: Dict[int, int] = {}
    for item, new_number in zip(list(doc.items()), doc.free_numbers()):
        if item.number != new_number:
            changes[item.number] = new_number
            item.number = new_number
    doc.reindex()
    logger.debug(f"Renumbered {len(changes)} items")
    return changes
