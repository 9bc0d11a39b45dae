"""Parse markdown list files into Documents.

Parsing is total: any text produces a Document, and content that is not
recognised as an item or a heading is kept as opaque passthrough.
"""

import logging
import re
from typing import List, Optional, Set

from .classifier import LineKind, LineMatch, classify_line, marker_is_ascii
from .document import Document, Item, OpaqueBlock, Section, line_terminator

logger = logging.getLogger(__name__)

# Keeps each line's own terminator so mixed line endings survive a round trip
LINE_RE = re.compile(r"[^\r\n]*(?:\r\n|\r|\n)|[^\r\n]+")


def split_lines(raw_text: str) -> List[str]:
    """Split text into lines, each keeping its terminator."""
    return LINE_RE.findall(raw_text)


def item_from_match(match: LineMatch, eol: str) -> Item:
    """Build an Item from a classified item line."""
    groups = match.match
    number_field = groups.group("number")
    marker = groups.group("marker")
    return Item(
        number=int(number_field),
        text=groups.group("text"),
        done=match.done,
        eol=eol,
        sep=groups.group("sep"),
        gap=groups.group("gap"),
        marker=marker,
        number_field=number_field,
        width=len(number_field),
        ascii_checkbox=marker_is_ascii(marker),
    )


class _DocumentBuilder:
    """Accumulates classified lines into sections and entries."""

    def __init__(self):
        self.sections: List[Section] = [Section()]
        self.current_item: Optional[Item] = None
        self.pending_blanks: List[str] = []
        self.taken: Set[int] = set()
        self.reserved: Set[int] = set()

    @property
    def section(self) -> Section:
        return self.sections[-1]

    def feed(self, raw: str) -> None:
        eol = line_terminator(raw)
        match = classify_line(raw[:len(raw) - len(eol)], self.taken)

        if match.kind is LineKind.BLANK and self.current_item is not None:
            # Undecided until we see whether an indented note follows
            self.pending_blanks.append(raw)
            return

        if match.kind is LineKind.INDENTED and self.current_item is not None:
            self.current_item.attached_lines.extend(self.pending_blanks)
            self.current_item.attached_lines.append(raw)
            self.pending_blanks = []
            return

        self._flush_blanks()
        self.current_item = None

        if match.kind is LineKind.ITEM:
            item = item_from_match(match, eol)
            self.section.entries.append(item)
            self.taken.add(item.number)
            self.current_item = item
        elif match.kind is LineKind.HEADING:
            self.sections.append(Section(heading=raw))
        else:
            if match.duplicate_number is not None:
                self.reserved.add(match.duplicate_number)
            self._add_opaque(raw)

    def finish(self, newline: str) -> Document:
        self._flush_blanks()
        return Document(self.sections, newline=newline, reserved_numbers=self.reserved)

    def _flush_blanks(self) -> None:
        for raw in self.pending_blanks:
            self._add_opaque(raw)
        self.pending_blanks = []

    def _add_opaque(self, raw: str) -> None:
        entries = self.section.entries
        if entries and isinstance(entries[-1], OpaqueBlock):
            entries[-1].lines.append(raw)
        else:
            entries.append(OpaqueBlock([raw]))


def parse(raw_text: str) -> Document:
    """Parse the text of a list file into a Document.

    Args:
        raw_text: Full file contents; may be empty

    Returns:
        Document whose rendering is identical to raw_text
    """
    lines = split_lines(raw_text)
    newline = next((line_terminator(line) for line in lines if line_terminator(line)), "\n")

    builder = _DocumentBuilder()
    for raw in lines:
        builder.feed(raw)
    doc = builder.finish(newline)

    logger.debug(f"Parsed {len(lines)} lines into {len(doc.sections)} sections with {len(doc)} items")
    return doc
