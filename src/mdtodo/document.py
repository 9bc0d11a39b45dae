"""In-memory model of a markdown todo list.

A Document is an ordered list of Sections. The first Section is the
implicit one holding whatever comes before the first heading. Each
Section holds Items and OpaqueBlocks in file order. Items are addressed
by their ``number``, which is independent of their position; the
Document keeps a number -> position index that is rebuilt after every
structural change.

Everything that is not understood (free-form notes, blank lines,
headings) is stored verbatim, line terminators included, so that an
unmodified Document renders back to exactly the text it was parsed from.
Item lines repeating an earlier number are kept as plain text too, and
their numbers stay reserved so no item is ever given one of them.
"""

import itertools
import logging
from dataclasses import dataclass, field, replace
from typing import AbstractSet, Dict, FrozenSet, Iterator, List, Optional, Tuple, Union

from .classifier import HEADING_LINE_RE, checkbox_for, marker_is_checked
from .tags import extract_tags

logger = logging.getLogger(__name__)

DEFAULT_NUMBER_WIDTH = 2
DEFAULT_SEP = "  "
DEFAULT_GAP = " "
LINE_TERMINATORS = ("\r\n", "\n", "\r")


def line_terminator(line: str) -> str:
    """Return the terminator a raw line ends with ("" for none)."""
    for terminator in LINE_TERMINATORS:
        if line.endswith(terminator):
            return terminator
    return ""


@dataclass
class Item:
    """A single numbered todo line plus the notes indented beneath it."""

    number: int
    text: str
    done: bool = False
    attached_lines: List[str] = field(default_factory=list)

    # Layout, remembered from the parsed line so untouched items render unchanged
    eol: str = "\n"
    sep: str = DEFAULT_SEP
    gap: str = DEFAULT_GAP
    marker: Optional[str] = None
    number_field: Optional[str] = None
    width: int = DEFAULT_NUMBER_WIDTH
    ascii_checkbox: bool = False

    @property
    def tags(self) -> FrozenSet[str]:
        """Tags found in the item text, recomputed on every access."""
        return frozenset(extract_tags(self.text))

    @property
    def notes(self) -> List[str]:
        """Attached lines without their line terminators."""
        return [line[:len(line) - len(line_terminator(line))] for line in self.attached_lines]

    def checkbox(self) -> str:
        """The checkbox to render; the marker as written is kept while it still matches."""
        if self.marker is not None and marker_is_checked(self.marker) == self.done:
            return self.marker
        return checkbox_for(self.done, self.ascii_checkbox)

    def number_text(self) -> str:
        if self.number_field is not None and int(self.number_field) == self.number:
            return self.number_field
        return str(self.number).rjust(self.width)

    def is_terminated(self) -> bool:
        if self.attached_lines:
            return bool(line_terminator(self.attached_lines[-1]))
        return bool(self.eol)

    def terminate(self, newline: str) -> None:
        """Give the item's last line a terminator if it has none."""
        if self.is_terminated():
            return
        if self.attached_lines:
            self.attached_lines[-1] += newline
        else:
            self.eol = newline

    def relocated(
        self,
        number: int,
        width: int,
        newline: str,
        ascii_checkbox: Optional[bool] = None,
    ) -> "Item":
        """Copy of this item under a new number, laid out for another list.

        The copy gets the default layout and the given checkbox style;
        with ``ascii_checkbox`` None it keeps the style it had.
        """
        item = replace(
            self,
            number=number,
            attached_lines=list(self.attached_lines),
            eol=newline,
            sep=DEFAULT_SEP,
            gap=DEFAULT_GAP,
            marker=None,
            number_field=None,
            width=width,
            ascii_checkbox=self.ascii_checkbox if ascii_checkbox is None else ascii_checkbox,
        )
        item.terminate(newline)
        return item

    def summary(self, section: Optional[str] = None) -> "ItemSummary":
        return ItemSummary(
            number=self.number,
            text=self.text,
            done=self.done,
            tags=self.tags,
            section=section,
        )


@dataclass
class OpaqueBlock:
    """A run of lines kept verbatim."""

    lines: List[str] = field(default_factory=list)

    def text(self) -> str:
        return "".join(self.lines)

    def trailing_blank_count(self) -> int:
        count = 0
        for line in reversed(self.lines):
            if line.strip():
                break
            count += 1
        return count


Entry = Union[Item, OpaqueBlock]


@dataclass
class Section:
    """A heading and the entries below it, up to the next heading."""

    heading: Optional[str] = None
    entries: List[Entry] = field(default_factory=list)

    @property
    def title(self) -> Optional[str]:
        """Heading text without the leading hashes."""
        if self.heading is None:
            return None
        match = HEADING_LINE_RE.match(self.heading.rstrip("\r\n"))
        return match.group("title").strip() if match else self.heading.strip()

    def items(self) -> List[Item]:
        return [entry for entry in self.entries if isinstance(entry, Item)]


@dataclass(frozen=True)
class ItemSummary:
    """Read-only view of an item, as shown by `ls`."""

    number: int
    text: str
    done: bool
    tags: FrozenSet[str]
    section: Optional[str] = None


class Document:
    """A parsed todo list file."""

    def __init__(
        self,
        sections: Optional[List[Section]] = None,
        newline: str = "\n",
        reserved_numbers: Optional[AbstractSet[int]] = None,
    ):
        self.sections: List[Section] = sections if sections else [Section()]
        self.newline = newline
        # Numbers written on duplicate item lines kept as plain text
        self.reserved_numbers = frozenset(reserved_numbers or ())
        self._index: Dict[int, Tuple[int, int]] = {}
        self.reindex()

    def __repr__(self) -> str:
        return f"Document(sections={len(self.sections)}, items={len(self._index)})"

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, number: int) -> bool:
        return number in self._index

    def reindex(self) -> None:
        """Rebuild the number -> (section, entry) index."""
        index: Dict[int, Tuple[int, int]] = {}
        for section_pos, section in enumerate(self.sections):
            for entry_pos, entry in enumerate(section.entries):
                if not isinstance(entry, Item):
                    continue
                if entry.number in index:
                    raise ValueError(f"Duplicate item number {entry.number} in document")
                index[entry.number] = (section_pos, entry_pos)
        self._index = index

    def items(self) -> Iterator[Item]:
        """Iterate over items in document order."""
        for section in self.sections:
            yield from section.items()

    def sections_with_items(self) -> Iterator[Tuple[Section, Item]]:
        for section in self.sections:
            for item in section.items():
                yield section, item

    def get(self, number: int) -> Optional[Item]:
        position = self._index.get(number)
        if position is None:
            return None
        section_pos, entry_pos = position
        return self.sections[section_pos].entries[entry_pos]

    def max_number(self) -> int:
        """Largest number used by an item or reserved, 0 when there is none."""
        return max(itertools.chain(self._index, self.reserved_numbers), default=0)

    def free_numbers(self) -> Iterator[int]:
        """Count up from 1, skipping reserved numbers."""
        return (n for n in itertools.count(1) if n not in self.reserved_numbers)

    def find_section(self, title: str) -> Optional[Section]:
        wanted = title.strip().lower()
        for section in self.sections:
            if section.title is not None and section.title.lower() == wanted:
                return section
        return None

    def last_item(self) -> Optional[Item]:
        last = None
        for last in self.items():
            pass
        return last

    def default_width(self) -> int:
        """Number width for new items, following the last item in the list."""
        last = self.last_item()
        if last is None:
            return DEFAULT_NUMBER_WIDTH
        return len(last.number_text())

    def default_ascii_checkbox(self) -> Optional[bool]:
        last = self.last_item()
        return None if last is None else last.ascii_checkbox

    def pop_item(self, number: int) -> Item:
        """Remove an item (with its attached lines) and return it."""
        if number not in self._index:
            raise KeyError(number)
        section_pos, entry_pos = self._index[number]
        entries = self.sections[section_pos].entries
        item = entries.pop(entry_pos)
        # Rejoin the opaque runs the item used to separate
        if 0 < entry_pos < len(entries):
            before, after = entries[entry_pos - 1], entries[entry_pos]
            if isinstance(before, OpaqueBlock) and isinstance(after, OpaqueBlock):
                before.lines.extend(after.lines)
                del entries[entry_pos]
        self.reindex()
        logger.debug(f"Removed item {number}")
        return item

    def insert_item(self, item: Item, section: Optional[Section] = None) -> None:
        """Insert an item into a section (default: the last one).

        The item goes right after the section's last item. A section
        without items gets it after its content but before any blank
        lines separating it from the next heading.
        """
        if item.number in self._index or item.number in self.reserved_numbers:
            raise ValueError(f"Item number {item.number} is already used")
        if section is None:
            section = self.sections[-1]
        entries = section.entries
        position = self._insertion_point(section)
        if section is self.sections[-1] and position == len(entries):
            self._terminate_last_line()
        entries.insert(position, item)
        self.reindex()
        logger.debug(f"Inserted item {item.number} at position {position}")

    def _insertion_point(self, section: Section) -> int:
        entries = section.entries
        for position in range(len(entries) - 1, -1, -1):
            if isinstance(entries[position], Item):
                return position + 1
        if entries and isinstance(entries[-1], OpaqueBlock):
            block = entries[-1]
            blanks = block.trailing_blank_count()
            if blanks == len(block.lines):
                return len(entries) - 1
            if blanks:
                entries.append(OpaqueBlock(block.lines[-blanks:]))
                del block.lines[-blanks:]
                return len(entries) - 1
        return len(entries)

    def _terminate_last_line(self) -> None:
        """Make sure the final line of the document ends with a newline."""
        for section in reversed(self.sections):
            if section.entries:
                last = section.entries[-1]
                if isinstance(last, Item):
                    last.terminate(self.newline)
                elif last.lines and not line_terminator(last.lines[-1]):
                    last.lines[-1] += self.newline
                return
            if section.heading is not None:
                if not line_terminator(section.heading):
                    section.heading += self.newline
                return


def list_items(doc: Document, include_done: bool = False) -> List[ItemSummary]:
    """Summaries of the items in a document, in document order.

    Args:
        doc: The document to list
        include_done: Also return completed items

    Returns:
        List of ItemSummary
    """
    return [
        item.summary(section.title)
        for section, item in doc.sections_with_items()
        if include_done or not item.done
    ]
