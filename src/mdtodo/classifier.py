"""Line classification for markdown todo lists.

Every line of a list file is exactly one of: a todo item, a section
heading, a blank line, an indented line (which may belong to the item
above it) or opaque content. Classification never fails; anything that
looks almost like an item but isn't quite one is opaque so that it is
written back untouched.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Container, Optional

logger = logging.getLogger(__name__)


UNCHECKED_EMOJI = "⬜"
CHECKED_EMOJI = "✅"
UNCHECKED_ASCII = "[ ]"
CHECKED_ASCII = "[x]"

ITEM_LINE_RE = re.compile(
    r"^(?P<number>[ \t]*\d+)"
    r"(?P<sep>[.)]?[ \t]*)"
    r"(?P<marker>(?:⬜|✅)\ufe0f?|\[[ xX]\])"
    r"(?P<gap>[ \t]+)"
    r"(?P<text>\S.*)$"
)
HEADING_LINE_RE = re.compile(r"^(?P<hashes>#{1,6})[ \t]+(?P<title>\S.*)$")


class LineKind(Enum):
    """What a single line of a list file is."""
    ITEM = "item"
    HEADING = "heading"
    INDENTED = "indented"
    BLANK = "blank"
    OPAQUE = "opaque"


def marker_is_checked(marker: str) -> bool:
    """Return True if a checkbox marker denotes a completed item."""
    return marker.startswith(CHECKED_EMOJI) or marker.lower() == CHECKED_ASCII


def marker_is_ascii(marker: str) -> bool:
    return marker.startswith("[")


def checkbox_for(done: bool, ascii_style: bool = False) -> str:
    """Canonical checkbox glyph for a completion state."""
    if ascii_style:
        return CHECKED_ASCII if done else UNCHECKED_ASCII
    return CHECKED_EMOJI if done else UNCHECKED_EMOJI


@dataclass
class LineMatch:
    """Result of classifying one line (without its terminator)."""
    kind: LineKind
    line: str
    match: Optional["re.Match[str]"] = None

    @property
    def number(self) -> Optional[int]:
        if self.kind is not LineKind.ITEM:
            return None
        return int(self.match.group("number"))

    @property
    def done(self) -> bool:
        return self.kind is LineKind.ITEM and marker_is_checked(self.match.group("marker"))

    @property
    def duplicate_number(self) -> Optional[int]:
        """Number written on an item line that was kept opaque as a duplicate."""
        if self.kind is not LineKind.OPAQUE or self.match is None:
            return None
        return int(self.match.group("number"))

    @property
    def title(self) -> Optional[str]:
        if self.kind is not LineKind.HEADING:
            return None
        return self.match.group("title").strip()


def classify_line(line: str, taken: Container[int] = ()) -> LineMatch:
    """Classify a single line of a list file.

    Args:
        line: The line body, without its line terminator
        taken: Item numbers already claimed earlier in the same document.
            An item line reusing one of them is treated as opaque.

    Returns:
        A LineMatch describing the line
    """
    if not line.strip():
        return LineMatch(LineKind.BLANK, line)

    item = ITEM_LINE_RE.match(line)
    if item:
        number = int(item.group("number"))
        if number in taken:
            logger.warning(f"Duplicate item number {number}, keeping line as plain text: {line!r}")
            return LineMatch(LineKind.OPAQUE, line, item)
        return LineMatch(LineKind.ITEM, line, item)

    heading = HEADING_LINE_RE.match(line)
    if heading:
        return LineMatch(LineKind.HEADING, line, heading)

    if line[0] in " \t":
        return LineMatch(LineKind.INDENTED, line)

    return LineMatch(LineKind.OPAQUE, line)
