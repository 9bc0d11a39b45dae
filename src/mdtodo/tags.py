"""#tag extraction from item text."""

import re
from typing import Iterator, Set, Tuple

# A tag is '#' followed by word characters or '-'; a bare '#' is not a tag.
TAG_RE = re.compile(r"#([\w-]+)")


def extract_tags(text: str) -> Set[str]:
    """Return the set of tag names (without '#') found in text."""
    return {m.group(1) for m in TAG_RE.finditer(text)}


def tag_spans(text: str) -> Iterator[Tuple[int, int]]:
    """Yield (start, end) offsets of every tag token, '#' included."""
    for m in TAG_RE.finditer(text):
        yield m.start(), m.end()
