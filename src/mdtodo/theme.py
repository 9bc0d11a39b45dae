"""Terminal styling for the todo CLI."""

from typing import Iterable, Iterator, Optional

from rich.console import Console
from rich.text import Text
from rich.theme import Theme

from .classifier import checkbox_for
from .document import ItemSummary
from .tags import tag_spans

TODO_THEME = Theme({
    'muted': "dim",
    'header': "bold underline",
    'success': "green bold",
    'warning': "yellow bold",
    'error': "red bold",
    'todo_pending': "yellow",
    'todo_completed': "green",
    'todo_done_text': "strike dim",
    'tag': "black on yellow",
})

# Numbers are padded to this width in listings
NUMBER_WIDTH = 3


def get_console(no_color: bool = False, stderr: bool = False) -> Console:
    """Get a console with the todo theme applied."""
    return Console(theme=TODO_THEME, no_color=no_color, highlight=False, stderr=stderr)


def highlight_tags(text: str, style: str = "") -> Text:
    """Text with every #tag token styled as a tag."""
    rendered = Text(text, style=style)
    for start, end in tag_spans(text):
        rendered.stylize("tag", start, end)
    return rendered


def format_item(item: ItemSummary, use_emoji: bool = True) -> Text:
    """Format an item line for display: number, checkbox and highlighted text."""
    checkbox_style = "todo_completed" if item.done else "todo_pending"
    line = Text()
    line.append(f"{item.number:>{NUMBER_WIDTH}} ", style="muted")
    line.append(checkbox_for(item.done, ascii_style=not use_emoji), style=checkbox_style)
    line.append(" ")
    line.append_text(highlight_tags(item.text, "todo_done_text" if item.done else ""))
    return line


def format_listing(items: Iterable[ItemSummary], use_emoji: bool = True) -> Iterator[Text]:
    """Lines for `ls`, with a header whenever the section changes."""
    current: Optional[str] = None
    for item in items:
        if item.section is not None and item.section != current:
            yield Text(item.section, style="header")
        current = item.section
        yield format_item(item, use_emoji)
