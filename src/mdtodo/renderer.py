"""Render Documents back to markdown text."""

from .document import Document, Item


def render_item(item: Item) -> str:
    """Render an item line followed by its attached lines."""
    line = f"{item.number_text()}{item.sep}{item.checkbox()}{item.gap}{item.text}{item.eol}"
    return line + "".join(item.attached_lines)


def render(doc: Document) -> str:
    """Render a Document to the text of its list file."""
    parts = []
    for section in doc.sections:
        if section.heading is not None:
            parts.append(section.heading)
        for entry in section.entries:
            if isinstance(entry, Item):
                parts.append(render_item(entry))
            else:
                parts.append(entry.text())
    return "".join(parts)
