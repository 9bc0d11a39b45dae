"""mdtodo - todo lists kept as plain markdown files."""

__version__ = "0.1.0"

from .document import Document, Item, ItemSummary, OpaqueBlock, Section, list_items
from .errors import ConfigError, InvalidInput, ItemNotFound, StorageError, TodoError
from .mutations import BatchResult, MoveResult, add_item, move_items, remove_items, renumber, set_done
from .parser import parse
from .renderer import render
from .storage import load_document, save_document
from .tags import extract_tags

__all__ = [
    "Document",
    "Item",
    "ItemSummary",
    "OpaqueBlock",
    "Section",
    "list_items",
    "TodoError",
    "InvalidInput",
    "ItemNotFound",
    "StorageError",
    "ConfigError",
    "BatchResult",
    "MoveResult",
    "add_item",
    "set_done",
    "move_items",
    "remove_items",
    "renumber",
    "parse",
    "render",
    "load_document",
    "save_document",
    "extract_tags",
    "__version__",
]
