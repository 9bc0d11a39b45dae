"""Exception types raised by the todo list core and its collaborators."""

from pathlib import Path
from typing import Union


class TodoError(Exception):
    """Base class for every error the CLI reports to the user."""


class InvalidInput(TodoError):
    """Raised when an operation is given input it cannot act on."""


class ItemNotFound(TodoError):
    """A requested item number does not exist in the list."""

    def __init__(self, number: int):
        self.number = number
        super().__init__(f"Item {number} doesn't exist in the list")


class StorageError(TodoError):
    """Reading or writing a list file failed."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Couldn't access '{self.path}': {reason}")


class ConfigError(TodoError):
    """The configuration file is unreadable or invalid."""
