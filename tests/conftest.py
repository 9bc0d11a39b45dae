"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Ensure src directory is in Python path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


SAMPLE_LIST = (
    "# Todo\n"
    "\n"
    "Free-form intro text the tool never touches.\n"
    "\n"
    " 9  ⬜ write spec #docs\n"
    "    - remember the edge cases\n"
    "\n"
    "      and this paragraph too\n"
    "11  ✅ add tags\n"
    "\n"
    "## Later\n"
    "12. [ ] try ascii boxes\n"
    "13  [X] shouted done\n"
    "- [ ] an unnumbered checkbox stays plain text\n"
)


@pytest.fixture
def sample_text():
    """A list file mixing items, notes, headings and free text."""
    return SAMPLE_LIST
