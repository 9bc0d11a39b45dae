"""Tests for add, done/undone, move, remove and renumber."""

import pytest

from mdtodo.document import Document, list_items
from mdtodo.errors import InvalidInput, ItemNotFound
from mdtodo.mutations import add_item, move_items, remove_items, renumber, set_done
from mdtodo.parser import parse
from mdtodo.renderer import render


def numbers_of(doc):
    return [item.number for item in doc.items()]


class TestAddItem:
    """Test adding items."""

    def test_scenario_add_after_max(self):
        doc = parse(" 9  ⬜ write spec\n11  ⬜ add tags\n")

        item = add_item(doc, "buy milk #errands")

        assert item.number == 12
        assert item.tags == {"errands"}
        assert item.done is False
        assert render(doc) == " 9  ⬜ write spec\n11  ⬜ add tags\n12  ⬜ buy milk #errands\n"

    def test_add_to_empty_document(self):
        doc = Document()
        item = add_item(doc, "first")
        assert item.number == 1
        assert render(doc) == " 1  ⬜ first\n"

    def test_add_ascii_when_no_items(self):
        doc = Document()
        add_item(doc, "first", ascii_checkbox=True)
        assert render(doc) == " 1  [ ] first\n"

    def test_checkbox_style_follows_document(self):
        doc = parse("1 [x] a\n")
        add_item(doc, "b", ascii_checkbox=False)
        assert render(doc) == "1 [x] a\n2  [ ] b\n"

    def test_add_is_monotonic(self):
        doc = parse("5  ⬜ a\n2  ⬜ b\n")
        assert add_item(doc, "c").number == 6
        assert add_item(doc, "d").number == 7

    def test_text_is_trimmed(self):
        doc = Document()
        assert add_item(doc, "  padded  ").text == "padded"

    @pytest.mark.parametrize("text", ["", "   ", "\t"])
    def test_empty_text_rejected(self, text):
        doc = parse("1  ⬜ a\n")
        with pytest.raises(InvalidInput):
            add_item(doc, text)
        assert render(doc) == "1  ⬜ a\n"

    def test_multiline_text_rejected(self):
        with pytest.raises(InvalidInput):
            add_item(Document(), "two\nlines")

    def test_terminates_last_line(self):
        doc = parse("1  ⬜ a")
        add_item(doc, "b")
        assert render(doc) == "1  ⬜ a\n2  ⬜ b\n"

    def test_terminates_last_attached_line(self):
        doc = parse("1  ⬜ a\n   note")
        add_item(doc, "b")
        assert render(doc) == "1  ⬜ a\n   note\n2  ⬜ b\n"

    def test_uses_document_newline(self):
        doc = parse("1  ⬜ a\r\n")
        add_item(doc, "b")
        assert render(doc) == "1  ⬜ a\r\n2  ⬜ b\r\n"

    def test_default_goes_to_last_section(self):
        doc = parse("# Work\n1  ⬜ a\n\n# Home\n2  ⬜ b\n")
        add_item(doc, "c")
        assert render(doc) == "# Work\n1  ⬜ a\n\n# Home\n2  ⬜ b\n3  ⬜ c\n"

    def test_named_section_after_its_last_item(self):
        doc = parse("# Work\n1  ⬜ a\n\n# Home\n2  ⬜ b\n")
        add_item(doc, "c", section="work")
        assert render(doc) == "# Work\n1  ⬜ a\n3  ⬜ c\n\n# Home\n2  ⬜ b\n"

    def test_section_without_items_keeps_blank_separator(self):
        doc = parse("# Work\n\n# Home\n")
        add_item(doc, "c", section="Work")
        assert render(doc) == "# Work\n 1  ⬜ c\n\n# Home\n"

    def test_section_with_notes_and_blank_separator(self):
        doc = parse("# Work\nsome notes\n\n# Home\n")
        add_item(doc, "c", section="Work")
        assert render(doc) == "# Work\nsome notes\n 1  ⬜ c\n\n# Home\n"

    def test_heading_without_newline(self):
        doc = parse("# Work")
        add_item(doc, "c")
        assert render(doc) == "# Work\n 1  ⬜ c\n"

    def test_unknown_section_rejected(self):
        doc = parse("# Work\n")
        with pytest.raises(InvalidInput):
            add_item(doc, "c", section="Nope")


class TestSetDone:
    """Test marking items done and not done."""

    def test_mark_done(self):
        doc = parse(" 9  ⬜ write spec\n11  ⬜ add tags\n")

        result = set_done(doc, [9, 11], True)

        assert result.ok
        assert result.succeeded == [9, 11]
        assert render(doc) == " 9  ✅ write spec\n11  ✅ add tags\n"

    def test_mark_undone(self):
        doc = parse("1  ✅ a\n")
        set_done(doc, [1], False)
        assert render(doc) == "1  ⬜ a\n"

    def test_partial_failure(self):
        doc = parse("1  ⬜ valid\n")

        result = set_done(doc, [1, 7], True)

        assert doc.get(1).done is True
        assert result.succeeded == [1]
        assert result.missing == [7]
        assert isinstance(result.failures[0], ItemNotFound)
        assert not result.ok

    def test_number_and_section_unchanged(self):
        doc = parse("# A\n4  ⬜ a\n")
        set_done(doc, [4])
        assert doc.get(4).number == 4
        assert doc.sections[1].items()[0] is doc.get(4)

    def test_repeated_number_processed_once(self):
        doc = parse("1  ⬜ a\n")
        assert set_done(doc, [1, 1]).succeeded == [1]


class TestMoveItems:
    """Test moving items between documents."""

    def test_scenario_move(self):
        source = parse(" 9  ⬜ write spec\n11  ✅ add tags\n")
        dest = parse("1  ⬜ x\n3  ⬜ y\n")

        result = move_items([9], source, dest)

        assert result.ok
        assert result.renumbered == {9: 4}
        assert 9 not in source
        moved = dest.get(4)
        assert moved.text == "write spec"
        assert moved.done is False
        assert render(source) == "11  ✅ add tags\n"
        assert render(dest) == "1  ⬜ x\n3  ⬜ y\n4  ⬜ write spec\n"

    def test_move_conserves_item_contents(self):
        source = parse("5  ✅ done thing #tag\n    - a note\n6  ⬜ stays\n")
        dest = Document()
        before = len(source) + len(dest)

        move_items([5], source, dest)

        moved = dest.get(1)
        assert moved.done is True
        assert moved.tags == {"tag"}
        assert moved.attached_lines == ["    - a note\n"]
        assert len(source) + len(dest) == before
        assert 5 not in source

    def test_move_in_request_order(self):
        source = parse("1  ⬜ a\n2  ⬜ b\n3  ⬜ c\n")
        dest = parse("10  ⬜ z\n")

        result = move_items([3, 1], source, dest)

        assert result.renumbered == {3: 11, 1: 12}
        assert [i.text for i in dest.items()] == ["z", "c", "a"]

    def test_partial_failure(self):
        source = parse("1  ⬜ a\n")
        dest = Document()

        result = move_items([1, 8], source, dest)

        assert result.succeeded == [1]
        assert result.missing == [8]
        assert len(source) == 0
        assert len(dest) == 1

    def test_old_number_is_freed(self):
        source = parse("1  ⬜ a\n2  ⬜ b\n")
        move_items([2], source, Document())
        assert numbers_of(source) == [1]
        assert add_item(source, "c").number == 2

    def test_move_within_document_to_section(self):
        doc = parse("# Now\n1  ⬜ a\n2  ⬜ b\n# Later\n")

        result = move_items([1], doc, doc, section="Later")

        assert result.renumbered == {1: 3}
        assert render(doc) == "# Now\n2  ⬜ b\n# Later\n3  ⬜ a\n"

    def test_unknown_section_moves_nothing(self):
        source = parse("1  ⬜ a\n")
        with pytest.raises(InvalidInput):
            move_items([1], source, Document(), section="missing")
        assert 1 in source

    def test_moved_item_takes_destination_checkbox_style(self):
        source = parse("1. ✅ shipped\n2) ⬜ open\n")
        dest = parse("1 [ ] x\n")

        move_items([1, 2], source, dest)

        assert render(dest) == "1 [ ] x\n2  [x] shipped\n3  [ ] open\n"

    def test_moved_item_keeps_style_in_empty_list(self):
        source = parse("1 [x] done\n")
        dest = Document()
        move_items([1], source, dest)
        assert render(dest) == " 1  [x] done\n"

    def test_moved_last_line_without_newline(self):
        source = parse("1  ⬜ a\n2  ⬜ b\n   note")
        dest = parse("1  ⬜ x\n")
        move_items([2], source, dest)
        assert render(dest) == "1  ⬜ x\n2  ⬜ b\n   note\n"

    def test_removal_rejoins_opaque_text(self):
        source = parse("intro\n1  ⬜ a\noutro\n")
        move_items([1], source, Document())
        assert len(source.sections[0].entries) == 1
        assert render(source) == "intro\noutro\n"


class TestRemoveItems:
    """Test deleting items."""

    def test_remove_with_notes(self):
        doc = parse("1  ⬜ a\n   note\n2  ⬜ b\n")

        result = remove_items(doc, [1, 5])

        assert result.succeeded == [1]
        assert result.missing == [5]
        assert render(doc) == "2  ⬜ b\n"


class TestRenumber:
    """Test renumbering."""

    def test_closes_gaps(self):
        doc = parse(" 9  ⬜ a\n11  ✅ b\n")

        changes = renumber(doc)

        assert changes == {9: 1, 11: 2}
        assert numbers_of(doc) == [1, 2]
        assert render(doc) == " 1  ⬜ a\n 2  ✅ b\n"

    def test_document_order_across_sections(self):
        doc = parse("# A\n7  ⬜ a\n# B\n3  ⬜ b\n")
        renumber(doc)
        assert render(doc) == "# A\n1  ⬜ a\n# B\n2  ⬜ b\n"
        assert doc.get(2).text == "b"

    def test_already_in_order(self):
        doc = parse("1  ⬜ a\n2  ⬜ b\n")
        assert renumber(doc) == {}

    def test_skips_numbers_of_duplicate_lines(self):
        doc = parse("2  ⬜ a\n2  ⬜ b\n1  ⬜ c\n")

        changes = renumber(doc)

        assert changes == {2: 1, 1: 3}
        assert render(doc) == "1  ⬜ a\n2  ⬜ b\n3  ⬜ c\n"

    def test_no_item_lost_after_reparse(self):
        doc = parse("2  ⬜ a\n2  ⬜ b\n1  ⬜ c\n")
        renumber(doc)

        reparsed = parse(render(doc))

        summaries = list_items(reparsed, include_done=True)
        assert [(s.number, s.text) for s in summaries] == [(1, "a"), (2, "b"), (3, "c")]

    def test_add_after_duplicate_line(self):
        doc = parse("1  ⬜ a\n4  ⬜ b\n4  ⬜ dup\n")
        doc.pop_item(4)
        assert add_item(doc, "new").number == 5


class TestListItems:
    """Test listing items."""

    def test_excludes_done_by_default(self, sample_text):
        doc = parse(sample_text)
        assert [i.number for i in list_items(doc)] == [9, 12]
        assert [i.number for i in list_items(doc, include_done=True)] == [9, 11, 12, 13]

    def test_summaries_carry_section_and_tags(self, sample_text):
        summary = list_items(parse(sample_text))[0]
        assert summary.section == "Todo"
        assert summary.tags == {"docs"}


class TestNumberUniqueness:
    """Numbers stay unique through any sequence of operations."""

    def test_mixed_operations(self):
        a = parse("1  ⬜ a\n2  ⬜ b\n5  ⬜ c\n")
        b = parse("2  ⬜ x\n")

        add_item(a, "d")
        move_items([1, 5], a, b)
        add_item(b, "y")
        set_done(a, [2, 6])
        move_items([2], b, a)
        renumber(b)
        add_item(a, "e")

        for doc in (a, b):
            numbers = numbers_of(doc)
            assert len(numbers) == len(set(numbers))
        assert len(a) + len(b) == 7
