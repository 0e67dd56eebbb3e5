"""Tests for the copy-on-write value cell.

Critical Invariants:
- Exactly one state at a time
- Borrowed → Owned is the only in-place transition
- Materialization clones at most once
- Mutations after materialization never reach the borrowed source
"""

from dataclasses import dataclass, field

import pytest

from cowmap.core.borrow import BorrowScope
from cowmap.core.cow import CowValue, Form, ToOwned, get_cloner, to_owned, to_owned_shallow
from cowmap.errors import DanglingReferenceError


@dataclass
class Document:
    title: str
    tags: list[str] = field(default_factory=list)
    copies: int = 0

    def __to_owned__(self) -> "Document":
        self.copies += 1
        return Document(self.title, list(self.tags))


def test_cell_needs_exactly_one_state():
    with pytest.raises(ValueError, match="exactly one"):
        CowValue()


def test_borrowed_read_does_not_copy(scope):
    source = [1, 2, 3]
    cell = CowValue.borrowed(scope.lend(source))

    assert cell.form is Form.BORROWED
    assert cell.read() is source


def test_owned_read_returns_payload():
    payload = {"x": 1}
    cell = CowValue.owned(payload)

    assert cell.form is Form.OWNED
    assert cell.read() is payload
    assert cell.ref is None


def test_materialize_clones_once(scope):
    """CRITICAL: Second and later materializations never reclone."""
    source = [1, 2, 3]
    cell = CowValue.borrowed(scope.lend(source))

    assert cell.materialize() is True
    first = cell.read()
    assert cell.materialize() is False
    assert cell.read() is first
    assert first == source
    assert first is not source


def test_get_mut_isolates_source(scope):
    """Changes through get_mut stay private to the cell."""
    source = [1, 2, 3]
    cell = CowValue.borrowed(scope.lend(source))

    cell.get_mut().append(4)

    assert cell.form is Form.OWNED
    assert cell.read() == [1, 2, 3, 4]
    assert source == [1, 2, 3]


def test_make_owned_is_idempotent(scope):
    cell = CowValue.borrowed(scope.lend([1]))

    first = cell.make_owned()
    second = cell.make_owned()

    assert first is second
    assert cell.form is Form.OWNED


def test_into_owned_leaves_cell_unchanged(scope):
    source = [7]
    cell = CowValue.borrowed(scope.lend(source))

    owned = cell.into_owned()

    assert owned == source
    assert owned is not source
    assert cell.form is Form.BORROWED


def test_stale_borrowed_cell_fails_on_use():
    scope = BorrowScope()
    cell = CowValue.borrowed(scope.lend([1]))
    scope.close()

    assert cell.form is Form.BORROWED
    with pytest.raises(DanglingReferenceError):
        cell.read()
    with pytest.raises(DanglingReferenceError):
        cell.get_mut()


def test_reborrow_owned_points_at_payload(scope):
    payload = [1, 2]
    cell = CowValue.owned(payload)

    borrowed = cell.reborrow(scope)

    assert borrowed.form is Form.BORROWED
    assert borrowed.read() is payload
    assert cell.form is Form.OWNED


def test_duplicate_keeps_form(scope):
    source = [1]
    borrowed = CowValue.borrowed(scope.lend(source))
    owned = CowValue.owned([2])

    borrowed_copy = borrowed.duplicate()
    owned_copy = owned.duplicate()

    assert borrowed_copy.form is Form.BORROWED
    assert borrowed_copy.read() is source
    assert owned_copy.form is Form.OWNED
    assert owned_copy.read() == [2]
    assert owned_copy.read() is not owned.read()


def test_to_owned_uses_protocol():
    """Values implementing ToOwned control their own copy."""
    doc = Document("notes", ["a"])

    assert isinstance(doc, ToOwned)
    clone = to_owned(doc)

    assert doc.copies == 1
    assert clone == Document("notes", ["a"])
    assert clone.tags is not doc.tags


def test_to_owned_falls_back_to_deepcopy():
    nested = {"a": [1, [2, 3]]}

    clone = to_owned(nested)

    assert clone == nested
    assert clone["a"][1] is not nested["a"][1]


def test_shallow_clone_shares_nested_data():
    nested = [[1], [2]]

    clone = to_owned_shallow(nested)

    assert clone is not nested
    assert clone[0] is nested[0]


def test_get_cloner_modes():
    assert get_cloner("deep") is to_owned
    assert get_cloner("shallow") is to_owned_shallow
    with pytest.raises(ValueError, match="Unknown clone mode"):
        get_cloner("bogus")  # type: ignore[arg-type]
