"""Tests for borrow scopes and reference handles.

Critical Invariants:
- Refs dereference only while every lease is alive
- Invalidating a scope makes earlier leases stale but keeps the scope usable
- Closed scopes refuse to lend
- Reborrowed refs are bound to all their scopes
"""

import pytest

from cowmap.core.borrow import BorrowScope, Ref, as_ref
from cowmap.errors import DanglingReferenceError, ScopeClosedError


def test_lend_and_get_returns_same_object(scope):
    """A ref hands back the lent object itself, not a copy."""
    data = [1, 2, 3]
    ref = scope.lend(data)

    assert ref.get() is data
    assert ref.is_alive()


def test_ref_dangles_after_scope_closes():
    """CRITICAL: reading through a ref after its scope ended must fail.

    Why: Returning data whose owner has moved on is the use-after-free case.
    """
    scope = BorrowScope("short")
    ref = scope.lend({"a": 1})
    scope.close()

    assert not ref.is_alive()
    with pytest.raises(DanglingReferenceError, match="outlived scope 'short'") as info:
        ref.get()
    assert info.value.lease is ref.leases[0]


def test_invalidate_bumps_generation_and_keeps_scope_open(scope):
    """Refs from an older generation are stale; new refs are fine."""
    old = scope.lend("old")
    scope.invalidate()
    new = scope.lend("new")

    assert scope.generation == 1
    assert not old.is_alive()
    assert new.get() == "new"


def test_closed_scope_refuses_to_lend():
    """Lending from a closed scope raises ScopeClosedError."""
    scope = BorrowScope()
    scope.close()

    with pytest.raises(ScopeClosedError, match="closed scope"):
        scope.lend(1)


def test_close_is_idempotent():
    scope = BorrowScope()
    scope.close()
    scope.close()

    assert scope.closed


def test_lease_from_other_scope_is_not_alive():
    """A scope only vouches for leases it issued."""
    scope_a = BorrowScope("a")
    scope_b = BorrowScope("b")

    lease = scope_a.lease()

    assert lease.is_alive()
    assert not scope_b.is_alive(lease)


def test_reborrow_is_bound_to_both_scopes():
    """A reborrowed ref dangles when either scope ends."""
    outer = BorrowScope("outer")
    inner = BorrowScope("inner")
    original = outer.lend([1])

    derived = original.reborrow(inner)
    assert derived.get() is original.get()
    assert len(derived.leases) == 2

    inner.close()
    assert original.is_alive()
    assert not derived.is_alive()


def test_reborrow_of_stale_ref_fails():
    scope = BorrowScope()
    ref = scope.lend(1)
    scope.invalidate()

    with pytest.raises(DanglingReferenceError):
        ref.reborrow(BorrowScope())


def test_ref_requires_a_lease():
    with pytest.raises(ValueError, match="at least one lease"):
        Ref([1], ())


def test_as_ref_rejects_plain_values():
    """Borrowed arguments must come from a scope."""
    with pytest.raises(TypeError, match="Borrowed value must be a Ref"):
        as_ref([1, 2], "value")


def test_as_ref_rejects_stale_refs():
    scope = BorrowScope()
    ref = scope.lend(1)
    scope.close()

    with pytest.raises(DanglingReferenceError):
        as_ref(ref, "key")


def test_scope_context_manager_closes():
    with BorrowScope("ctx") as ctx:
        ref = ctx.lend(1)
        assert ref.is_alive()

    assert ctx.closed
    assert not ref.is_alive()
