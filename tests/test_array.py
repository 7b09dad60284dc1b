"""
Structurray Pseudo-Array Test Suite

Tests the ordered, validly-keyed collection:
1. Push / pop and the append path
2. Dense insert and remove (full tail re-keying)
3. Sparse insert and remove (gaps, midpoint placement, bounded ripple)
4. Import from a store map: ordering, validation, duplicates, contiguity
5. Access, lookup by identifier, and failure without partial mutation
"""

import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from hypothesis import given
from hypothesis import strategies as st

from structurray import codec
from structurray.array import Mode, PseudoArray
from structurray.errors import (
    CapacityExceeded,
    DuplicateIndex,
    InvalidIdentifier,
    NonContiguousIndex,
    OutOfRange,
)


def assert_invariants(arr: PseudoArray) -> None:
    """Keys decode to strictly increasing indices; dense arrays have no gaps."""
    indices = [codec.decode(key) for key in arr.identifiers()]
    assert indices == arr.indices()
    assert all(a < b for a, b in zip(indices, indices[1:]))
    assert arr.identifiers() == sorted(arr.identifiers(), key=codec.sort_key)
    if arr.mode is Mode.DENSE:
        assert indices == list(range(len(arr)))


# ============================================================================
# 1. Push / pop
# ============================================================================

def test_push_assigns_consecutive_identifiers() -> None:
    arr = PseudoArray()
    assert [arr.push(v) for v in "abc"] == ["A", "B", "C"]
    assert arr.export() == [("A", "a"), ("B", "b"), ("C", "c")]
    assert_invariants(arr)


def test_push_crosses_into_two_symbol_names() -> None:
    arr = PseudoArray(range(52))
    assert arr.identifier_at(51) == "z"
    assert arr.push("next") == "A0"
    assert_invariants(arr)


def test_pop_returns_highest_slot() -> None:
    arr = PseudoArray(["x", "y"])
    assert arr.pop() == ("B", "y")
    assert arr.pop() == ("A", "x")
    assert arr.pop() is None
    assert len(arr) == 0


def test_constructor_values_and_mode() -> None:
    arr = PseudoArray([1, 2], mode="sparse")
    assert arr.mode is Mode.SPARSE
    assert list(arr) == [1, 2]
    with pytest.raises(ValueError):
        PseudoArray(mode="loose")


@given(
    st.lists(st.integers(), max_size=30),
    st.sampled_from([Mode.DENSE, Mode.SPARSE]),
    st.integers(),
)
def test_push_then_pop_restores_state(values, mode, extra) -> None:
    arr = PseudoArray(values, mode=mode)
    if values and mode is Mode.SPARSE:
        arr.remove_at(0)
    before = arr.copy()
    key = arr.push(extra)
    assert arr.pop() == (key, extra)
    assert arr == before


def test_push_after_sparse_gap_uses_max_plus_one() -> None:
    arr = PseudoArray("abc", mode=Mode.SPARSE)
    arr.remove_at(1)
    assert arr.identifiers() == ["A", "C"]
    assert arr.push("d") == "D"


# ============================================================================
# 2. Dense mode
# ============================================================================

def test_dense_insert_shifts_tail() -> None:
    arr = PseudoArray(["orig0", "orig1", "orig2"])
    assert arr.insert_at(1, "x") == "B"
    assert arr.export() == [("A", "orig0"), ("B", "x"), ("C", "orig1"), ("D", "orig2")]
    assert_invariants(arr)


def test_dense_insert_at_front_and_end() -> None:
    arr = PseudoArray(["b"])
    assert arr.insert_at(0, "a") == "A"
    assert arr.insert_at(2, "c") == "C"
    assert list(arr) == ["a", "b", "c"]
    assert_invariants(arr)


def test_dense_remove_closes_gap() -> None:
    arr = PseudoArray("abcd")
    assert arr.remove_at(1) == "b"
    assert arr.export() == [("A", "a"), ("B", "c"), ("C", "d")]
    assert_invariants(arr)


def test_dense_compact_is_noop() -> None:
    arr = PseudoArray("ab")
    assert arr.compact() == {}


def test_dense_rekey_is_logged(caplog) -> None:
    arr = PseudoArray("abc")
    with caplog.at_level(logging.DEBUG, logger="structurray.array"):
        arr.insert_at(0, "z")
    assert "Re-keyed 3 slot(s)" in caplog.text


# ============================================================================
# 3. Sparse mode
# ============================================================================

def test_sparse_remove_leaves_gap() -> None:
    arr = PseudoArray("abcd", mode=Mode.SPARSE)
    assert arr.remove_at(1) == "b"
    assert arr.export() == [("A", "a"), ("C", "c"), ("D", "d")]
    assert_invariants(arr)


def test_sparse_insert_fills_gap_without_rekeying() -> None:
    arr = PseudoArray.from_mapping({"A": "a", "K": "k"}, mode=Mode.SPARSE)
    before = arr.identifiers()
    key = arr.insert_at(1, "mid")
    assert key == codec.encode(5)   # midpoint of indices 0 and 10
    assert arr.identifiers() == [before[0], key, before[1]]
    assert_invariants(arr)


def test_sparse_insert_before_first_uses_leading_gap() -> None:
    arr = PseudoArray.from_mapping({"E": 1}, mode=Mode.SPARSE)
    assert arr.insert_at(0, 0) == "B"   # (-1 + 4) // 2
    assert_invariants(arr)


def test_sparse_insert_ripple_stops_at_gap() -> None:
    # Indices 0, 1, 2, 5
    arr = PseudoArray.from_mapping({"A": "a", "B": "b", "C": "c", "F": "f"}, mode=Mode.SPARSE)
    assert arr.insert_at(1, "x") == "B"
    assert arr.export() == [("A", "a"), ("B", "x"), ("C", "b"), ("D", "c"), ("F", "f")]
    assert_invariants(arr)


def test_sparse_insert_without_any_gap_shifts_whole_tail() -> None:
    arr = PseudoArray("abc", mode=Mode.SPARSE)
    arr.insert_at(0, "z")
    assert arr.export() == [("A", "z"), ("B", "a"), ("C", "b"), ("D", "c")]


def test_sparse_compact_renumbers() -> None:
    arr = PseudoArray.from_mapping({"A": 1, "C": 3, "F": 6}, mode=Mode.SPARSE)
    assert arr.compact() == {"C": "B", "F": "C"}
    assert arr.export() == [("A", 1), ("B", 3), ("C", 6)]
    assert arr.compact() == {}


@given(
    st.lists(
        st.tuples(st.sampled_from(["push", "pop", "insert", "remove"]), st.integers(0, 40)),
        max_size=60,
    ),
    st.sampled_from([Mode.DENSE, Mode.SPARSE]),
)
def test_random_operations_match_list(ops, mode) -> None:
    arr = PseudoArray(mode=mode)
    model = []
    for step, (op, n) in enumerate(ops):
        if op == "push":
            arr.push(step)
            model.append(step)
        elif op == "pop":
            popped = arr.pop()
            assert (popped[1] if popped else None) == (model.pop() if model else None)
        elif op == "insert":
            position = n % (len(model) + 1)
            arr.insert_at(position, step)
            model.insert(position, step)
        elif model:
            position = n % len(model)
            assert arr.remove_at(position) == model.pop(position)
        assert list(arr) == model
        assert_invariants(arr)


# ============================================================================
# 4. Import / export
# ============================================================================

def test_import_orders_by_index() -> None:
    arr = PseudoArray.from_mapping({"B": 10, "A": 5})
    assert arr.export() == [("A", 5), ("B", 10)]


def test_import_orders_by_length_first() -> None:
    arr = PseudoArray.from_mapping({"A0": "fifty-two", "z": "fifty-one"}, mode=Mode.SPARSE)
    assert arr.identifiers() == ["z", "A0"]


def test_import_rejects_invalid_keys() -> None:
    with pytest.raises(InvalidIdentifier):
        PseudoArray.from_mapping({"A": 1, "0B": 2})
    with pytest.raises(InvalidIdentifier):
        PseudoArray.from_mapping({1: "x"})


def test_import_rejects_duplicates() -> None:
    with pytest.raises(DuplicateIndex) as excinfo:
        PseudoArray.from_mapping([("A", 1), ("B", 2), ("A", 3)])
    assert excinfo.value.index == 0


def test_dense_import_requires_contiguous_indices() -> None:
    with pytest.raises(NonContiguousIndex) as excinfo:
        PseudoArray.from_mapping({"A": 1, "C": 3})
    assert (excinfo.value.expected, excinfo.value.found) == (1, 2)
    assert len(PseudoArray.from_mapping({"A": 1, "C": 3}, mode=Mode.SPARSE)) == 2


@given(st.lists(st.integers(), max_size=40), st.sampled_from([Mode.DENSE, Mode.SPARSE]))
def test_import_export_idempotent(values, mode) -> None:
    arr = PseudoArray(values, mode=mode)
    if mode is Mode.SPARSE and len(values) > 2:
        arr.remove_at(1)
    exported = arr.export()
    assert PseudoArray.from_mapping(reversed(exported), mode=mode) == arr
    assert PseudoArray.from_mapping(arr.to_dict(), mode=mode).export() == exported


def test_to_dict_is_in_index_order() -> None:
    arr = PseudoArray(range(60))
    assert list(arr.to_dict()) == arr.identifiers()


# ============================================================================
# 5. Access and failure atomicity
# ============================================================================

def test_get_and_position_of() -> None:
    arr = PseudoArray.from_mapping({"A": "a", "C": "c", "A0": "x"}, mode=Mode.SPARSE)
    assert arr.get(1) == "c"
    assert arr[2] == "x"
    assert arr.position_of("A0") == 2
    assert "C" in arr
    assert "B" not in arr
    assert "0A" not in arr
    with pytest.raises(KeyError):
        arr.position_of("B")
    with pytest.raises(InvalidIdentifier):
        arr.position_of("9")


def test_set_at_keeps_identifier() -> None:
    arr = PseudoArray("ab")
    assert arr.set_at(1, "B!") == "B"
    assert arr.export() == [("A", "a"), ("B", "B!")]


@pytest.mark.parametrize("position", [-1, 3, 10])
def test_out_of_range_positions(position) -> None:
    arr = PseudoArray("abc")
    before = arr.copy()
    for call in (arr.get, arr.remove_at, arr.identifier_at, lambda p: arr.set_at(p, "z")):
        with pytest.raises(OutOfRange):
            call(position)
    assert arr == before


def test_insert_position_bounds() -> None:
    arr = PseudoArray("ab")
    with pytest.raises(OutOfRange):
        arr.insert_at(3, "z")
    with pytest.raises(IndexError):
        arr.insert_at(-1, "z")
    assert arr.insert_at(2, "c") == "C"


def test_empty_array_bounds() -> None:
    arr = PseudoArray()
    with pytest.raises(OutOfRange):
        arr.get(0)
    with pytest.raises(OutOfRange):
        arr.remove_at(0)
    assert arr.insert_at(0, "a") == "A"


def test_capacity_exceeded_leaves_array_unchanged() -> None:
    top = codec.MAX_IDENTIFIER
    arr = PseudoArray.from_mapping({"A": "first", top: "last"}, mode=Mode.SPARSE)
    before = arr.copy()
    with pytest.raises(CapacityExceeded):
        arr.push("overflow")
    assert arr == before

    full = PseudoArray.from_mapping(
        {codec.encode(codec.MAX_INDEX - 1): "a", top: "b"}, mode=Mode.SPARSE
    )
    before = full.copy()
    with pytest.raises(CapacityExceeded):
        full.insert_at(1, "c")
    assert full == before


def test_equality_and_repr() -> None:
    assert PseudoArray("ab") == PseudoArray("ab")
    assert PseudoArray("ab") != PseudoArray("ab", mode=Mode.SPARSE)
    assert PseudoArray("ab") != PseudoArray("ba")
    assert repr(PseudoArray("ab")) == "<PseudoArray dense: 2 slot(s) [A, B]>"


def test_copy_keeps_subclass() -> None:
    class Scores(PseudoArray):
        pass

    scores = Scores([1, 2], mode=Mode.SPARSE)
    clone = scores.copy()
    assert type(clone) is Scores
    assert clone == scores
    clone.push(3)
    assert len(scores) == 2
