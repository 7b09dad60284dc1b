"""
Structurray Pseudo-Array

An ordered sequence of same-typed values stored under codec identifiers,
for stores that only offer string-keyed maps. The array owns its keys:
callers mutate it only through push / pop / insert_at / remove_at / set_at,
and cross into the store's map representation only through from_mapping()
and export() / to_dict().

Two renumbering modes, fixed for the life of an array:

    DENSE   indices are always 0..N-1. Insert and remove re-key the tail.
    SPARSE  removal leaves a gap. Insert takes the middle of a gap if the
            neighbours leave one; otherwise it shifts slots up by one until
            the shift reaches a gap. Only the slots up to that gap get new
            keys, so later slots keep the keys a full tail shift would
            have changed.

Usage:
    arr = PseudoArray(["x", "y"])               # A -> x, B -> y
    arr.push("z")                               # "C"
    arr.insert_at(1, "w")                       # A, B -> w, C -> y, D -> z
    store.update(arr.to_dict())

    tail = PseudoArray.from_mapping(store_snapshot, mode=Mode.SPARSE)
"""

from __future__ import annotations

import logging
from bisect import bisect_left
from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from operator import index as op_index
from typing import Any, Generic, Optional, TypeVar, Union

from structurray import codec
from structurray.errors import CapacityExceeded, DuplicateIndex, NonContiguousIndex, OutOfRange

logger = logging.getLogger(__name__)

V = TypeVar("V")


class Mode(Enum):
    """Renumbering behaviour of a pseudo-array."""
    DENSE = "dense"     # Contiguous indices, re-key on insert/remove
    SPARSE = "sparse"   # Gaps allowed, re-key only when unavoidable


class PseudoArray(Generic[V]):
    """Ordered slots of (identifier, value), sorted by index.

    Three parallel lists hold the slots in order. `_indices` is strictly
    increasing and `_keys[i] == codec.encode(_indices[i])` at all times.
    Every public mutation checks its arguments and capacity before touching
    any list, so a failed call leaves the array unchanged.
    """

    def __init__(self, values: Iterable[V] = (), mode: Union[Mode, str] = Mode.DENSE) -> None:
        self._mode = Mode(mode)
        self._indices: list[int] = []
        self._keys: list[str] = []
        self._values: list[V] = []
        for value in values:
            self.push(value)

    @classmethod
    def from_mapping(
        cls,
        source: Union[Mapping[str, V], Iterable[tuple[str, V]]],
        mode: Union[Mode, str] = Mode.DENSE,
    ) -> PseudoArray[V]:
        """Rebuild an array from the store's map representation.

        Accepts a mapping or an iterable of (identifier, value) pairs. Order
        comes from the decoded indices, never from iteration order.

        Raises:
            InvalidIdentifier: a key is not a valid identifier
            CapacityExceeded: a key decodes above MAX_INDEX
            DuplicateIndex: two pairs carry the same identifier
            NonContiguousIndex: DENSE mode and the indices are not 0..N-1
        """
        pairs = source.items() if isinstance(source, Mapping) else source
        entries = sorted(
            ((codec.decode(key), key, value) for key, value in pairs),
            key=lambda entry: entry[0],
        )

        for before, after in zip(entries, entries[1:]):
            if before[0] == after[0]:
                raise DuplicateIndex(before[0], (before[1], after[1]))

        arr = cls(mode=mode)
        if arr._mode is Mode.DENSE:
            for expected, entry in enumerate(entries):
                if entry[0] != expected:
                    raise NonContiguousIndex(expected, entry[0])

        arr._indices = [entry[0] for entry in entries]
        arr._keys = [entry[1] for entry in entries]
        arr._values = [entry[2] for entry in entries]
        return arr

    @property
    def mode(self) -> Mode:
        return self._mode

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def push(self, value: V) -> str:
        """Append after the highest index and return the new identifier."""
        if not self._indices:
            index, key = 0, codec.encode(0)
        else:
            index = self._indices[-1] + 1
            if index > codec.MAX_INDEX:
                raise CapacityExceeded(index, codec.MAX_INDEX)
            key = codec.successor(self._keys[-1])

        self._indices.append(index)
        self._keys.append(key)
        self._values.append(value)
        return key

    def pop(self) -> Optional[tuple[str, V]]:
        """Remove the slot with the highest index. None when empty."""
        if not self._indices:
            return None
        self._indices.pop()
        return self._keys.pop(), self._values.pop()

    def insert_at(self, position: int, value: V) -> str:
        """Insert before the slot currently at ordinal `position`.

        `position == len(self)` appends, exactly like push(). Returns the
        identifier given to the new slot.
        """
        length = len(self._indices)
        position = self._check_position(position, length, inclusive=True)
        if position == length:
            return self.push(value)

        if self._mode is Mode.SPARSE:
            below = self._indices[position - 1] if position else -1
            above = self._indices[position]
            if above - below > 1:
                index = (below + above) // 2
                return self._place(position, index, value)

            # No room: shift up to the first slot that already has a gap above it
            end = position
            while end + 1 < length and self._indices[end + 1] == self._indices[end] + 1:
                end += 1
        else:
            end = length - 1

        if self._indices[end] + 1 > codec.MAX_INDEX:
            raise CapacityExceeded(self._indices[end] + 1, codec.MAX_INDEX)

        index = self._indices[position]
        self._shift(position, end + 1, 1)
        return self._place(position, index, value)

    def remove_at(self, position: int) -> V:
        """Remove the slot at ordinal `position` and return its value.

        DENSE arrays close the gap by re-keying every later slot.
        """
        position = self._check_position(position, len(self._indices))
        del self._indices[position]
        del self._keys[position]
        value = self._values.pop(position)
        if self._mode is Mode.DENSE:
            self._shift(position, len(self._indices), -1)
        return value

    def set_at(self, position: int, value: V) -> str:
        """Replace the value at `position`; its identifier does not change."""
        position = self._check_position(position, len(self._indices))
        self._values[position] = value
        return self._keys[position]

    def compact(self) -> dict[str, str]:
        """Renumber to indices 0..N-1.

        Returns old identifier -> new identifier for each re-keyed slot.
        Always empty for DENSE arrays.
        """
        renames: dict[str, str] = {}
        for position, index in enumerate(self._indices):
            if index != position:
                key = codec.encode(position)
                renames[self._keys[position]] = key
                self._indices[position] = position
                self._keys[position] = key
        if renames:
            logger.debug("Compacted %d of %d slot(s)", len(renames), len(self._indices))
        return renames

    def _place(self, position: int, index: int, value: V) -> str:
        key = codec.encode(index)
        self._indices.insert(position, index)
        self._keys.insert(position, key)
        self._values.insert(position, value)
        return key

    def _shift(self, start: int, stop: int, delta: int) -> None:
        """Move slots start..stop-1 by `delta` indices and re-key them."""
        if start >= stop:
            return
        for position in range(start, stop):
            index = self._indices[position] + delta
            self._indices[position] = index
            self._keys[position] = codec.encode(index)
        logger.debug(
            "Re-keyed %d slot(s) at positions %d..%d (shift %+d)",
            stop - start, start, stop - 1, delta,
        )

    @staticmethod
    def _check_position(position: int, length: int, inclusive: bool = False) -> int:
        position = op_index(position)
        upper = length + 1 if inclusive else length
        # Negative positions are errors, not offsets from the end
        if not 0 <= position < upper:
            raise OutOfRange(position, length, upper)
        return position

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get(self, position: int) -> V:
        """Value at ordinal `position`. Raises OutOfRange."""
        position = self._check_position(position, len(self._indices))
        return self._values[position]

    __getitem__ = get

    def identifier_at(self, position: int) -> str:
        position = self._check_position(position, len(self._indices))
        return self._keys[position]

    def position_of(self, identifier: str) -> int:
        """Ordinal of the slot stored under `identifier`.

        Binary search over the keys in length-first order.
        Raises InvalidIdentifier if malformed, KeyError if absent.
        """
        codec.validate(identifier)
        position = bisect_left(self._keys, codec.sort_key(identifier), key=codec.sort_key)
        if position < len(self._keys) and self._keys[position] == identifier:
            return position
        raise KeyError(identifier)

    def identifiers(self) -> list[str]:
        return list(self._keys)

    def indices(self) -> list[int]:
        return list(self._indices)

    def values(self) -> list[V]:
        return list(self._values)

    # ------------------------------------------------------------------
    # Store boundary
    # ------------------------------------------------------------------

    def export(self) -> list[tuple[str, V]]:
        """(identifier, value) pairs in index order."""
        return list(zip(self._keys, self._values))

    def to_dict(self) -> dict[str, V]:
        """Exported pairs as a dict, keys in index order."""
        return dict(zip(self._keys, self._values))

    def copy(self) -> PseudoArray[V]:
        clone = type(self)(mode=self._mode)
        clone._indices = list(self._indices)
        clone._keys = list(self._keys)
        clone._values = list(self._values)
        return clone

    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._indices)

    def __iter__(self) -> Iterator[V]:
        return iter(list(self._values))

    def __contains__(self, identifier: Any) -> bool:
        if not codec.is_valid(identifier):
            return False
        position = bisect_left(self._keys, codec.sort_key(identifier), key=codec.sort_key)
        return position < len(self._keys) and self._keys[position] == identifier

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PseudoArray):
            return NotImplemented
        return (
            self._mode is other._mode
            and self._keys == other._keys
            and self._values == other._values
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        shown = ", ".join(self._keys[:8])
        more = f", ...{len(self._keys) - 8} more" if len(self._keys) > 8 else ""
        return f"<PseudoArray {self._mode.value}: {len(self)} slot(s) [{shown}{more}]>"
