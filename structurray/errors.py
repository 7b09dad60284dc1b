"""
Structurray Errors

Every failure the library reports is a StructurrayError. Each kind also
derives from the built-in exception a caller would naturally expect, so
`except ValueError` / `except IndexError` keep working.
"""

from __future__ import annotations

from typing import Any, Optional


class StructurrayError(Exception):
    """Base class for all structurray failures."""


class InvalidIdentifier(StructurrayError, ValueError):
    """A string is not a valid identifier (bad alphabet or leading symbol)."""

    def __init__(self, identifier: Any, reason: str):
        super().__init__(f"Invalid identifier {identifier!r}: {reason}")
        self.identifier = identifier
        self.reason = reason


class DuplicateIndex(StructurrayError, ValueError):
    """Two supplied identifiers decode to the same index."""

    def __init__(self, index: int, identifiers: tuple[str, ...]):
        super().__init__(
            f"Index {index} supplied more than once (as {', '.join(map(repr, identifiers))})"
        )
        self.index = index
        self.identifiers = identifiers


class NonContiguousIndex(StructurrayError, ValueError):
    """A dense array was given indices with a gap."""

    def __init__(self, expected: int, found: int):
        super().__init__(
            f"Dense pseudo-array requires contiguous indices: expected {expected}, found {found}"
        )
        self.expected = expected
        self.found = found


class OutOfRange(StructurrayError, IndexError):
    """An ordinal position lies outside the array."""

    def __init__(self, position: Any, length: int, upper: Optional[int] = None):
        upper = length if upper is None else upper
        super().__init__(f"Position {position!r} out of range [0, {upper}) for length {length}")
        self.position = position
        self.length = length


class CapacityExceeded(StructurrayError, OverflowError):
    """An index would go beyond the largest supported index."""

    def __init__(self, index: int, limit: int):
        super().__init__(f"Index {index} exceeds the supported maximum {limit}")
        self.index = index
        self.limit = limit


class NullValue(StructurrayError, ValueError):
    """A slot written to the store holds None, which the store reads as a delete."""

    def __init__(self, identifier: str):
        super().__init__(
            f"Slot {identifier!r} holds None; an update document would delete it instead of writing it"
        )
        self.identifier = identifier
