"""
Structurray Codec

Bijection between non-negative integer indices and compact identifiers that
are valid field names in every common host language and key-value store.

Alphabet version 1 (a stored-format constant, never change it in place):

    full alphabet     0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz
    leading alphabet  ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz

Both are in ASCII order, so equal-length identifiers compare like their
indices. The first symbol is never a digit. Identifiers of length L cover
52 * 62**(L-1) consecutive indices, directly after all shorter ones:

    0 -> "A"    25 -> "Z"    26 -> "a"    51 -> "z"
    52 -> "A0"  3275 -> "zz"  3276 -> "A00"

Usage:
    name = encode(52)            # "A0"
    decode(name)                 # 52
    successor(name)              # "A1"
    sorted(names, key=sort_key)  # index order
"""

from __future__ import annotations

import string
from operator import index as op_index
from typing import Iterator

from structurray.errors import CapacityExceeded, InvalidIdentifier


ALPHABET_VERSION = 1
FULL_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase
LEADING_ALPHABET = string.ascii_uppercase + string.ascii_lowercase
FULL_BASE = len(FULL_ALPHABET)        # 62
LEADING_BASE = len(LEADING_ALPHABET)  # 52

# Unsigned 64-bit
MAX_INDEX = 2**64 - 1

_FULL_VALUES = {symbol: value for value, symbol in enumerate(FULL_ALPHABET)}
_LEADING_VALUES = {symbol: value for value, symbol in enumerate(LEADING_ALPHABET)}


def _block_start(length: int) -> int:
    """First index whose identifier has `length` symbols.

    Sum of the block sizes 52 * 62**(k-1) for k < length.
    """
    return LEADING_BASE * (FULL_BASE ** (length - 1) - 1) // (FULL_BASE - 1)


def _problem(identifier: object) -> str:
    """Why `identifier` is not valid, or "" when it is."""
    if not isinstance(identifier, str):
        return f"expected str, got {type(identifier).__name__}"
    if not identifier:
        return "empty string"
    if identifier[0] not in _LEADING_VALUES:
        if identifier[0] in _FULL_VALUES:
            return "starts with a digit"
        return f"symbol {identifier[0]!r} at position 0 is not a letter"
    for pos, symbol in enumerate(identifier[1:], 1):
        if symbol not in _FULL_VALUES:
            return f"symbol {symbol!r} at position {pos} is outside the base-62 alphabet"
    return ""


def _unchecked_decode(identifier: str) -> int:
    value = _LEADING_VALUES[identifier[0]]
    for symbol in identifier[1:]:
        value = value * FULL_BASE + _FULL_VALUES[symbol]
    return _block_start(len(identifier)) + value


def validate(identifier: str) -> str:
    """Return `identifier` unchanged, or raise InvalidIdentifier."""
    reason = _problem(identifier)
    if reason:
        raise InvalidIdentifier(identifier, reason)
    return identifier


def is_valid(identifier: object) -> bool:
    """Alphabet and leading-symbol check. Never raises."""
    return not _problem(identifier)


def encode(index: int) -> str:
    """Shortest identifier for `index`.

    Raises:
        TypeError: `index` is not an integer
        ValueError: `index` is negative
        CapacityExceeded: `index` is above MAX_INDEX
    """
    index = op_index(index)
    if index < 0:
        raise ValueError(f"Index must be non-negative, got {index}")
    if index > MAX_INDEX:
        raise CapacityExceeded(index, MAX_INDEX)

    # Find the length block, then write the offset inside it in mixed radix
    length = 1
    span = LEADING_BASE
    rest = index
    while rest >= span:
        rest -= span
        span *= FULL_BASE
        length += 1

    symbols = []
    for _ in range(length - 1):
        rest, digit = divmod(rest, FULL_BASE)
        symbols.append(FULL_ALPHABET[digit])
    symbols.append(LEADING_ALPHABET[rest])
    return "".join(reversed(symbols))


def decode(identifier: str) -> int:
    """Inverse of encode.

    Raises:
        InvalidIdentifier: empty, starts with a digit, or foreign symbol
        CapacityExceeded: well-formed but above MAX_INDEX
    """
    validate(identifier)
    index = _unchecked_decode(identifier)
    if index > MAX_INDEX:
        raise CapacityExceeded(index, MAX_INDEX)
    return index


MAX_IDENTIFIER = encode(MAX_INDEX)


def successor(identifier: str) -> str:
    """Identifier of the next index, computed on the string itself.

    Same result as encode(decode(identifier) + 1).
    """
    validate(identifier)
    symbols = list(identifier)
    pos = len(symbols) - 1
    while pos > 0:
        value = _FULL_VALUES[symbols[pos]] + 1
        if value < FULL_BASE:
            symbols[pos] = FULL_ALPHABET[value]
            break
        symbols[pos] = FULL_ALPHABET[0]
        pos -= 1
    else:
        value = _LEADING_VALUES[symbols[0]] + 1
        if value < LEADING_BASE:
            symbols[0] = LEADING_ALPHABET[value]
        else:
            # Carry out of the leading symbol: first identifier one symbol longer
            symbols = [LEADING_ALPHABET[0]] + [FULL_ALPHABET[0]] * len(identifier)

    result = "".join(symbols)
    if sort_key(result) > sort_key(MAX_IDENTIFIER):
        raise CapacityExceeded(_unchecked_decode(result), MAX_INDEX)
    return result


def sort_key(identifier: str) -> tuple[int, str]:
    """Length first, then ASCII order. Matches index order for valid identifiers."""
    return (len(identifier), identifier)


def compare(a: str, b: str) -> int:
    """-1, 0 or 1 as the index of `a` is below, equal to or above that of `b`."""
    validate(a)
    validate(b)
    ka, kb = sort_key(a), sort_key(b)
    return (ka > kb) - (ka < kb)


def identifiers(count: int, start: int = 0) -> Iterator[str]:
    """Consecutive identifiers for indices start .. start + count - 1.

    This is the field list of a fixed-size pseudo-array with `count` slots.
    Arguments are checked eagerly, before the first identifier is produced.
    """
    count = op_index(count)
    start = op_index(start)
    if count < 0:
        raise ValueError(f"Count must be non-negative, got {count}")
    if start < 0:
        raise ValueError(f"Start must be non-negative, got {start}")
    if count and start + count - 1 > MAX_INDEX:
        raise CapacityExceeded(start + count - 1, MAX_INDEX)
    return _walk(start, count)


def _walk(start: int, count: int) -> Iterator[str]:
    if not count:
        return
    current = encode(start)
    yield current
    for _ in range(count - 1):
        current = successor(current)
        yield current
