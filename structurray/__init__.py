"""
Structurray - ordered pseudo-arrays for string-keyed stores
Compact, order-preserving field names for stores without a native array type.

Codec: index <-> identifier bijection over a 62-symbol alphabet, letter first
Pseudo-Array: ordered slots keyed by those identifiers, dense or sparse
Update plans: the minimal set of key writes/deletes between two snapshots
"""

__version__ = "0.1.0"

from structurray.codec import (
    ALPHABET_VERSION,
    MAX_INDEX,
    decode,
    encode,
    identifiers,
    is_valid,
    sort_key,
    successor,
    validate,
)
from structurray.errors import (
    CapacityExceeded,
    DuplicateIndex,
    InvalidIdentifier,
    NonContiguousIndex,
    NullValue,
    OutOfRange,
    StructurrayError,
)
from structurray.array import Mode, PseudoArray
from structurray.patch import UpdatePlan, plan_update

__all__ = [
    "ALPHABET_VERSION",
    "MAX_INDEX",
    "encode",
    "decode",
    "successor",
    "is_valid",
    "validate",
    "sort_key",
    "identifiers",
    "StructurrayError",
    "InvalidIdentifier",
    "DuplicateIndex",
    "NonContiguousIndex",
    "NullValue",
    "OutOfRange",
    "CapacityExceeded",
    "Mode",
    "PseudoArray",
    "UpdatePlan",
    "plan_update",
]
