"""
Structurray Update Plans

The store charges for every character of every key it writes, so after a
mutation only the keys that actually changed should go over the wire.
An UpdatePlan is the difference between two exported snapshots of a
pseudo-array: which keys to write, which to delete, and what that costs.

Usage:
    before = arr.to_dict()
    arr.insert_at(0, "first")
    plan = plan_update(before, arr.to_dict())
    doc_ref.update(plan.as_patch())
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from structurray import codec
from structurray.errors import NullValue


@dataclass
class UpdatePlan:
    """Keys to write and delete to turn one snapshot into another.

    Attributes:
        writes: identifier -> new value, for keys that are new or changed
        deletes: identifiers present before but not after
        added: the subset of `writes` whose keys did not exist before
        unchanged: number of keys with identical values in both snapshots
    """
    writes: dict[str, Any] = field(default_factory=dict)
    deletes: tuple[str, ...] = ()
    added: tuple[str, ...] = ()
    unchanged: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.writes and not self.deletes

    @property
    def modified(self) -> int:
        """Writes that overwrite an existing key."""
        return len(self.writes) - len(self.added)

    @property
    def key_cost(self) -> int:
        """Characters of key text this plan sends to the store."""
        return key_cost(self.writes) + key_cost(self.deletes)

    def as_patch(self) -> dict[str, Any]:
        """Single update document. Deleted keys map to None.

        Raises:
            NullValue: a write carries None and would read as a delete
        """
        for key, value in self.writes.items():
            if value is None:
                raise NullValue(key)
        patch: dict[str, Any] = dict(self.writes)
        for key in self.deletes:
            patch[key] = None
        return patch

    def __repr__(self) -> str:
        return (
            f"<UpdatePlan: {len(self.writes)} write(s) ({len(self.added)} new), "
            f"{len(self.deletes)} delete(s), {self.unchanged} unchanged, "
            f"key cost {self.key_cost}>"
        )


def key_cost(identifiers: Iterable[str]) -> int:
    """Total characters in a collection of keys."""
    return sum(len(key) for key in identifiers)


def plan_update(before: Mapping[str, Any], after: Mapping[str, Any]) -> UpdatePlan:
    """Compare two identifier -> value snapshots.

    Keys in the plan are listed in index order.

    Raises:
        InvalidIdentifier: a key in either snapshot is malformed
    """
    for key in before:
        codec.validate(key)
    for key in after:
        codec.validate(key)

    writes: dict[str, Any] = {}
    added: list[str] = []
    unchanged = 0
    for key in sorted(after, key=codec.sort_key):
        value = after[key]
        if key not in before:
            writes[key] = value
            added.append(key)
        elif before[key] != value:
            writes[key] = value
        else:
            unchanged += 1

    deletes = tuple(sorted((key for key in before if key not in after), key=codec.sort_key))
    return UpdatePlan(writes=writes, deletes=deletes, added=tuple(added), unchanged=unchanged)
