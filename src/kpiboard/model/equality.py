"""Structural equality used to suppress no-op transitions."""

from __future__ import annotations

from collections.abc import Mapping, Set
from dataclasses import fields, is_dataclass
from typing import Any


def structurally_equal(left: Any, right: Any) -> bool:
    """Deep comparison of two values.

    Sequences compare element-wise in order (a list equals a tuple with
    the same elements), sets compare by membership, mappings by key and
    dataclasses field by field. Anything else falls back to ``==``.
    """
    if left is right:
        return True
    if is_dataclass(left) and not isinstance(left, type):
        if type(left) is not type(right):
            return False
        return all(structurally_equal(getattr(left, f.name), getattr(right, f.name)) for f in fields(left))
    if isinstance(left, Mapping):
        if not isinstance(right, Mapping) or left.keys() != right.keys():
            return False
        return all(structurally_equal(left[k], right[k]) for k in left)
    if isinstance(left, Set):
        return isinstance(right, Set) and set(left) == set(right)
    if _is_sequence(left):
        if not _is_sequence(right) or len(left) != len(right):
            return False
        return all(structurally_equal(a, b) for a, b in zip(left, right))
    return left == right


def same_members(left, right) -> bool:
    """Order-insensitive membership comparison."""
    return set(left) == set(right)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))
