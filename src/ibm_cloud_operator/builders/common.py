"""Comparison and late-initialization helpers shared by the per-kind builders.

Desired state on the Kubernetes side distinguishes unset (``None``) from
empty, while the cloud API often returns present-but-empty sub-objects.
``values_equal`` treats all of these as the same value, so a desired
identity that is ``None`` equals an observed ``{"id": ""}``.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Iterable, TypeVar

_T = TypeVar("_T")


def is_empty(value: Any) -> bool:
    """Return True for ``None``, empty strings and collections, and empty identities.

    Booleans and numbers are never empty; ``False`` and ``0`` are real values.
    """
    if value is None:
        return True
    if isinstance(value, (str, list, dict, tuple)):
        return len(value) == 0
    is_empty_fn = getattr(value, "is_empty", None)
    if callable(is_empty_fn):
        return bool(is_empty_fn())
    return False


def late_init(current: _T, observed: _T) -> tuple[_T, bool]:
    """Return ``(observed, True)`` if ``current`` is unset and ``observed`` is not.

    A value the caller already set is returned unchanged, even when it
    disagrees with the observed one.
    """
    if is_empty(current) and not is_empty(observed):
        return observed, True
    return current, False


def values_equal(a: Any, b: Any) -> bool:
    """Compare two values with empty-equivalence, recursing into dataclasses."""
    if is_empty(a) and is_empty(b):
        return True
    if is_empty(a) != is_empty(b):
        return False
    if dataclasses.is_dataclass(a) and dataclasses.is_dataclass(b):
        if type(a) is not type(b):
            return False
        return not diff_fields(a, b)
    if isinstance(a, dict) and isinstance(b, dict):
        if set(a) != set(b):
            return False
        return all(values_equal(a[k], b[k]) for k in a)
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    return a == b


def diff_fields(
    desired: Any,
    actual: Any,
    exclude: Iterable[str] = (),
    unordered: Iterable[str] = (),
) -> list[str]:
    """Return the names of the dataclass fields that differ.

    Args:
        desired: Desired-state dataclass
        actual: Dataclass of the same type, reconstructed from the observed object
        exclude: Field names ignored by the comparison
        unordered: List fields compared without regard to order

    Returns:
        Names of the differing fields, in declaration order
    """
    excluded = set(exclude)
    unordered_fields = set(unordered)
    differing: list[str] = []
    for f in dataclasses.fields(desired):
        if f.name in excluded:
            continue
        a = getattr(desired, f.name)
        b = getattr(actual, f.name)
        if f.name in unordered_fields and isinstance(a, list) and isinstance(b, list):
            equal = sorted(map(str, a)) == sorted(map(str, b))
        else:
            equal = values_equal(a, b)
        if not equal:
            differing.append(f.name)
    return differing


def ref_id(observed: dict[str, Any], key: str) -> str | None:
    """Return ``observed[key]["id"]``, or None if the reference is absent."""
    ref = observed.get(key)
    if not isinstance(ref, dict):
        return None
    return ref.get("id")


def generate_reference(ref: dict[str, Any] | None, keys: Iterable[str]) -> dict[str, Any] | None:
    """Copy the given keys of an observed reference, or None if all of them are null."""
    if not ref:
        return None
    result = {k: ref.get(k) for k in keys}
    if all(v is None for v in result.values()):
        return None
    return result


def find_by_crn(items: Iterable[dict[str, Any]], crn: str) -> dict[str, Any] | None:
    """Return the item whose ``crn`` equals ``crn``."""
    for item in items:
        if item.get("crn") == crn:
            return item
    return None
