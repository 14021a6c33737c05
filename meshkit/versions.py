"""Sorting of version-like dotted strings."""

from __future__ import annotations

import functools
import itertools
from collections.abc import Iterable

_REPLACEMENTS = (("alpha", ".0"), ("beta", ".1"), ("rc", ".2"), ("stable", ".4"))
_KEPT = frozenset("0123456789.")
_PAD = 3


def _cleanup(version: str) -> str:
    if version.startswith("stable"):
        version = version[len("stable"):] + "stable"
    for word, replacement in _REPLACEMENTS:
        version = version.replace(word, replacement)
    return "".join(ch for ch in version if ch in _KEPT)


def _components(version: str) -> list[int]:
    return [int(part) if part else 0 for part in _cleanup(version).split(".")]


def _compare(left: str, right: str) -> int:
    for p, q in itertools.zip_longest(_components(left), _components(right), fillvalue=_PAD):
        if p != q:
            return -1 if p < q else 1
    return 0


def sort_dotted_strings_by_digits(versions: Iterable[str]) -> list[str]:
    """Return the versions sorted by their numeric dotted components.

    Only digits and dots count, plus the markers alpha, beta, rc and stable;
    for the same version, stable sorts after pre-releases.
    """
    return sorted(versions, key=functools.cmp_to_key(_compare))