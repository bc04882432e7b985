"""
Search helpers shared by the four registries.

Two flavours of the same case-insensitive substring match:

    filter_snapshot()  – pure function over a registry's in-memory snapshot
    like_pattern() +
    name_clause()      – the equivalent SQL predicate, for queries issued
                         against the backing store

Registries use the store query for ``search()`` (authoritative) and the
snapshot filter for ``filter()``.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

T = TypeVar("T")

LIKE_ESCAPE = "\\"


def _normalize(term: Optional[str]) -> str:
    return (term or "").lower()


def filter_snapshot(
    snapshot: Iterable[T],
    term: Optional[str],
    fields: Sequence[Callable[[T], Optional[str]]],
) -> List[T]:
    """
    Return the entries where any extracted field contains ``term``,
    ignoring case. An empty term returns the whole snapshot.

    Parameters
    ----------
    snapshot:
        Entries to scan, in order.
    term:
        Substring to look for.
    fields:
        Extractors, e.g. ``[lambda s: s.name, lambda s: s.surname]``.
    """
    needle = _normalize(term)
    if not needle:
        return list(snapshot)

    matches: List[T] = []
    for entry in snapshot:
        for extract in fields:
            value = extract(entry)
            if value is not None and needle in value.lower():
                matches.append(entry)
                break
    return matches


def like_pattern(term: Optional[str]) -> str:
    """
    Build a ``LIKE`` pattern matching ``term`` anywhere, lower-cased, with
    the wildcard characters escaped.
    """
    needle = _normalize(term)
    for ch in (LIKE_ESCAPE, "%", "_"):
        needle = needle.replace(ch, LIKE_ESCAPE + ch)
    return f"%{needle}%"


def name_clause(columns: Sequence[str]) -> str:
    """
    SQL predicate matching one ``like_pattern`` parameter per column,
    e.g. ``LOWER(name) LIKE ? ESCAPE '\\' OR LOWER(surname) LIKE ? ...``.
    """
    return " OR ".join(
        f"LOWER({col}) LIKE ? ESCAPE '{LIKE_ESCAPE}'" for col in columns
    )


__all__ = [
    "filter_snapshot",
    "like_pattern",
    "name_clause",
]
