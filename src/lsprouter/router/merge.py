# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Fold partial initialize results into the result advertised to the client.

Fragments are processed in registration order (the router's default fragment
first). Inside a merge container every field is one of:

* a list - a running accumulator; each fragment's list is prepended and the
  result is de-duplicated keeping the left-most occurrence, so items new to a
  later fragment surface first while repeated items keep their earliest
  position;
* a nested container - merged recursively with the same rules;
* anything else (objects, booleans, primitives) - the first fragment that
  defines the field wins and later values are discarded wholesale.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping, Sequence
from typing import Any, Final

import orjson as oj

Path = tuple[str, ...]

DEFAULT_CONTAINERS: Final[frozenset[Path]] = frozenset(
    {
        (),
        ("capabilities",),
        ("capabilities", "executeCommandProvider"),
        ("capabilities", "workspace"),
        ("capabilities", "workspace", "fileOperations"),
        ("awsServerCapabilities",),
        ("awsServerCapabilities", "configurationProvider"),
    }
)


def merge_lists(lists: Iterable[Sequence[Any]]) -> list[Any]:
    """Prepend-then-deduplicate fold over *lists* in order."""
    accumulator: list[Any] = []
    for items in lists:
        accumulator = _dedupe([*items, *accumulator])
    return accumulator


def merge_initialize_results(
    fragments: Sequence[Mapping[str, Any]],
    *,
    containers: frozenset[Path] = DEFAULT_CONTAINERS,
) -> dict[str, Any]:
    return _merge_container(list(fragments), (), containers)


def _merge_container(fragments: list[Mapping[str, Any]], path: Path, containers: frozenset[Path]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    keys: dict[str, None] = {}
    for fragment in fragments:
        keys.update(dict.fromkeys(fragment))

    for key in keys:
        values = [fragment[key] for fragment in fragments if key in fragment and fragment[key] is not None]
        if not values:
            continue
        child = (*path, key)
        if child in containers and all(isinstance(value, Mapping) for value in values):
            merged[key] = _merge_container(values, child, containers)
        elif all(isinstance(value, list) for value in values):
            merged[key] = merge_lists(values)
        else:
            merged[key] = values[0]
    return merged


def _dedupe(items: list[Any]) -> list[Any]:
    seen: set[Hashable] = set()
    result: list[Any] = []
    for item in items:
        marker = _identity(item)
        if marker in seen:
            continue
        seen.add(marker)
        result.append(item)
    return result


def _identity(item: Any) -> Hashable:
    if isinstance(item, Hashable):
        return (type(item).__name__, item)
    return ("json", oj.dumps(item, option=oj.OPT_SORT_KEYS, default=str))


__all__ = ["DEFAULT_CONTAINERS", "merge_initialize_results", "merge_lists"]
