"""Helpers for slash-separated paths into a JSON tree.

The store addresses everything below ``auctions/{id}`` with paths such as
``players/-Nabc/status``. A multi-path update is a flat mapping of such paths
to values; ``None`` removes the node, as the real-time store does.
"""

import copy
from typing import Any, Dict, List, Mapping, Optional

JsonDict = Dict[str, Any]

_MISSING = object()


def split_path(path: str) -> List[str]:
    parts = [part for part in path.strip("/").split("/") if part]
    if not parts:
        raise ValueError("Path cannot be empty")
    return parts


def get_path(tree: Optional[JsonDict], path: str, default: Any = None) -> Any:
    """Read the value at ``path``; ``default`` when any segment is missing"""
    node: Any = tree
    for part in split_path(path):
        if isinstance(node, dict):
            node = node.get(part, _MISSING)
        elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        else:
            return default
        if node is _MISSING:
            return default
    return node


def set_path(tree: JsonDict, path: str, value: Any) -> None:
    """Write ``value`` at ``path`` in place, creating parents; ``None`` deletes"""
    parts = split_path(path)
    node = tree
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            if value is None:
                return
            child = {}
            node[part] = child
        node = child

    leaf = parts[-1]
    if value is None:
        node.pop(leaf, None)
    else:
        node[leaf] = copy.deepcopy(value)


def prune_empty(tree: Any) -> Any:
    """Drop empty containers and nulls, mirroring what the store persists"""
    if isinstance(tree, dict):
        pruned = {}
        for key, value in tree.items():
            value = prune_empty(value)
            if value is None or value == {} or value == []:
                continue
            pruned[key] = value
        return pruned
    if isinstance(tree, list):
        return [prune_empty(item) for item in tree if item is not None]
    return tree


def apply_updates(tree: Optional[JsonDict], updates: Mapping[str, Any]) -> JsonDict:
    """Return a copy of ``tree`` with every path in ``updates`` applied"""
    result = copy.deepcopy(tree) if tree else {}
    for path, value in updates.items():
        set_path(result, path, value)
    return prune_empty(result)


def check_preconditions(tree: Optional[JsonDict], expected: Mapping[str, Any]) -> Optional[str]:
    """Return the first path whose current value differs from ``expected``"""
    for path, value in expected.items():
        if get_path(tree, path) != value:
            return path
    return None
