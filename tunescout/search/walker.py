"""Null-safe path lookups into nested JSON payloads."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Union

PathSegment = Union[str, int]


def _step(node: Any, segment: PathSegment) -> Any:
    if isinstance(segment, bool):
        return None
    if isinstance(segment, int):
        if isinstance(node, (str, bytes)) or not isinstance(node, Sequence):
            return None
        if segment < 0 or segment >= len(node):
            return None
        return node[segment]
    if isinstance(node, Mapping):
        return node.get(segment)
    return None


def walk(root: Any, *path: Any) -> Any:
    """
    Return the value found by following ``path`` from ``root``.

    ``path`` mixes plain segments with pre-built list/tuple paths, which are
    spliced in place, so named path constants can be reused and extended:
    ``walk(doc, TITLE_TEXT)`` equals ``walk(doc, "title", "runs", 0, "text")``
    and ``walk(doc, PLAY_BUTTON, "videoId")`` appends to a constant.

    Returns ``None`` as soon as a step lands on a missing key, an
    out-of-range index or a value that cannot be indexed.
    """
    segments: list[PathSegment] = []
    for part in path:
        if isinstance(part, (list, tuple)):
            segments.extend(part)
        else:
            segments.append(part)
    node = root
    for segment in segments:
        if node is None:
            return None
        node = _step(node, segment)
    return node
