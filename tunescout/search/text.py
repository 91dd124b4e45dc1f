"""Token normalization and fuzzy weighting for track metadata."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable
from typing import Union

TextInput = Union[str, None, Iterable["TextInput"]]

_NON_WORD = re.compile(r"[^\w\s]")


def _flatten(data: TextInput) -> Iterable[str]:
    if data is None:
        return
    if isinstance(data, str):
        yield data
        return
    for item in data:
        yield from _flatten(item)


def _clean(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text.lower())
    without_marks = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_WORD.sub(" ", without_marks)


def strip_text(data: TextInput) -> list[str]:
    """
    Normalize text into an ordered list of unique word tokens.

    Accepts a string or any nesting of string sequences. Tokens are
    lower-cased with diacritics and punctuation removed; empty tokens are
    dropped and repeats keep their first position.
    """
    tokens: dict[str, None] = {}
    for text in _flatten(data):
        for token in _clean(text).split():
            tokens.setdefault(token, None)
    return list(tokens)


def get_weight(expected: Iterable[str], actual: Iterable[str]) -> float:
    """Score how closely two token sets agree, from 0 to 100.

    Dice coefficient over sets: identical sets score 100 and every extra or
    missing token lowers the score regardless of order.
    """
    expected_set = set(expected)
    actual_set = set(actual)
    if not expected_set or not actual_set:
        return 0.0
    shared = len(expected_set & actual_set)
    return 200.0 * shared / (len(expected_set) + len(actual_set))
