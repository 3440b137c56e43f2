from __future__ import annotations
from typing import Any
import re

# Punctuation dropped before matching: . , & ' " - ( )
_PUNCT_RE = re.compile(r"[.,&'\"\-()]")
_WS_RE = re.compile(r"\s+")
_TICKER_RE = re.compile(r"[A-Z]{1,5}(?:\.[A-Z]{1,2})?")


def normalize(raw: Any) -> str:
    """Build the lookup key for a raw company name.

    trim -> lowercase -> strip punctuation -> collapse whitespace -> drop whitespace.
    Non-string input yields "".
    """
    if not isinstance(raw, str):
        return ""
    s = raw.strip().lower()
    s = _PUNCT_RE.sub("", s)
    s = _WS_RE.sub(" ", s)
    return _WS_RE.sub("", s)


def strip_spaces_and_punctuation(raw: str) -> str:
    # "N V D A" -> "NVDA"
    return _WS_RE.sub("", _PUNCT_RE.sub("", raw.upper()))


def edit_distance(a: str, b: str) -> int:
    # Levenshtein distance (iterative DP, one row at a time)
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        curr = [i]
        for j, cb in enumerate(b, 1):
            ins = curr[j - 1] + 1
            dele = prev[j] + 1
            sub = prev[j - 1] + (ca != cb)
            curr.append(min(ins, dele, sub))
        prev = curr
    return prev[-1]


def similarity(a: str, b: str) -> float:
    """1 - distance / longer length, in [0, 1]. Two empty strings are identical (1.0)."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    # (n - d) / n keeps exact ratios such as 13/20 == 0.65
    return (longest - edit_distance(a, b)) / longest


def is_ticker_shaped(s: Any) -> bool:
    if not isinstance(s, str):
        return False
    return _TICKER_RE.fullmatch(s.upper()) is not None
