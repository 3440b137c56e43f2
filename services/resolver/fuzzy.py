from __future__ import annotations
from typing import List

from services.resolver.catalog import SymbolTable
from services.resolver.models import Candidate
from services.resolver.normalize import similarity

DEFAULT_THRESHOLD = 0.65
CONFIDENT_THRESHOLD = 0.85


def fuzzy_match(key: str, catalog: SymbolTable, threshold: float = DEFAULT_THRESHOLD) -> List[Candidate]:
    """Rank catalog entries whose key is within ``threshold`` similarity of ``key``.

    Inclusive threshold; confidence is the raw similarity. Sorted best-first,
    ties keep catalog insertion order.
    """
    out: List[Candidate] = []
    for name, rec in catalog.items():
        score = similarity(key, name)
        if score >= threshold:
            out.append(Candidate(rec.ticker, rec.exchange, name, score, "fuzzy_match"))
    out.sort(key=lambda c: -c.confidence)
    return out
