from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote
import logging

import requests

from services.config.env import ResolverConfig
from services.resolver.models import Candidate, UNKNOWN_EXCHANGE

"""
Symbol-search providers used when the local catalog has no entry.

Each provider is optional: without its API key it is skipped and never hits the
network. Network failures and unexpected payloads are logged and reported as
"no result" (None) so the resolver can move on to the next strategy.
"""

logger = logging.getLogger(__name__)

FINNHUB_BASE = "https://finnhub.io/api/v1"
IEX_CLOUD_BASE = "https://cloud.iexapis.com/stable"
ALPHA_VANTAGE_BASE = "https://www.alphavantage.co/query"


def build_finnhub_search_url(query: str, token: str) -> str:
    return f"{FINNHUB_BASE}/search/symbol?q={quote(query, safe='')}&token={token}"


def build_iex_search_url(query: str, token: str) -> str:
    return f"{IEX_CLOUD_BASE}/search/{quote(query, safe='')}?token={token}"


def build_alpha_vantage_search_url(query: str, apikey: str) -> str:
    return f"{ALPHA_VANTAGE_BASE}?function=SYMBOL_SEARCH&keywords={quote(query, safe='')}&apikey={apikey}"


def parse_finnhub_search(payload: Any, confidence: float = 0.85) -> List[Candidate]:
    """Finnhub returns {"count": n, "result": [{"symbol", "description", "type", ...}]}."""
    if not isinstance(payload, dict):
        return []
    rows = payload.get("result")
    if not isinstance(rows, list):
        return []
    out: List[Candidate] = []
    for item in rows:
        if not isinstance(item, dict) or not item.get("symbol"):
            continue
        exchange = item.get("mic") or ("NASDAQ" if item.get("type") == "Common Stock" else UNKNOWN_EXCHANGE)
        out.append(Candidate(
            ticker=str(item["symbol"]).upper(),
            exchange=exchange,
            name=item.get("description") or item["symbol"],
            confidence=confidence,
            resolved_from="finnhub_api",
        ))
    return out


def parse_iex_search(payload: Any, confidence: float = 0.88) -> List[Candidate]:
    """IEX Cloud returns a bare list of {"symbol", "exchange", "name"}."""
    if not isinstance(payload, list):
        return []
    out: List[Candidate] = []
    for item in payload:
        if not isinstance(item, dict) or not item.get("symbol"):
            continue
        out.append(Candidate(
            ticker=str(item["symbol"]).upper(),
            exchange=item.get("exchange") or UNKNOWN_EXCHANGE,
            name=item.get("name") or item["symbol"],
            confidence=confidence,
            resolved_from="iex_cloud_api",
        ))
    return out


def parse_alpha_vantage_search(payload: Any, confidence: float = 0.80) -> List[Candidate]:
    """Alpha Vantage SYMBOL_SEARCH returns {"bestMatches": [{"1. symbol", "2. name", ...}]}.
    No exchange is reported, only a region.
    """
    if not isinstance(payload, dict):
        return []
    rows = payload.get("bestMatches")
    if not isinstance(rows, list):
        return []
    out: List[Candidate] = []
    for item in rows:
        if not isinstance(item, dict):
            continue
        sym = (item.get("1. symbol") or "").strip()
        if not sym:
            continue
        out.append(Candidate(
            ticker=sym.upper(),
            exchange=UNKNOWN_EXCHANGE,
            name=item.get("2. name") or sym,
            confidence=confidence,
            resolved_from="alphavantage_api",
        ))
    return out


class SymbolSearchProvider:
    """One symbol-search backend: search(query) -> candidates, or None on failure/unavailable."""

    name = "base"
    default_confidence = 0.5

    def __init__(self, api_key: Optional[str], timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.timeout = timeout
        self._http = session or requests

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def build_url(self, query: str) -> str:
        raise NotImplementedError

    def parse(self, payload: Any) -> List[Candidate]:
        raise NotImplementedError

    def search(self, query: str) -> Optional[List[Candidate]]:
        if not self.enabled:
            logger.debug("%s: API key not configured, skipping", self.name)
            return None
        try:
            resp = self._http.get(self.build_url(query), timeout=self.timeout)
            if not resp.ok:
                logger.warning("%s: search returned HTTP %s", self.name, resp.status_code)
                return None
            payload = resp.json()
        except requests.RequestException as e:
            logger.warning("%s: search request failed: %s", self.name, e)
            return None
        except ValueError as e:
            logger.warning("%s: malformed JSON response: %s", self.name, e)
            return None
        cands = self.parse(payload)
        if not cands:
            logger.debug("%s: no results for %r", self.name, query)
            return None
        logger.debug("%s: %d result(s) for %r", self.name, len(cands), query)
        return cands


class FinnhubSearch(SymbolSearchProvider):
    name = "finnhub"
    default_confidence = 0.85

    def build_url(self, query: str) -> str:
        return build_finnhub_search_url(query, self.api_key or "")

    def parse(self, payload: Any) -> List[Candidate]:
        return parse_finnhub_search(payload, self.default_confidence)


class IexCloudSearch(SymbolSearchProvider):
    name = "iex"
    default_confidence = 0.88

    def build_url(self, query: str) -> str:
        return build_iex_search_url(query, self.api_key or "")

    def parse(self, payload: Any) -> List[Candidate]:
        return parse_iex_search(payload, self.default_confidence)


class AlphaVantageSearch(SymbolSearchProvider):
    name = "alphavantage"
    default_confidence = 0.80

    def build_url(self, query: str) -> str:
        return build_alpha_vantage_search_url(query, self.api_key or "")

    def parse(self, payload: Any) -> List[Candidate]:
        return parse_alpha_vantage_search(payload, self.default_confidence)


PROVIDER_TYPES: Dict[str, type] = {
    FinnhubSearch.name: FinnhubSearch,
    IexCloudSearch.name: IexCloudSearch,
    AlphaVantageSearch.name: AlphaVantageSearch,
}


def build_providers(cfg: ResolverConfig) -> Tuple[SymbolSearchProvider, ...]:
    """Instantiate the configured providers in lookup order."""
    keys = {
        "finnhub": cfg.finnhub_api_key,
        "iex": cfg.iex_cloud_api_key,
        "alphavantage": cfg.alpha_vantage_key,
    }
    out: List[SymbolSearchProvider] = []
    for tag in cfg.providers:
        cls = PROVIDER_TYPES.get(tag)
        if cls is None:
            raise ValueError(f"unknown symbol-search provider {tag!r}; expected one of {sorted(PROVIDER_TYPES)}")
        out.append(cls(keys[tag], timeout=cfg.http_timeout_sec))
    return tuple(out)
