from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence
import logging
import threading

from services.config.env import ResolverConfig, OpenAIConfig, get_resolver_config, get_openai_config
from services.ingestion.openai_client import OpenAIResolver
from services.ingestion.symbol_search import SymbolSearchProvider, build_providers
from services.resolver.cache import ResolutionCache
from services.resolver.catalog import SymbolTable
from services.resolver.fuzzy import CONFIDENT_THRESHOLD, DEFAULT_THRESHOLD, fuzzy_match
from services.resolver.models import (
    AMBIGUOUS, NOT_FOUND, RESOLVED, UNKNOWN_EXCHANGE,
    EVT_AMBIGUOUS, EVT_CACHE_HIT, EVT_DETECTED_TICKER, EVT_NOT_FOUND, EVT_RESOLVED,
    Candidate, ResolutionResult, TelemetryEvent,
)
from services.resolver.normalize import is_ticker_shaped, normalize, strip_spaces_and_punctuation

logger = logging.getLogger(__name__)
telemetry_logger = logging.getLogger("services.resolver.telemetry")

AUTO = "auto"
MAX_CANDIDATE_SUMMARIES = 3


def _detect_ticker(trimmed: str) -> Optional[str]:
    if is_ticker_shaped(trimmed):
        return trimmed.upper()
    stripped = strip_spaces_and_punctuation(trimmed)
    if stripped != trimmed.upper() and is_ticker_shaped(stripped):
        return stripped
    return None


class TickerResolver:
    """Map a free-form query to a ticker.

    Strategies, first hit wins:
    1. input already looks like a ticker (confidence 1.0, no cache)
    2. resolution cache (skipped on force_refresh)
    3. local catalog, honoring the exchange filter
    4. symbol-search providers; several hits => ambiguous
    5. fuzzy match against the catalog; one strong hit resolves, else ambiguous
    6. AI fallback
    7. not found (never cached)

    Outcomes are values: callers check ``status``/``ticker``; nothing here
    raises for an unresolvable query.
    """

    def __init__(
        self,
        catalog: Optional[SymbolTable] = None,
        cache: Optional[ResolutionCache] = None,
        providers: Sequence[SymbolSearchProvider] = (),
        ai: Optional[OpenAIResolver] = None,
        fuzzy_threshold: float = DEFAULT_THRESHOLD,
        confident_threshold: float = CONFIDENT_THRESHOLD,
    ):
        self.catalog = catalog if catalog is not None else SymbolTable()
        self.cache = cache if cache is not None else ResolutionCache()
        self.providers = tuple(providers)
        self.ai = ai
        self.fuzzy_threshold = fuzzy_threshold
        self.confident_threshold = confident_threshold

    @classmethod
    def from_config(cls, cfg: ResolverConfig, ai_cfg: Optional[OpenAIConfig] = None) -> "TickerResolver":
        return cls(
            cache=ResolutionCache(ttl_sec=cfg.cache_ttl_sec),
            providers=build_providers(cfg),
            ai=OpenAIResolver(ai_cfg) if ai_cfg is not None else None,
        )

    @classmethod
    def from_env(cls) -> "TickerResolver":
        return cls.from_config(get_resolver_config(), get_openai_config())

    # -- public surface -------------------------------------------------

    def resolve(
        self,
        query: str,
        exchange: Optional[str] = None,
        provider: str = AUTO,
        force_refresh: bool = False,
    ) -> ResolutionResult:
        providers = self._select_providers(provider)
        trimmed = query.strip() if isinstance(query, str) else ""
        key = normalize(trimmed)
        logger.debug("resolving %r (key=%r, exchange=%s, provider=%s)", trimmed, key, exchange, provider)

        if not key:
            return self._not_found(trimmed)

        ticker = _detect_ticker(trimmed)
        if ticker is not None:
            ev = TelemetryEvent(EVT_DETECTED_TICKER, trimmed, ticker=ticker, confidence=1.0,
                                resolved_from="input_detection")
            return self._emit(ResolutionResult(
                status=RESOLVED, telemetry=ev, ticker=ticker, exchange=exchange or UNKNOWN_EXCHANGE,
                name=None, confidence=1.0, resolved_from="input_detection",
            ))

        if not force_refresh:
            cached = self.cache.get(key)
            if cached is not None:
                ev = TelemetryEvent(EVT_CACHE_HIT, trimmed, ticker=cached.ticker)
                return self._emit(ResolutionResult(
                    status=cached.status, telemetry=ev, ticker=cached.ticker, exchange=cached.exchange,
                    name=cached.name, confidence=cached.confidence, resolved_from=cached.resolved_from,
                    matches=cached.matches,
                ))

        rec = self.catalog.lookup(key, exchange)
        if rec is not None:
            logger.debug("catalog hit %r -> %s", key, rec.ticker)
            return self._resolved(key, trimmed, Candidate(rec.ticker, rec.exchange, key, rec.confidence, "local_cache"))
        logger.debug("no catalog entry for %r, trying providers", key)

        cands = self._search_providers(providers, trimmed)
        if exchange and cands:
            filtered = [c for c in cands if c.exchange == exchange]
            if filtered:
                cands = filtered
        if cands:
            cands.sort(key=lambda c: -c.confidence)
            if len(cands) == 1:
                return self._resolved(key, trimmed, cands[0])
            return self._ambiguous(trimmed, cands, "api_search")

        matches = fuzzy_match(key, self.catalog, self.fuzzy_threshold)
        if matches:
            if len(matches) == 1 and matches[0].confidence > self.confident_threshold:
                return self._resolved(key, trimmed, matches[0])
            return self._ambiguous(trimmed, matches, "fuzzy_match")

        if self.ai is not None:
            guess = self.ai.resolve(trimmed)
            if guess is not None:
                return self._resolved(key, trimmed, guess)

        return self._not_found(trimmed)

    def clear_cache(self, key: Optional[str] = None) -> None:
        # Raw names are accepted; normalize() leaves an existing key unchanged.
        self.cache.clear(None if key is None else normalize(key))

    def cache_stats(self) -> Dict[str, Any]:
        return self.cache.stats()

    def add_mapping(self, name: str, ticker: str, exchange: str = "NASDAQ", confidence: float = 0.99) -> None:
        self.catalog.add(name, ticker, exchange, confidence)

    # -- internals ------------------------------------------------------

    def _select_providers(self, provider: str) -> Sequence[SymbolSearchProvider]:
        if provider is None:
            return self.providers
        if not isinstance(provider, str):
            raise ValueError(f"provider must be a string, got {type(provider).__name__}")
        tag = (provider or AUTO).lower()
        if tag == AUTO:
            return self.providers
        chosen = [p for p in self.providers if p.name == tag]
        if not chosen:
            known = [p.name for p in self.providers]
            logger.warning("unknown provider %r (configured: %s); skipping symbol search", provider, known)
        return chosen

    def _search_providers(self, providers: Sequence[SymbolSearchProvider], query: str) -> List[Candidate]:
        for p in providers:
            found = p.search(query)
            if found:
                return list(found)
        return []

    def _resolved(self, key: str, query: str, c: Candidate) -> ResolutionResult:
        ev = TelemetryEvent(EVT_RESOLVED, query, ticker=c.ticker, confidence=c.confidence,
                            resolved_from=c.resolved_from)
        result = ResolutionResult.from_candidate(c, ev)
        self.cache.set(key, result)
        return self._emit(result)

    def _ambiguous(self, query: str, cands: List[Candidate], source: str) -> ResolutionResult:
        ev = TelemetryEvent(
            EVT_AMBIGUOUS, query, resolved_from=source, matches=len(cands),
            candidates=tuple(c.summary() for c in cands[:MAX_CANDIDATE_SUMMARIES]),
        )
        return self._emit(ResolutionResult(status=AMBIGUOUS, telemetry=ev, resolved_from=source,
                                           matches=tuple(cands)))

    def _not_found(self, query: str) -> ResolutionResult:
        ev = TelemetryEvent(EVT_NOT_FOUND, query, resolved_from=NOT_FOUND)
        return self._emit(ResolutionResult(status=NOT_FOUND, telemetry=ev, name=query or None))

    def _emit(self, result: ResolutionResult) -> ResolutionResult:
        ev = result.telemetry
        telemetry_logger.info("%s input=%r ticker=%s", ev.type, ev.input, ev.ticker,
                              extra={"telemetry": ev.to_dict()})
        return result


_default: Optional[TickerResolver] = None
_default_lock = threading.Lock()


def get_resolver() -> TickerResolver:
    """Process-wide resolver built from environment configuration on first use."""
    global _default
    with _default_lock:
        if _default is None:
            _default = TickerResolver.from_env()
        return _default


def resolve(query: str, exchange: Optional[str] = None, provider: str = AUTO,
            force_refresh: bool = False) -> ResolutionResult:
    return get_resolver().resolve(query, exchange=exchange, provider=provider, force_refresh=force_refresh)
