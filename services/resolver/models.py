from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
import time

from services.resolver.normalize import is_ticker_shaped

UNKNOWN_EXCHANGE = "UNKNOWN"

# Outcome of a resolve() call
RESOLVED = "resolved"
AMBIGUOUS = "ambiguous"
NOT_FOUND = "not_found"

# Telemetry event types
EVT_DETECTED_TICKER = "ticker_resolution_detected_ticker"
EVT_CACHE_HIT = "ticker_resolution_cache_hit"
EVT_RESOLVED = "symbol_resolved"
EVT_AMBIGUOUS = "symbol_ambiguous"
EVT_NOT_FOUND = "symbol_not_found"


def _utc_now() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


@dataclass(frozen=True)
class SymbolRecord:
    ticker: str
    exchange: str = UNKNOWN_EXCHANGE
    confidence: float = 0.99

    def __post_init__(self):
        if not isinstance(self.ticker, str) or not self.ticker.strip():
            raise ValueError("ticker must be a non-empty string")
        # uppercase 1-5 letters with an optional ".X" share-class suffix
        if self.ticker != self.ticker.upper() or not is_ticker_shaped(self.ticker):
            raise ValueError(f"malformed ticker {self.ticker!r}")
        if not (0.0 <= float(self.confidence) <= 1.0):
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")


@dataclass(frozen=True)
class Candidate:
    ticker: str
    exchange: str
    name: Optional[str]
    confidence: float  # 0..1, higher is better
    resolved_from: str

    def summary(self) -> Dict[str, Any]:
        return {"ticker": self.ticker, "confidence": self.confidence}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticker": self.ticker,
            "exchange": self.exchange,
            "name": self.name,
            "confidence": self.confidence,
            "resolved_from": self.resolved_from,
        }


@dataclass(frozen=True)
class TelemetryEvent:
    type: str
    input: str
    timestamp: str = field(default_factory=_utc_now)
    ticker: Optional[str] = None
    confidence: Optional[float] = None
    resolved_from: Optional[str] = None
    matches: Optional[int] = None
    candidates: Tuple[Dict[str, Any], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type, "input": self.input, "timestamp": self.timestamp}
        for k in ("ticker", "confidence", "resolved_from", "matches"):
            v = getattr(self, k)
            if v is not None:
                out[k] = v
        if self.candidates:
            out["candidates"] = [dict(c) for c in self.candidates]
        return out


@dataclass(frozen=True)
class ResolutionResult:
    status: str  # resolved|ambiguous|not_found
    telemetry: TelemetryEvent
    ticker: Optional[str] = None
    exchange: Optional[str] = None
    name: Optional[str] = None
    confidence: float = 0.0
    resolved_from: str = NOT_FOUND
    matches: Tuple[Candidate, ...] = ()

    @property
    def is_resolved(self) -> bool:
        return self.status == RESOLVED

    @property
    def is_ambiguous(self) -> bool:
        return self.status == AMBIGUOUS

    @staticmethod
    def from_candidate(c: Candidate, telemetry: TelemetryEvent) -> "ResolutionResult":
        return ResolutionResult(
            status=RESOLVED,
            telemetry=telemetry,
            ticker=c.ticker,
            exchange=c.exchange,
            name=c.name,
            confidence=c.confidence,
            resolved_from=c.resolved_from,
        )

    def to_dict(self) -> Dict[str, Any]:
        if self.is_ambiguous:
            return {
                "matches": [m.to_dict() for m in self.matches],
                "confidence": AMBIGUOUS,
                "resolved_from": self.resolved_from,
                "telemetry": self.telemetry.to_dict(),
            }
        return {
            "ticker": self.ticker,
            "exchange": self.exchange,
            "name": self.name,
            "confidence": self.confidence,
            "resolved_from": self.resolved_from,
            "telemetry": self.telemetry.to_dict(),
        }
