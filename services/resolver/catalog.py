from __future__ import annotations
from typing import Dict, List, Optional, Tuple
import threading

from services.resolver.models import SymbolRecord
from services.resolver.normalize import normalize

# (name variant, ticker, exchange, confidence); names are normalized on load.
SEED_CATALOG: Tuple[Tuple[str, str, str, float], ...] = (
    ("Apple", "AAPL", "NASDAQ", 0.99),
    ("Apple Inc", "AAPL", "NASDAQ", 0.99),
    ("Apple Corporation", "AAPL", "NASDAQ", 0.99),
    ("Microsoft", "MSFT", "NASDAQ", 0.99),
    ("Microsoft Corporation", "MSFT", "NASDAQ", 0.99),
    ("MSFT", "MSFT", "NASDAQ", 0.99),
    ("NVIDIA", "NVDA", "NASDAQ", 0.99),
    ("NVIDIA Inc", "NVDA", "NASDAQ", 0.97),
    ("NVIDIA Corporation", "NVDA", "NASDAQ", 0.99),
    ("NVDA", "NVDA", "NASDAQ", 0.99),
    ("Google", "GOOGL", "NASDAQ", 0.95),
    ("Alphabet", "GOOGL", "NASDAQ", 0.99),
    ("Alphabet Inc", "GOOGL", "NASDAQ", 0.99),
    ("GOOGL", "GOOGL", "NASDAQ", 0.99),
    ("Tesla", "TSLA", "NASDAQ", 0.99),
    ("Tesla Inc", "TSLA", "NASDAQ", 0.99),
    ("TSLA", "TSLA", "NASDAQ", 0.99),
    ("Amazon", "AMZN", "NASDAQ", 0.99),
    ("Amazon.com", "AMZN", "NASDAQ", 0.99),
    ("AMZN", "AMZN", "NASDAQ", 0.99),
    ("Facebook", "META", "NASDAQ", 0.95),
    ("Meta", "META", "NASDAQ", 0.99),
    ("Meta Platforms", "META", "NASDAQ", 0.99),
    ("JPMorgan", "JPM", "NYSE", 0.95),
    ("JPMorgan Chase", "JPM", "NYSE", 0.99),
    ("JPM", "JPM", "NYSE", 0.99),
    ("Berkshire", "BRK.B", "NYSE", 0.95),
    ("Berkshire Hathaway", "BRK.B", "NYSE", 0.99),
    ("BRK", "BRK.B", "NYSE", 0.95),
    ("Visa", "V", "NYSE", 0.99),
    ("Netflix", "NFLX", "NASDAQ", 0.99),
    ("Netflix Inc", "NFLX", "NASDAQ", 0.99),
    ("NFLX", "NFLX", "NASDAQ", 0.99),
    ("Intel", "INTC", "NASDAQ", 0.99),
    ("Intel Corporation", "INTC", "NASDAQ", 0.99),
    ("INTC", "INTC", "NASDAQ", 0.99),
    ("AMD", "AMD", "NASDAQ", 0.99),
    ("Advanced Micro Devices", "AMD", "NASDAQ", 0.99),
    ("Oracle", "ORCL", "NYSE", 0.99),
    ("Oracle Corporation", "ORCL", "NYSE", 0.99),
    ("ORCL", "ORCL", "NYSE", 0.99),
    ("Salesforce", "CRM", "NYSE", 0.99),
    ("Salesforce Inc", "CRM", "NYSE", 0.99),
    ("CRM", "CRM", "NYSE", 0.99),
    ("Adobe", "ADBE", "NASDAQ", 0.99),
    ("Adobe Systems", "ADBE", "NASDAQ", 0.99),
    ("ADBE", "ADBE", "NASDAQ", 0.99),
    ("Accenture", "ACN", "NYSE", 0.99),
    ("ACN", "ACN", "NYSE", 0.99),
    ("ServiceNow", "NOW", "NYSE", 0.99),
    ("NOW", "NOW", "NYSE", 0.99),
    ("Datadog", "DDOG", "NASDAQ", 0.99),
    ("DDOG", "DDOG", "NASDAQ", 0.99),
    ("CrowdStrike", "CRWD", "NASDAQ", 0.99),
    ("CRWD", "CRWD", "NASDAQ", 0.99),
    ("Snowflake", "SNOW", "NYSE", 0.99),
    ("SNOW", "SNOW", "NYSE", 0.99),
    ("PayPal", "PYPL", "NASDAQ", 0.99),
    ("PYPL", "PYPL", "NASDAQ", 0.99),
    ("Square", "SQ", "NYSE", 0.95),
    ("Block Inc", "SQ", "NYSE", 0.99),
    ("SQ", "SQ", "NYSE", 0.99),
    ("Uber", "UBER", "NYSE", 0.99),
    ("Uber Technologies", "UBER", "NYSE", 0.99),
    ("Lyft", "LYFT", "NASDAQ", 0.99),
    ("Airbnb", "ABNB", "NASDAQ", 0.99),
    ("ABNB", "ABNB", "NASDAQ", 0.99),
    ("DoorDash", "DASH", "NYSE", 0.99),
    ("DASH", "DASH", "NYSE", 0.99),
    ("Shopify", "SHOP", "NYSE", 0.99),
    ("SHOP", "SHOP", "NYSE", 0.99),
    ("Spotify", "SPOT", "NYSE", 0.99),
    ("SPOT", "SPOT", "NYSE", 0.99),
)


class SymbolTable:
    """Normalized company name -> SymbolRecord, extensible at runtime."""

    def __init__(self, seed=SEED_CATALOG):
        self._records: Dict[str, SymbolRecord] = {}
        self._lock = threading.Lock()
        for name, ticker, exchange, confidence in seed:
            self.add(name, ticker, exchange, confidence)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._records

    def lookup(self, key: str, exchange: Optional[str] = None) -> Optional[SymbolRecord]:
        with self._lock:
            rec = self._records.get(key)
        if rec is None:
            return None
        # No fallback to the unfiltered record on mismatch
        if exchange and rec.exchange != exchange:
            return None
        return rec

    def add(self, raw_name: str, ticker: str, exchange: str = "NASDAQ", confidence: float = 0.99) -> None:
        key = normalize(raw_name)
        if not key:
            raise ValueError(f"company name {raw_name!r} normalizes to an empty key")
        rec = SymbolRecord(ticker=ticker.strip().upper(), exchange=exchange, confidence=float(confidence))
        with self._lock:
            self._records[key] = rec

    def items(self) -> List[Tuple[str, SymbolRecord]]:
        with self._lock:
            return list(self._records.items())
