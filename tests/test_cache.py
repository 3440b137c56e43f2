import unittest
from services.resolver.cache import ResolutionCache, DEFAULT_TTL_SEC
from services.resolver.models import ResolutionResult, TelemetryEvent


class FakeClock:
    def __init__(self, t: float = 1000.0):
        self.t = t

    def __call__(self) -> float:
        return self.t


def _result(ticker: str) -> ResolutionResult:
    ev = TelemetryEvent("symbol_resolved", ticker.lower(), ticker=ticker)
    return ResolutionResult(status="resolved", telemetry=ev, ticker=ticker, exchange="NASDAQ",
                            confidence=0.99, resolved_from="local_cache")


class TestResolutionCache(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.cache = ResolutionCache(clock=self.clock)

    def test_default_ttl_is_a_day(self):
        self.assertEqual(DEFAULT_TTL_SEC, 86400)
        self.assertEqual(self.cache.ttl_sec, 86400)

    def test_get_missing(self):
        self.assertIsNone(self.cache.get("nvidia"))

    def test_ttl_boundary(self):
        r = _result("NVDA")
        self.cache.set("nvidia", r)
        self.clock.t += DEFAULT_TTL_SEC - 1
        self.assertIs(self.cache.get("nvidia"), r)
        self.clock.t += 1
        self.assertIsNone(self.cache.get("nvidia"))
        # evicted on read
        self.assertEqual(len(self.cache), 0)

    def test_set_refreshes_created_at(self):
        self.cache.set("nvidia", _result("NVDA"))
        self.clock.t += DEFAULT_TTL_SEC - 10
        self.cache.set("nvidia", _result("NVDA"))
        self.clock.t += 20
        self.assertIsNotNone(self.cache.get("nvidia"))

    def test_clear_one_and_all(self):
        self.cache.set("nvidia", _result("NVDA"))
        self.cache.set("apple", _result("AAPL"))
        self.cache.clear("nvidia")
        self.assertIsNone(self.cache.get("nvidia"))
        self.assertIsNotNone(self.cache.get("apple"))
        self.cache.clear("not-there")
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)

    def test_stats_does_not_evict(self):
        self.cache.set("nvidia", _result("NVDA"))
        self.clock.t += 30
        stats = self.cache.stats()
        self.assertEqual(stats["size"], 1)
        self.assertEqual(stats["entries"], [{"key": "nvidia", "ticker": "NVDA", "age": 30}])
        self.clock.t += DEFAULT_TTL_SEC
        self.assertEqual(self.cache.stats()["size"], 1)


if __name__ == "__main__":
    unittest.main()
