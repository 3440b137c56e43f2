import os
import unittest
from unittest import mock

from services.config.env import (
    DEFAULT_PROVIDERS, get_resolver_config, get_openai_config, get_log_config
)
from services.resolver.core import TickerResolver


class TestResolverConfig(unittest.TestCase):
    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            cfg = get_resolver_config()
        self.assertIsNone(cfg.finnhub_api_key)
        self.assertIsNone(cfg.iex_cloud_api_key)
        self.assertEqual(cfg.providers, DEFAULT_PROVIDERS)
        self.assertEqual(cfg.cache_ttl_sec, 86400)

    def test_env_overrides(self):
        env = {
            "FINNHUB_API_KEY": "fh",
            "TICKER_PROVIDERS": " IEX, finnhub ,",
            "TICKER_CACHE_TTL_SEC": "60",
            "HTTP_TIMEOUT_SEC": "2.5",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            cfg = get_resolver_config()
        self.assertEqual(cfg.finnhub_api_key, "fh")
        self.assertEqual(cfg.providers, ("iex", "finnhub"))
        self.assertEqual(cfg.cache_ttl_sec, 60.0)
        self.assertEqual(cfg.http_timeout_sec, 2.5)

    def test_empty_key_disables(self):
        with mock.patch.dict(os.environ, {"FINNHUB_API_KEY": ""}, clear=True):
            self.assertIsNone(get_resolver_config().finnhub_api_key)

    def test_invalid_numbers(self):
        for val in ("abc", "0", "-5"):
            with mock.patch.dict(os.environ, {"TICKER_CACHE_TTL_SEC": val}, clear=True):
                with self.assertRaises(ValueError):
                    get_resolver_config()

    def test_openai_and_log(self):
        env = {"OPENAI_API_KEY": "sk", "OPENAI_MODEL": "gpt-test", "LOG_LEVEL": "debug"}
        with mock.patch.dict(os.environ, env, clear=True):
            ai = get_openai_config()
            log = get_log_config()
        self.assertEqual(ai.api_key, "sk")
        self.assertEqual(ai.model, "gpt-test")
        self.assertEqual(ai.base_url, "https://api.openai.com/v1")
        self.assertEqual(log.level, "DEBUG")

    def test_resolver_from_env(self):
        env = {"TICKER_PROVIDERS": "finnhub", "TICKER_CACHE_TTL_SEC": "120"}
        with mock.patch.dict(os.environ, env, clear=True):
            r = TickerResolver.from_env()
        self.assertEqual([p.name for p in r.providers], ["finnhub"])
        self.assertFalse(r.providers[0].enabled)
        self.assertFalse(r.ai.enabled)
        self.assertEqual(r.cache.ttl_sec, 120.0)


if __name__ == "__main__":
    unittest.main()
