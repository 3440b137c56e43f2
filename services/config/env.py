from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Tuple

DEFAULT_PROVIDERS: Tuple[str, ...] = ("finnhub", "iex", "alphavantage")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        val = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if val <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return val


@dataclass(frozen=True)
class ResolverConfig:
    finnhub_api_key: str | None = None
    iex_cloud_api_key: str | None = None
    alpha_vantage_key: str | None = None
    providers: Tuple[str, ...] = DEFAULT_PROVIDERS
    cache_ttl_sec: float = 24 * 60 * 60
    http_timeout_sec: float = 5.0


def get_resolver_config() -> ResolverConfig:
    order = os.getenv("TICKER_PROVIDERS")
    providers = DEFAULT_PROVIDERS
    if order:
        providers = tuple(p.strip().lower() for p in order.split(",") if p.strip())
    return ResolverConfig(
        finnhub_api_key=os.getenv("FINNHUB_API_KEY") or None,
        iex_cloud_api_key=os.getenv("IEX_CLOUD_API_KEY") or None,
        alpha_vantage_key=os.getenv("ALPHAVANTAGE_API_KEY") or None,
        providers=providers,
        cache_ttl_sec=_float_env("TICKER_CACHE_TTL_SEC", 24 * 60 * 60),
        http_timeout_sec=_float_env("HTTP_TIMEOUT_SEC", 5.0),
    )


@dataclass(frozen=True)
class OpenAIConfig:
    api_key: str | None = None
    model: str = "gpt-3.5-turbo"
    base_url: str = "https://api.openai.com/v1"
    timeout_sec: float = 10.0


def get_openai_config() -> OpenAIConfig:
    return OpenAIConfig(
        api_key=os.getenv("OPENAI_API_KEY") or None,
        model=os.getenv("OPENAI_MODEL", "gpt-3.5-turbo"),
        base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/"),
        timeout_sec=_float_env("OPENAI_TIMEOUT_SEC", 10.0),
    )


@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"


def get_log_config() -> LogConfig:
    return LogConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
