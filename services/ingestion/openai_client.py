from __future__ import annotations
from typing import Any, Dict, Optional
import json
import logging

import requests

from services.config.env import OpenAIConfig
from services.resolver.models import Candidate, UNKNOWN_EXCHANGE
from services.resolver.normalize import is_ticker_shaped

logger = logging.getLogger(__name__)

DEFAULT_AI_CONFIDENCE = 0.85

SYSTEM_PROMPT = (
    "You are a financial expert. Your task is to identify the stock ticker symbol for a given "
    "company name. Respond ONLY with a JSON object in this format: "
    '{"ticker": "SYMBOL", "companyName": "Full Company Name", "confidence": 0.95}. '
    'If you cannot identify the company or ticker, respond with {"ticker": null, "confidence": 0}. '
    "Do not include any other text."
)


def build_chat_payload(company_name: str, model: str) -> Dict[str, Any]:
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": f"What is the ticker symbol for: {company_name}? Respond only with JSON."},
        ],
        "temperature": 0,
        "max_tokens": 100,
    }


def _strip_fences(content: str) -> str:
    s = content.strip()
    if s.startswith("```"):
        s = s.strip("`")
        if s.lower().startswith("json"):
            s = s[4:]
    return s.strip()


def parse_ticker_answer(payload: Any, company_name: str) -> Optional[Candidate]:
    """Pull {ticker, companyName, confidence} out of a chat-completions body.

    Anything unexpected (missing choices, non-JSON content, null ticker, a
    ticker that doesn't look like one) yields None. A confidence that is
    missing, non-numeric, zero, or outside (0, 1] is replaced by
    DEFAULT_AI_CONFIDENCE; a zero carries no usable signal from the model.
    """
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        logger.warning("openai: unexpected response format")
        return None
    if not isinstance(content, str):
        return None
    try:
        answer = json.loads(_strip_fences(content))
    except ValueError:
        logger.warning("openai: answer is not JSON: %r", content[:200])
        return None
    if not isinstance(answer, dict):
        return None

    ticker = answer.get("ticker")
    if not isinstance(ticker, str) or ticker.strip().lower() in ("", "null", "none"):
        logger.info("openai: could not resolve %r", company_name)
        return None
    ticker = ticker.strip().upper()
    if not is_ticker_shaped(ticker):
        logger.warning("openai: ignoring non-ticker answer %r", ticker)
        return None

    raw_conf = answer.get("confidence")
    try:
        confidence = DEFAULT_AI_CONFIDENCE if raw_conf is None else float(raw_conf)
    except (TypeError, ValueError):
        confidence = DEFAULT_AI_CONFIDENCE
    if not (0.0 < confidence <= 1.0):
        confidence = DEFAULT_AI_CONFIDENCE

    return Candidate(
        ticker=ticker,
        exchange=UNKNOWN_EXCHANGE,
        name=answer.get("companyName") or company_name,
        confidence=confidence,
        resolved_from="openai",
    )


class OpenAIResolver:
    """Last-resort ticker guess from a chat-completions model."""

    def __init__(self, cfg: OpenAIConfig, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self._http = session or requests

    @property
    def enabled(self) -> bool:
        return bool(self.cfg.api_key)

    def resolve(self, company_name: str) -> Optional[Candidate]:
        if not self.enabled:
            logger.debug("openai: API key not configured, skipping AI ticker resolution")
            return None
        try:
            resp = self._http.post(
                f"{self.cfg.base_url}/chat/completions",
                json=build_chat_payload(company_name, self.cfg.model),
                headers={"Authorization": f"Bearer {self.cfg.api_key}"},
                timeout=self.cfg.timeout_sec,
            )
            if not resp.ok:
                logger.warning("openai: API error HTTP %s", resp.status_code)
                return None
            payload = resp.json()
        except requests.RequestException as e:
            logger.warning("openai: request failed: %s", e)
            return None
        except ValueError as e:
            logger.warning("openai: malformed JSON response: %s", e)
            return None
        return parse_ticker_answer(payload, company_name)
