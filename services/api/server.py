from __future__ import annotations
from pathlib import Path
from flask import Flask, request, jsonify

from services.config.log import configure_logging
from services.resolver.core import TickerResolver

import os
import time
import json
from collections import deque, defaultdict

app = Flask(__name__)

RESOLVER = TickerResolver.from_env()

OPENAPI_PATH = Path(__file__).with_name('openapi.json')

# Configuration helpers (overridable via app.config in tests)

def _get_api_key() -> str | None:
    if 'API_KEY' in app.config:
        return app.config.get('API_KEY')
    return os.environ.get('API_KEY')


def _get_rate_limit() -> tuple[int, float]:
    n = app.config.get('RATE_LIMIT_N')
    w = app.config.get('RATE_LIMIT_WINDOW_SEC')
    if n is None:
        n = int(os.environ.get('RATE_LIMIT_N', '60'))
    if w is None:
        w = float(os.environ.get('RATE_LIMIT_WINDOW_SEC', '60.0'))
    return int(n), float(w)

_recent: dict[str, deque[float]] = defaultdict(lambda: deque(maxlen=1000))


def _now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def _client_ip() -> str:
    xff = request.headers.get('X-Forwarded-For')
    if xff:
        return xff.split(',')[0].strip()
    return request.remote_addr or 'anon'


def _check_api_key():
    api_key = _get_api_key()
    if api_key:
        provided = request.headers.get('X-API-Key')
        if provided != api_key:
            return jsonify({'error': 'unauthorized'}), 401
    return None


def _check_rate_limit(ip: str):
    # Allow if rate limiting disabled or N <= 0
    n, window = _get_rate_limit()
    if n <= 0:
        return None
    now = time.time()
    dq = _recent[ip]
    # Drop old entries outside window
    while dq and now - dq[0] > window:
        dq.popleft()
    if len(dq) >= n:
        retry = max(0.0, window - (now - dq[0]))
        resp = jsonify({'error': 'rate_limited'})
        resp.status_code = 429
        resp.headers['Retry-After'] = f"{retry:.2f}"
        return resp
    dq.append(now)
    return None

@app.before_request
def _auth_and_rate_limit():
    # Only enforce for resolver routes; skip the OpenAPI document
    if request.path.startswith('/ticker-resolution'):
        unauthorized = _check_api_key()
        if unauthorized is not None:
            return unauthorized
        # Resolutions may hit paid upstream APIs; limit those only
        if request.method in ('GET', 'POST') and request.path == '/ticker-resolution':
            rl = _check_rate_limit(_client_ip())
            if rl is not None:
                return rl
    return None


def _resolve(query: str, exchange: str | None, provider: str, force_refresh: bool):
    try:
        return RESOLVER.resolve(query, exchange=exchange or None, provider=provider or 'auto',
                                force_refresh=force_refresh), None
    except ValueError as e:
        return None, (jsonify({'error': str(e)}), 400)


@app.get('/ticker-resolution')
def get_resolution():
    query = request.args.get('query', '')
    include_stats = request.args.get('stats') == 'true'
    if not query:
        if include_stats:
            return jsonify({'cache_stats': RESOLVER.cache_stats()})
        return jsonify({'error': 'query parameter is required'}), 400

    result, err = _resolve(
        query,
        request.args.get('exchange'),
        request.args.get('provider', 'auto'),
        request.args.get('refresh') == 'true',
    )
    if err is not None:
        return err
    body = {'query': query, 'resolution': result.to_dict(), 'timestamp': _now_iso()}
    if include_stats:
        body['cache_stats'] = RESOLVER.cache_stats()
    if result.status == 'not_found':
        return jsonify(body), 404
    return jsonify(body)


@app.post('/ticker-resolution')
def post_resolution():
    payload = request.get_json(force=True, silent=True) or {}
    query = payload.get('query') or ''
    if not isinstance(query, str) or not query:
        return jsonify({'error': 'query field is required'}), 400
    result, err = _resolve(
        query,
        payload.get('exchange'),
        payload.get('provider') or 'auto',
        bool(payload.get('force_refresh', False)),
    )
    if err is not None:
        return err
    return jsonify({'query': query, 'resolution': result.to_dict(), 'timestamp': _now_iso()})


@app.delete('/ticker-resolution')
def delete_cache():
    query = request.args.get('query')
    RESOLVER.clear_cache(query or None)
    return jsonify({
        'message': f"Cleared cache for: {query}" if query else 'Cleared entire resolution cache',
        'timestamp': _now_iso(),
    })


@app.post('/ticker-resolution/mappings')
def post_mapping():
    payload = request.get_json(force=True, silent=True) or {}
    name = payload.get('name') or ''
    ticker = payload.get('ticker') or ''
    if not isinstance(name, str) or not isinstance(ticker, str) or not name or not ticker:
        return jsonify({'error': 'name and ticker are required'}), 400
    try:
        RESOLVER.add_mapping(
            name,
            ticker,
            exchange=payload.get('exchange') or 'NASDAQ',
            confidence=float(payload.get('confidence', 0.99)),
        )
    except (TypeError, ValueError) as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({'name': name, 'ticker': ticker.strip().upper()}), 201


@app.get('/openapi.json')
def get_openapi():
    try:
        return jsonify(json.loads(OPENAPI_PATH.read_text()))
    except (OSError, ValueError):
        return jsonify({'error': 'openapi_not_found'}), 404


if __name__ == '__main__':
    configure_logging()
    app.run(host='0.0.0.0', port=8000)
