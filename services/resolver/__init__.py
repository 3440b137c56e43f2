"""Ticker Resolver package.

Resolves a free-text query (ticker, company name, partial or misspelled name)
to a ticker with a confidence score and the strategy that produced it.

- normalize.py: key normalization, edit distance, ticker-shape check
- catalog.py: seeded, extensible name -> ticker table
- cache.py: TTL memo of past resolutions
- fuzzy.py: similarity ranking over the catalog
- core.py: TickerResolver, the strategy pipeline
"""
