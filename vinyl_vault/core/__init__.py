"""
Core application engine.

The `EnrichmentFetcher` resolves per-item derived data in the background
without exceeding the Discogs rate ceiling; `Enrichers` runs the three kinds
side by side. The value estimator, duplicate checker and library loader are
the remaining operations the CLI builds on.
"""
