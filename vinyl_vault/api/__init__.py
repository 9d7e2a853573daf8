"""
Discogs API Layer.

This package handles all communication with the Discogs API.
"""

from .client import DiscogsAPIClient
from .rate_limiter import AdaptiveRateLimiter, RequestPacer

__all__ = ["AdaptiveRateLimiter", "DiscogsAPIClient", "RequestPacer"]
