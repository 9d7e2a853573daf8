"""
Data Models Layer.

This package contains the Pydantic models and dataclasses that define the
Discogs payloads, derived enrichment values, configuration and statistics.
"""

from .config import VaultConfig
from .enrichment import ArtistProfile, ArtistType, ReleaseExtras, Resolution
from .records import (
    Artist,
    BasicInformation,
    CollectionItem,
    CollectionPage,
    Format,
    Label,
    MarketplaceListing,
    Pagination,
    PriceStats,
    SearchResult,
    WantlistItem,
)
from .stats import CollectionStats, EstimationProgress, ValueEstimate

__all__ = [
    "Artist",
    "ArtistProfile",
    "ArtistType",
    "BasicInformation",
    "CollectionItem",
    "CollectionPage",
    "CollectionStats",
    "EstimationProgress",
    "Format",
    "Label",
    "MarketplaceListing",
    "Pagination",
    "PriceStats",
    "ReleaseExtras",
    "Resolution",
    "SearchResult",
    "ValueEstimate",
    "VaultConfig",
    "WantlistItem",
]
