"""
Single-entity lookups that shape raw Discogs responses into the small values
the enrichment fetchers and the value estimator store.

Each function performs exactly one API round trip and raises on failure;
deciding what a failure means is left to the caller.
"""

import asyncio
from typing import Any

from vinyl_vault.models.enrichment import ArtistProfile, ArtistType, ReleaseExtras
from vinyl_vault.models.records import MarketplaceListing, PriceStats

from .client import DiscogsAPIClient


def classify_artist(data: dict[str, Any]) -> ArtistProfile:
    """
    Decides whether an artist is a person or a band.

    Anything with members is a band; anything with a real name or group
    memberships is a person; everything else defaults to band.
    """
    if data.get("members"):
        return ArtistProfile(type=ArtistType.BAND)
    if data.get("realname") or data.get("groups"):
        return ArtistProfile(type=ArtistType.PERSON, realname=data.get("realname") or None)
    return ArtistProfile(type=ArtistType.BAND)


async def fetch_artist_profile(client: DiscogsAPIClient, artist_id: int) -> ArtistProfile:
    return classify_artist(await client.get_artist(artist_id))


async def fetch_master_year(client: DiscogsAPIClient, master_id: int) -> int | None:
    """The master release's original year, or None when Discogs has none."""
    data = await client.get_master(master_id)
    return data.get("year") or None


async def fetch_release_extras(client: DiscogsAPIClient, release_id: int) -> ReleaseExtras:
    data = await client.get_release(release_id)
    lowest = data.get("lowest_price")
    return ReleaseExtras(
        country=data.get("country") or None,
        lowest_price=float(lowest) if lowest is not None else None,
    )


async def fetch_lowest_price(
    client: DiscogsAPIClient, release_id: int, currency: str = "USD"
) -> float | None:
    stats = await client.get_marketplace_stats(release_id, currency)
    if stats.lowest_price and stats.lowest_price.value:
        return stats.lowest_price.value
    return None


async def fetch_marketplace_summary(
    client: DiscogsAPIClient, release_id: int, country: str = "US", currency: str = "USD"
) -> tuple[PriceStats, list[MarketplaceListing]]:
    """Price statistics and current listings for one release, fetched together."""
    stats, listings = await asyncio.gather(
        client.get_marketplace_stats(release_id, currency),
        client.search_marketplace(release_id, country),
    )
    return stats, listings
