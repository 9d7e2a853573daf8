"""
The three enrichment kinds: artist type, master-release year and release extras.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import partial
from typing import Any

from vinyl_vault.api import lookups
from vinyl_vault.api.client import DiscogsAPIClient
from vinyl_vault.models.enrichment import ArtistProfile, ReleaseExtras, Resolution
from vinyl_vault.models.records import CollectionItem, WantlistItem
from vinyl_vault.storage.cache import Codec, EnrichmentCache, KeyValueStore

from .enrichment import EnrichmentFetcher

log = logging.getLogger(__name__)

ARTIST_TYPES_NAMESPACE = "vinyl-vault-artist-types"
MASTER_YEARS_NAMESPACE = "vinyl-vault-master-years"
RELEASE_EXTRAS_NAMESPACE = "vinyl-vault-release-extras"

Item = CollectionItem | WantlistItem


def _encode_model(resolution: Resolution[Any]) -> dict[str, Any]:
    if resolution.is_empty:
        return {}
    return resolution.value.model_dump(mode="json", exclude_none=True)


def _decode_artist(raw: Any) -> Resolution[ArtistProfile]:
    # Older caches stored the bare type string
    if isinstance(raw, str):
        return Resolution(ArtistProfile(type=raw))
    if not raw:
        return Resolution.empty()
    return Resolution(ArtistProfile.model_validate(raw))


def _decode_master_year(raw: Any) -> Resolution[int]:
    year = int(raw or 0)
    return Resolution(year) if year > 0 else Resolution.empty()


def _decode_extras(raw: Any) -> Resolution[ReleaseExtras]:
    if not raw:
        return Resolution.empty()
    return Resolution(ReleaseExtras.model_validate(raw))


ARTIST_CODEC: Codec[ArtistProfile] = Codec(encode=_encode_model, decode=_decode_artist)
# 0 on disk means "looked up, no year"
MASTER_YEAR_CODEC: Codec[int] = Codec(
    encode=lambda resolution: resolution.value or 0, decode=_decode_master_year
)
EXTRAS_CODEC: Codec[ReleaseExtras] = Codec(encode=_encode_model, decode=_decode_extras)


def artist_ids(items: Iterable[Item]) -> list[int]:
    """IDs of the first credited artist of each item."""
    return [
        artist.id
        for item in items
        if (artist := item.basic_information.primary_artist) is not None
    ]


def master_ids(items: Iterable[Item]) -> list[int]:
    return [item.basic_information.master_id for item in items]


def release_ids(items: Iterable[Item]) -> list[int]:
    return [item.basic_information.id for item in items]


def artist_type_fetcher(
    client: DiscogsAPIClient, store: KeyValueStore, delay: float = 1.0
) -> EnrichmentFetcher[ArtistProfile]:
    return EnrichmentFetcher(
        "artist-types",
        partial(lookups.fetch_artist_profile, client),
        EnrichmentCache(store, ARTIST_TYPES_NAMESPACE, ARTIST_CODEC),
        fallback=Resolution(ArtistProfile()),
        delay=delay,
    )


def master_year_fetcher(
    client: DiscogsAPIClient, store: KeyValueStore, delay: float = 1.0
) -> EnrichmentFetcher[int]:
    return EnrichmentFetcher(
        "master-years",
        partial(lookups.fetch_master_year, client),
        EnrichmentCache(store, MASTER_YEARS_NAMESPACE, MASTER_YEAR_CODEC),
        fallback=Resolution.empty(),
        delay=delay,
    )


def release_extras_fetcher(
    client: DiscogsAPIClient, store: KeyValueStore, delay: float = 1.0
) -> EnrichmentFetcher[ReleaseExtras]:
    return EnrichmentFetcher(
        "release-extras",
        partial(lookups.fetch_release_extras, client),
        EnrichmentCache(store, RELEASE_EXTRAS_NAMESPACE, EXTRAS_CODEC),
        fallback=Resolution.empty(),
        delay=delay,
    )


@dataclass
class Enrichers:
    """The three fetchers a collection view runs side by side."""

    artist_types: EnrichmentFetcher[ArtistProfile]
    master_years: EnrichmentFetcher[int]
    release_extras: EnrichmentFetcher[ReleaseExtras]

    @classmethod
    def create(
        cls, client: DiscogsAPIClient, store: KeyValueStore, delay: float = 1.0
    ) -> "Enrichers":
        return cls(
            artist_types=artist_type_fetcher(client, store, delay),
            master_years=master_year_fetcher(client, store, delay),
            release_extras=release_extras_fetcher(client, store, delay),
        )

    @property
    def all(self) -> tuple[EnrichmentFetcher[Any], ...]:
        return (self.artist_types, self.master_years, self.release_extras)

    @property
    def loading(self) -> bool:
        return any(fetcher.loading for fetcher in self.all)

    def request_sort_keys(self, items: Sequence[Item]) -> None:
        """Asks for what sorting `items` needs: artist types and original years."""
        self.artist_types.request(artist_ids(items))
        self.master_years.request(master_ids(items))

    def request_extras(self, items: Sequence[Item]) -> None:
        """Asks for country and lowest price, usually just for the rows on screen."""
        self.release_extras.request(release_ids(items))

    async def wait(self) -> None:
        for fetcher in self.all:
            await fetcher.wait()

    async def close(self) -> None:
        for fetcher in self.all:
            await fetcher.close()
