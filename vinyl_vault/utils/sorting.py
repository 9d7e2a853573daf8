"""
Filtering, sorting and paging of collection and wantlist entries.

Everything here is synchronous and pure. Enrichment data is passed in as
whatever has been resolved so far; anything missing falls back to "band" for
artist type and to the release's own year for the original year.
"""

import math
import re
import unicodedata
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import TypeVar

from vinyl_vault.models.enrichment import ArtistProfile, ArtistType, Resolution
from vinyl_vault.models.records import CollectionItem, WantlistItem

Item = TypeVar("Item", CollectionItem, WantlistItem)

ALL_GENRES = "All Genres"
ALL_DECADES = "All Decades"

GENRES = (
    ALL_GENRES,
    "Rock",
    "Electronic",
    "Pop",
    "Jazz",
    "Funk / Soul",
    "Classical",
    "Hip Hop",
    "Reggae",
    "Latin",
    "Blues",
    "Folk, World, & Country",
    "Stage & Screen",
)

DECADES = (
    ALL_DECADES,
    "2020s",
    "2010s",
    "2000s",
    "1990s",
    "1980s",
    "1970s",
    "1960s",
    "1950s",
)

# Discogs disambiguates homonyms with a trailing "(2)", "(3)", ...
_DISCOGS_NUMBERING = re.compile(r"\s*\(\d+\)\s*$")
_LEADING_THE = re.compile(r"^the\s+", re.IGNORECASE)


class SortKey(str, Enum):
    ADDED = "added"
    ARTIST = "artist"
    ARTIST_REVERSE = "artist-reverse"
    TITLE = "title"
    YEAR = "year"
    ORIGINAL_YEAR = "original-year"


@dataclass(frozen=True)
class FilterCriteria:
    search: str = ""
    genre: str = ALL_GENRES
    decade: str = ALL_DECADES
    year: str = ""
    sort_by: SortKey = SortKey.ADDED


@dataclass(frozen=True)
class Page:
    items: list
    page: int
    pages: int
    total: int
    per_page: int = 50


def get_artist_sort_name(name: str, artist_type: ArtistType | str = ArtistType.BAND) -> str:
    """
    Builds the key artists are ordered by.

    People sort by surname ("Eric Clapton" -> "clapton, eric"); bands sort by
    name without a leading "The" ("The Stone Roses" -> "stone roses").
    """
    if not name:
        return ""

    cleaned = _DISCOGS_NUMBERING.sub("", name).strip()
    without_the = _LEADING_THE.sub("", cleaned)

    if ArtistType(artist_type) == ArtistType.PERSON:
        words = without_the.split()
        if len(words) >= 2:
            return f"{words[-1]}, {' '.join(words[:-1])}".lower()
    return without_the.lower()


def get_original_year(
    item: CollectionItem | WantlistItem,
    master_years: Mapping[int, Resolution[int]] | None = None,
) -> int:
    """The master release year if known, else the release year, else 0."""
    info = item.basic_information
    if info.master_id and master_years:
        resolution = master_years.get(info.master_id)
        if resolution is not None and resolution.value:
            return resolution.value
    return info.year or 0


def _artist_type_of(
    item: CollectionItem | WantlistItem,
    artist_types: Mapping[int, Resolution[ArtistProfile]] | None,
) -> ArtistType:
    artist = item.basic_information.primary_artist
    if artist is None or not artist_types:
        return ArtistType.BAND
    resolution = artist_types.get(artist.id)
    if resolution is None or resolution.is_empty:
        return ArtistType.BAND
    return resolution.value.type


def _parse_decade(decade: str) -> int | None:
    try:
        return int(decade.rstrip("s"))
    except ValueError:
        return None


def matches(item: CollectionItem | WantlistItem, criteria: FilterCriteria) -> bool:
    info = item.basic_information

    query = criteria.search.lower()
    if query and not (
        query in info.title.lower()
        or any(query in artist.name.lower() for artist in info.artists)
        or any(query in label.name.lower() for label in info.labels)
    ):
        return False

    if criteria.genre != ALL_GENRES:
        genre = criteria.genre.lower()
        if not any(genre in g.lower() for g in info.genres):
            return False

    if criteria.decade != ALL_DECADES:
        start = _parse_decade(criteria.decade)
        if start is None or not info.year or not start <= info.year < start + 10:
            return False

    if criteria.year:
        if not info.year or str(info.year) != criteria.year:
            return False

    return True


def collation_key(text: str) -> str:
    """Case- and accent-insensitive form of `text`, so "Ásgeir" sorts among the a's."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def _compare(a: str, b: str) -> int:
    return (a > b) - (a < b)


def sort_items(
    items: Sequence[Item],
    sort_by: SortKey | str = SortKey.ADDED,
    artist_types: Mapping[int, Resolution[ArtistProfile]] | None = None,
    master_years: Mapping[int, Resolution[int]] | None = None,
) -> list[Item]:
    sort_by = SortKey(sort_by)

    if sort_by in (SortKey.ARTIST, SortKey.ARTIST_REVERSE):
        descending = sort_by == SortKey.ARTIST_REVERSE

        def sort_name(item: Item) -> str:
            artist = item.basic_information.primary_artist
            name = artist.name if artist else ""
            return collation_key(
                get_artist_sort_name(name, _artist_type_of(item, artist_types))
            )

        def compare(a: tuple[str, float], b: tuple[str, float]) -> int:
            by_name = _compare(b[0], a[0]) if descending else _compare(a[0], b[0])
            if by_name:
                return by_name
            # Same artist: oldest original release first, unknown years last
            return _compare(a[1], b[1])

        keyed = [
            ((sort_name(item), get_original_year(item, master_years) or math.inf), item)
            for item in items
        ]
        keyed.sort(key=cmp_to_key(lambda x, y: compare(x[0], y[0])))
        return [item for _, item in keyed]

    if sort_by == SortKey.TITLE:
        return sorted(items, key=lambda item: collation_key(item.basic_information.title))

    if sort_by == SortKey.YEAR:
        return sorted(items, key=lambda item: item.basic_information.year or 0, reverse=True)

    if sort_by == SortKey.ORIGINAL_YEAR:
        return sorted(
            items, key=lambda item: get_original_year(item, master_years), reverse=True
        )

    def added(item: Item) -> float:
        added_at = item.added_at
        return added_at.timestamp() if added_at else float("-inf")

    return sorted(items, key=added, reverse=True)


def filter_and_sort(
    items: Sequence[Item],
    criteria: FilterCriteria,
    artist_types: Mapping[int, Resolution[ArtistProfile]] | None = None,
    master_years: Mapping[int, Resolution[int]] | None = None,
) -> list[Item]:
    filtered = [item for item in items if matches(item, criteria)]
    return sort_items(filtered, criteria.sort_by, artist_types, master_years)


def paginate(items: Sequence[Item], page: int = 1, per_page: int = 50) -> Page:
    """Slices one page out of `items`; out-of-range pages are clamped."""
    total = len(items)
    pages = max(1, math.ceil(total / per_page))
    page = min(max(page, 1), pages)
    start = (page - 1) * per_page
    return Page(
        items=list(items[start : start + per_page]),
        page=page,
        pages=pages,
        total=total,
        per_page=per_page,
    )
