"""Shared fixtures: collection item factories and in-memory stores."""

from typing import Any

import pytest

from vinyl_vault.models.records import CollectionItem, CollectionPage, WantlistItem
from vinyl_vault.storage.cache import MemoryStore


def build_item(
    release_id: int,
    *,
    title: str = "Untitled",
    artist: str | None = "Some Artist",
    artist_id: int | None = None,
    year: int = 2000,
    master_id: int = 0,
    genres: list[str] | None = None,
    styles: list[str] | None = None,
    formats: list[dict[str, Any]] | None = None,
    labels: list[dict[str, Any]] | None = None,
    date_added: str = "2024-01-01T00:00:00-08:00",
    wantlist: bool = False,
) -> CollectionItem | WantlistItem:
    artists = []
    if artist is not None:
        artists.append({"id": artist_id or release_id * 10, "name": artist})
    data = {
        "id": release_id,
        "instance_id": release_id * 100,
        "folder_id": 1,
        "rating": 0,
        "date_added": date_added,
        "basic_information": {
            "id": release_id,
            "master_id": master_id,
            "title": title,
            "year": year,
            "artists": artists,
            "formats": formats
            if formats is not None
            else [{"name": "Vinyl", "qty": "1", "descriptions": ["LP", "Album"]}],
            "labels": labels
            if labels is not None
            else [{"id": 1, "name": "Some Label", "catno": "SL-1"}],
            "genres": genres if genres is not None else ["Rock"],
            "styles": styles if styles is not None else [],
        },
    }
    if wantlist:
        return WantlistItem.model_validate(data)
    return CollectionItem.model_validate(data)


def build_page(items: list[CollectionItem], page: int = 1, pages: int = 1) -> CollectionPage:
    return CollectionPage.model_validate(
        {
            "releases": [item.model_dump(mode="json") for item in items],
            "pagination": {
                "page": page,
                "pages": pages,
                "per_page": 100,
                "items": len(items) * pages,
            },
        }
    )


@pytest.fixture
def make_item():
    """Factory for collection (or wantlist) entries."""
    return build_item


@pytest.fixture
def make_page():
    """Factory for collection pages."""
    return build_page


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()
