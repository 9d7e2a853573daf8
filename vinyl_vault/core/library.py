"""
Bulk loading of the collection and wantlist, and the read-only share export.
"""

import logging
from dataclasses import dataclass
from typing import Any

from vinyl_vault.api.client import DiscogsAPIClient
from vinyl_vault.models.records import CollectionItem, WantlistItem

log = logging.getLogger(__name__)

# The only release fields a shared collection exposes
PUBLIC_RELEASE_FIELDS = {
    "id",
    "title",
    "year",
    "thumb",
    "cover_image",
    "artists",
    "formats",
    "labels",
    "genres",
    "styles",
}


@dataclass
class Collection:
    items: list[CollectionItem]
    total: int

    @property
    def truncated(self) -> bool:
        return len(self.items) < self.total


async def load_collection(
    client: DiscogsAPIClient, max_pages: int = 10, per_page: int = 100
) -> Collection:
    """Fetches collection pages, newest first, up to `max_pages`."""
    items: list[CollectionItem] = []
    total = 0
    async for page in client.iter_collection_pages(per_page=per_page, max_pages=max_pages):
        items.extend(page.items)
        total = page.pagination.items

    if len(items) < total:
        log.info(
            f"[yellow]Loaded {len(items)} of {total} records "
            f"(limited to {max_pages} pages).[/yellow]"
        )
    return Collection(items=items, total=max(total, len(items)))


async def load_wantlist(client: DiscogsAPIClient) -> list[WantlistItem]:
    return await client.get_wantlist(per_page=100)


def to_public_item(item: CollectionItem) -> dict[str, Any]:
    """Strips an entry down to what a public viewer may see."""
    return {
        "instance_id": item.instance_id,
        "date_added": item.date_added,
        "basic_information": item.basic_information.model_dump(
            mode="json", include=PUBLIC_RELEASE_FIELDS
        ),
    }


async def build_shared_collection(
    client: DiscogsAPIClient, page: int = 1, per_page: int = 100
) -> dict[str, Any]:
    """One page of the collection in its public, read-only form."""
    result = await client.get_collection_page(page, per_page)
    return {
        "items": [to_public_item(item) for item in result.items],
        "pagination": result.pagination.model_dump(mode="json"),
        "username": client.username,
    }
