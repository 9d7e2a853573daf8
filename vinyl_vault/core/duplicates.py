"""
Checks whether a record is already in the collection before adding it again.
"""

import logging
import re
from dataclasses import dataclass, field

from vinyl_vault.api.client import DiscogsAPIClient
from vinyl_vault.exceptions import InvalidRequestError

log = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize(text: str) -> str:
    """Lowercases and drops everything but ASCII letters and digits."""
    return _NON_ALNUM.sub("", text.lower().strip())


@dataclass(frozen=True)
class DuplicateMatch:
    id: int
    title: str
    artist: str
    year: int
    format: str


@dataclass
class DuplicateCheck:
    duplicates: list[DuplicateMatch] = field(default_factory=list)

    @property
    def has_duplicate(self) -> bool:
        return bool(self.duplicates)


async def check_duplicates(
    client: DiscogsAPIClient,
    artist: str,
    title: str,
    max_pages: int = 10,
    per_page: int = 100,
) -> DuplicateCheck:
    """
    Scans the collection for entries whose first artist and title match.

    Only the first `max_pages` pages are checked, so very large collections
    can produce false negatives.
    """
    if not artist or not title:
        raise InvalidRequestError("Both artist and title are required.")

    target_artist = normalize(artist)
    target_title = normalize(title)
    result = DuplicateCheck()

    async for page in client.iter_collection_pages(per_page=per_page, max_pages=max_pages):
        for item in page.items:
            info = item.basic_information
            primary = info.primary_artist
            if (
                normalize(primary.name if primary else "") == target_artist
                and normalize(info.title) == target_title
            ):
                result.duplicates.append(
                    DuplicateMatch(
                        id=info.id,
                        title=info.title,
                        artist=primary.name if primary else "Unknown",
                        year=info.year,
                        format=info.formats[0].name if info.formats else "Unknown",
                    )
                )

    log.debug(f"Duplicate check for {artist} - {title}: {len(result.duplicates)} found.")
    return result
