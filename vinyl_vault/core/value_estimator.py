"""
Estimates what a collection is worth from a sample of marketplace prices.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence

from vinyl_vault.api.rate_limiter import RequestPacer
from vinyl_vault.models.records import CollectionItem
from vinyl_vault.models.stats import EstimationProgress, ValueEstimate

log = logging.getLogger(__name__)

# None means "sample the whole collection"
SAMPLE_SIZES: tuple[int | None, ...] = (20, 50, 100, None)


class CollectionValueEstimator:
    """
    Samples the first N items, looks up each one's lowest marketplace price
    (one request at a time, paced like the enrichment fetchers), and
    extrapolates the average to the whole collection.

    Items whose lookup fails or that have no price are left out of the average
    but still count as processed.
    """

    def __init__(
        self,
        lookup: Callable[[int], Awaitable[float | None]],
        delay: float = 1.0,
    ):
        self._lookup = lookup
        self._pacer = RequestPacer(delay)

    async def estimate(
        self,
        items: Sequence[CollectionItem],
        sample_size: int | None = 20,
        on_progress: Callable[[EstimationProgress], None] | None = None,
        collection_size: int | None = None,
    ) -> ValueEstimate | None:
        """
        Returns the extrapolated estimate, or None when no sampled item had a
        usable price.

        `collection_size` is what the average is multiplied by; it defaults to
        `len(items)` and should be the real total when only part of the
        collection was loaded.
        """
        if sample_size is not None and sample_size < 1:
            raise ValueError("Sample size must be positive, or None for all items.")

        sample = list(items if sample_size is None else items[:sample_size])
        total_price = 0.0
        priced_count = 0

        for processed, item in enumerate(sample, start=1):
            release_id = item.basic_information.id
            await self._pacer.acquire()
            try:
                price = await self._lookup(release_id)
            except Exception as e:
                log.debug(f"No price for release {release_id}: {e}")
                price = None

            if price:
                total_price += price
                priced_count += 1

            if on_progress:
                on_progress(EstimationProgress(processed=processed, total=len(sample)))

        if priced_count == 0:
            log.info("No sampled record had marketplace data; no estimate available.")
            return None

        size = max(collection_size or 0, len(items))
        average = total_price / priced_count
        return ValueEstimate(
            low=average * size,
            sample_size=len(sample),
            priced_count=priced_count,
            collection_size=size,
        )
