"""
Background enrichment of collection items, one Discogs lookup at a time.

An `EnrichmentFetcher` is handed the set of entity IDs the current view needs.
Cached answers are returned straight away; the rest are resolved by a single
background task that paces its lookups, writes each answer into the cache as
it arrives and tells its listeners. Asking again for the same set is free;
asking for a different set abandons the old run.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from contextlib import suppress
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Generic, TypeVar

from vinyl_vault.api.rate_limiter import RequestPacer
from vinyl_vault.models.enrichment import Resolution
from vinyl_vault.storage.cache import EnrichmentCache
from vinyl_vault.utils.circuit_breaker import CircuitBreakerError

log = logging.getLogger(__name__)

V = TypeVar("V")


def normalize_ids(ids: Iterable[object]) -> list[int]:
    """Distinct positive integer IDs in first-seen order. Anything else is dropped."""
    ordered: dict[int, None] = {}
    for raw in ids:
        if isinstance(raw, bool):
            continue
        try:
            entity_id = int(raw)
        except (TypeError, ValueError):
            continue
        if entity_id > 0:
            ordered.setdefault(entity_id, None)
    return list(ordered)


@dataclass(frozen=True)
class EnrichmentSnapshot(Generic[V]):
    """What a consumer can render right now."""

    resolved: Mapping[int, Resolution[V]]
    loading: bool

    def value_of(self, entity_id: int, default: V | None = None) -> V | None:
        resolution = self.resolved.get(entity_id)
        if resolution is None or resolution.is_empty:
            return default
        return resolution.value


@dataclass(eq=False)
class _Run:
    ids: frozenset[int]
    pending: list[int]
    task: asyncio.Task | None = None
    cancelled: bool = False
    failed: list[int] = field(default_factory=list)
    unreached: list[int] = field(default_factory=list)


class EnrichmentFetcher(Generic[V]):
    """
    Resolves entity IDs through `lookup`, sequentially and paced.

    Args:
        name: Short label used in logs and task names.
        lookup: Async callable resolving one ID. Returning None means the
            entity has nothing to offer; raising means the lookup failed.
        cache: The persistent cache for this enrichment kind.
        fallback: Written for an ID whose lookup failed, so it is not retried.
            A lookup refused by an open circuit breaker never reached Discogs;
            the run ends there and the remaining IDs stay unresolved.
        delay: Minimum seconds between the starts of two lookups.
    """

    def __init__(
        self,
        name: str,
        lookup: Callable[[int], Awaitable[V | None]],
        cache: EnrichmentCache[V],
        fallback: Resolution[V],
        delay: float = 1.0,
    ):
        self.name = name
        self.cache = cache
        self.fallback = fallback
        self._lookup = lookup
        self._pacer = RequestPacer(delay)
        self._requested: frozenset[int] | None = None
        self._resolved: dict[int, Resolution[V]] = {}
        self._run: _Run | None = None
        self._loading = False
        self._listeners: list[Callable[[EnrichmentSnapshot[V]], None]] = []

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def resolved(self) -> Mapping[int, Resolution[V]]:
        return MappingProxyType(self._resolved)

    @property
    def pending(self) -> int:
        """How many IDs of the current request are still waiting for an answer."""
        run = self._run
        if run is None:
            return 0
        return sum(1 for entity_id in run.pending if entity_id not in self._resolved)

    def snapshot(self) -> EnrichmentSnapshot[V]:
        return EnrichmentSnapshot(dict(self._resolved), self._loading)

    def subscribe(
        self, listener: Callable[[EnrichmentSnapshot[V]], None]
    ) -> Callable[[], None]:
        """Calls `listener` after every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            with suppress(ValueError):
                self._listeners.remove(listener)

        return unsubscribe

    def request(self, ids: Iterable[object]) -> EnrichmentSnapshot[V]:
        """
        Makes `ids` the current request and returns what is known about it.

        Must be called from a running event loop whenever uncached IDs may be
        present, since resolving them is scheduled as a task on that loop.
        """
        ordered = normalize_ids(ids)
        requested = frozenset(ordered)
        if requested == self._requested:
            return self.snapshot()

        self._cancel_run()
        self._requested = requested
        self._resolved = {}
        for entity_id in ordered:
            if (cached := self.cache.get(entity_id)) is not None:
                self._resolved[entity_id] = cached

        pending = [entity_id for entity_id in ordered if entity_id not in self._resolved]
        if pending:
            run = _Run(ids=requested, pending=pending)
            self._run = run
            self._loading = True
            run.task = asyncio.create_task(
                self._resolve(run), name=f"enrich-{self.name}"
            )
            log.debug(
                f"{self.name}: {len(self._resolved)} cached, "
                f"{len(pending)} to fetch."
            )
        return self.snapshot()

    async def wait(self) -> EnrichmentSnapshot[V]:
        """Waits until the current request is fully resolved (or abandoned)."""
        while (run := self._run) is not None and run.task is not None:
            await asyncio.wait({run.task})
            if not run.task.cancelled():
                run.task.result()
        return self.snapshot()

    async def close(self) -> None:
        """Stops any in-flight run. The fetcher can be reused afterwards."""
        run = self._run
        self._cancel_run()
        self._requested = None
        if run and run.task:
            with suppress(asyncio.CancelledError):
                await run.task

    def _cancel_run(self) -> None:
        run = self._run
        if run is None:
            return
        run.cancelled = True
        if run.task and not run.task.done():
            run.task.cancel()
            log.debug(f"{self.name}: abandoned run with {len(run.pending)} IDs.")
        self._run = None
        self._loading = False

    async def _resolve(self, run: _Run) -> None:
        try:
            for position, entity_id in enumerate(run.pending):
                if run.cancelled:
                    break
                await self._pacer.acquire()
                if run.cancelled:
                    break

                try:
                    resolution = Resolution(await self._lookup(entity_id))
                except CircuitBreakerError as e:
                    # Nothing was sent, so these IDs stay unresolved rather than
                    # being cached with a fallback
                    run.unreached = run.pending[position:]
                    log.warning(f"{self.name}: Discogs is unavailable. {e}")
                    break
                except Exception as e:
                    log.warning(
                        f"{self.name}: lookup for {entity_id} failed, "
                        f"storing fallback: {e}"
                    )
                    resolution = self.fallback
                    run.failed.append(entity_id)

                if run.cancelled:
                    break
                self._store(entity_id, resolution)
        finally:
            if self._run is run:
                self._run = None
                self._loading = False
                if run.failed:
                    log.info(
                        f"{self.name}: {len(run.failed)} lookups failed and were "
                        "cached with defaults. Clear the cache to retry them."
                    )
                if run.unreached:
                    log.info(
                        f"{self.name}: {len(run.unreached)} IDs were not looked up "
                        "and will be tried again on the next run."
                    )
                self._notify()

    def _store(self, entity_id: int, resolution: Resolution[V]) -> None:
        self.cache.put(entity_id, resolution)
        # An existing entry always wins over the new answer
        self._resolved[entity_id] = self.cache.get(entity_id) or resolution
        self.cache.persist()
        self._notify()

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
