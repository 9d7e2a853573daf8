"""
Rich progress displays for the two long-running operations: background
enrichment of a collection view and the value estimate.
"""

import logging
from collections.abc import Callable
from typing import Any

from rich.console import Console, Group
from rich.live import Live
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
)

from vinyl_vault.core.enrichers import Enrichers
from vinyl_vault.core.enrichment import EnrichmentFetcher, EnrichmentSnapshot
from vinyl_vault.models.stats import EstimationProgress

log = logging.getLogger(__name__)

_LABELS = {
    "artist-types": "Artist types",
    "master-years": "Original years",
    "release-extras": "Countries & prices",
}


class EnrichmentProgress:
    """
    Shows one bar per enrichment kind above a view that is re-rendered every
    time any fetcher reports a new answer.

    Usage:
        async with EnrichmentProgress(console, enrichers, render) as progress:
            await progress.wait()
    """

    def __init__(
        self,
        console: Console,
        enrichers: Enrichers,
        render: Callable[[], Any],
    ):
        self.console = console
        self.enrichers = enrichers
        self._render = render
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            MofNCompleteColumn(),
            "•",
            TimeRemainingColumn(),
            console=console,
            transient=True,
        )
        self._tasks: dict[str, TaskID] = {}
        self._unsubscribes: list[Callable[[], None]] = []
        self._live: Live | None = None

    def _group(self) -> Group:
        return Group(self._render(), self.progress)

    def _track(self, fetcher: EnrichmentFetcher[Any]) -> None:
        requested = len(fetcher.resolved) + fetcher.pending
        self._tasks[fetcher.name] = self.progress.add_task(
            _LABELS.get(fetcher.name, fetcher.name),
            total=max(requested, 1),
            completed=len(fetcher.resolved) if requested else 1,
        )

        def on_change(snapshot: EnrichmentSnapshot[Any]) -> None:
            task_id = self._tasks[fetcher.name]
            total = len(snapshot.resolved) + fetcher.pending
            self.progress.update(
                task_id, completed=len(snapshot.resolved), total=max(total, 1)
            )
            if not snapshot.loading:
                self.progress.update(task_id, completed=max(total, 1))
            if self._live:
                self._live.update(self._group())

        self._unsubscribes.append(fetcher.subscribe(on_change))

    async def __aenter__(self) -> "EnrichmentProgress":
        for fetcher in self.enrichers.all:
            self._track(fetcher)
        self._live = Live(
            self._group(), console=self.console, refresh_per_second=4, transient=False
        )
        self._live.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes.clear()
        if self._live:
            # Leave the final view on screen without the finished bars
            self._live.update(self._render())
            self._live.stop()
            self._live = None

    async def wait(self) -> None:
        await self.enrichers.wait()


class EstimationProgressBar:
    """A single bar fed by the value estimator's progress callback."""

    def __init__(self, console: Console, description: str = "Sampling prices"):
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            MofNCompleteColumn(),
            "•",
            TimeRemainingColumn(),
            console=console,
            transient=True,
        )
        self._description = description
        self._task_id: TaskID | None = None

    def __enter__(self) -> "EstimationProgressBar":
        self.progress.start()
        self._task_id = self.progress.add_task(self._description, total=None)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.progress.stop()

    def update(self, progress: EstimationProgress) -> None:
        if self._task_id is None:
            return
        self.progress.update(
            self._task_id, completed=progress.processed, total=progress.total
        )
        if progress.done:
            log.debug(f"Sampled {progress.total} records.")
