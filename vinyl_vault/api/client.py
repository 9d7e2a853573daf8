"""
Async client for the Discogs REST API with rate limiting and circuit breaker protection.
"""

import logging
import time
from collections.abc import AsyncGenerator
from typing import Any

import aiohttp

from vinyl_vault.exceptions import (
    AuthenticationError,
    DiscogsAPIError,
    NotFoundError,
    RateLimitError,
)
from vinyl_vault.models.records import (
    CollectionPage,
    MarketplaceListing,
    PriceStats,
    SearchResult,
    WantlistItem,
    WantlistPage,
)
from vinyl_vault.utils.circuit_breaker import CircuitBreaker, CircuitBreakerError

from .rate_limiter import AdaptiveRateLimiter

log = logging.getLogger(__name__)


class DiscogsAPIClient:
    """
    Async client for the Discogs API (v2).

    Features:
    - Personal access token authentication
    - Adaptive rate limiting (Discogs allows 60 authenticated requests/minute)
    - Circuit breaker for API resilience
    - Paginated collection iteration
    """

    BASE_URL = "https://api.discogs.com"

    def __init__(
        self,
        token: str,
        username: str,
        user_agent: str = "VinylVault/1.0",
        requests_per_second: float = 1.0,
    ):
        """
        Initializes the API client.

        Args:
            token: Discogs personal access token.
            username: The Discogs user whose collection and wantlist are managed.
            user_agent: Discogs requires an identifying User-Agent.
            requests_per_second: Upper bound for the adaptive rate limiter.
        """
        self.token = token
        self.username = username
        self.user_agent = user_agent

        self._session: aiohttp.ClientSession | None = None
        self._rate_limiter = AdaptiveRateLimiter(
            initial_calls_per_second=requests_per_second,
            max_calls_per_second=requests_per_second,
        )
        self._circuit_breaker = CircuitBreaker(
            failure_threshold=5,
            recovery_timeout=60,
            success_threshold=2,
            ignored_exceptions=(NotFoundError,),
        )

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "Authorization": f"Discogs token={self.token}",
                    "User-Agent": self.user_agent,
                    "Accept": "application/vnd.discogs.v2.discogs+json",
                },
                timeout=aiohttp.ClientTimeout(total=30, connect=10, sock_read=20),
            )

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "DiscogsAPIClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def api_call(
        self,
        endpoint: str,
        method: str = "GET",
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Makes an authenticated API call with rate limiting and circuit breaker.

        Raises:
            AuthenticationError: The token was rejected (401/403).
            NotFoundError: The resource does not exist (404).
            RateLimitError: Discogs throttled the request (429).
            DiscogsAPIError: Any other non-success status.
            CircuitBreakerError: Too many recent failures; the call was not sent.
        """
        await self._initialize_session()

        try:
            async with self._circuit_breaker:
                await self._rate_limiter.acquire()

                start_time = time.monotonic()
                async with self._session.request(
                    method, self.BASE_URL + endpoint, params=params
                ) as r:
                    duration_ms = (time.monotonic() - start_time) * 1000
                    log.debug(f"{method} {endpoint} -> {r.status} ({duration_ms:.0f} ms)")

                    if r.status == 429:
                        await self._rate_limiter.on_429()
                        raise RateLimitError(
                            f"Discogs rate limit exceeded for {endpoint}.", status=429
                        )
                    if r.status in (401, 403):
                        raise AuthenticationError(
                            "Discogs rejected the access token.", status=r.status
                        )
                    if r.status == 404:
                        raise NotFoundError(f"Not found: {endpoint}", status=404)
                    if r.status >= 400:
                        detail = await r.text()
                        raise DiscogsAPIError(
                            f"{method} {endpoint} failed with {r.status}: {detail[:200]}",
                            status=r.status,
                        )
                    if r.status == 204:
                        return {}
                    return await r.json(content_type=None) or {}

        except CircuitBreakerError as e:
            log.error(f"[red]Circuit breaker is open for Discogs calls: {e}[/red]")
            raise
        except (aiohttp.ClientError, TimeoutError) as e:
            log.debug(f"API call to {endpoint} failed: {e}")
            raise DiscogsAPIError(f"Network error calling {endpoint}: {e}") from e

    # Collection
    async def get_collection_page(
        self, page: int = 1, per_page: int = 50, folder_id: int = 0
    ) -> CollectionPage:
        data = await self.api_call(
            f"/users/{self.username}/collection/folders/{folder_id}/releases",
            params={
                "page": page,
                "per_page": per_page,
                "sort": "added",
                "sort_order": "desc",
            },
        )
        return CollectionPage.model_validate(data)

    async def iter_collection_pages(
        self, per_page: int = 100, max_pages: int = 10
    ) -> AsyncGenerator[CollectionPage, None]:
        """Yields collection pages until the last page or `max_pages` is reached."""
        page = 1
        while page <= max_pages:
            result = await self.get_collection_page(page, per_page)
            yield result
            if page >= result.pagination.pages:
                break
            page += 1

    async def add_to_collection(self, release_id: int, folder_id: int = 1) -> int:
        """Adds a release to a collection folder. Returns the new instance ID."""
        data = await self.api_call(
            f"/users/{self.username}/collection/folders/{folder_id}/releases/{release_id}",
            method="POST",
        )
        return int(data.get("instance_id", 0))

    async def remove_from_collection(
        self, release_id: int, instance_id: int, folder_id: int = 1
    ) -> None:
        await self.api_call(
            f"/users/{self.username}/collection/folders/{folder_id}"
            f"/releases/{release_id}/instances/{instance_id}",
            method="DELETE",
        )

    # Wantlist
    async def get_wantlist(self, per_page: int = 100) -> list[WantlistItem]:
        data = await self.api_call(
            f"/users/{self.username}/wants", params={"per_page": per_page}
        )
        return WantlistPage.model_validate(data).items

    async def add_to_wantlist(self, release_id: int) -> None:
        await self.api_call(f"/users/{self.username}/wants/{release_id}", method="PUT")

    async def remove_from_wantlist(self, release_id: int) -> None:
        await self.api_call(
            f"/users/{self.username}/wants/{release_id}", method="DELETE"
        )

    # Catalog
    async def search_releases(
        self, query: str, search_type: str = "release", per_page: int = 20
    ) -> list[SearchResult]:
        data = await self.api_call(
            "/database/search",
            params={
                "q": query,
                "type": search_type,
                "format": "Vinyl",
                "per_page": per_page,
            },
        )
        return [SearchResult.model_validate(r) for r in data.get("results", [])]

    async def get_release(self, release_id: int) -> dict[str, Any]:
        return await self.api_call(f"/releases/{release_id}")

    async def get_master(self, master_id: int) -> dict[str, Any]:
        return await self.api_call(f"/masters/{master_id}")

    async def get_artist(self, artist_id: int) -> dict[str, Any]:
        return await self.api_call(f"/artists/{artist_id}")

    # Marketplace
    async def get_marketplace_stats(
        self, release_id: int, currency: str = "USD"
    ) -> PriceStats:
        data = await self.api_call(
            f"/marketplace/stats/{release_id}", params={"curr_abbr": currency}
        )
        return PriceStats.model_validate(data)

    async def search_marketplace(
        self, release_id: int, country: str = "US", per_page: int = 50
    ) -> list[MarketplaceListing]:
        data = await self.api_call(
            "/marketplace/listings",
            params={
                "release_id": release_id,
                "ships_from": country,
                "status": "For Sale",
                "per_page": per_page,
            },
        )
        return [MarketplaceListing.model_validate(x) for x in data.get("listings", [])]
