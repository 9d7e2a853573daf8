"""Tests for the single-entity Discogs lookups."""

from unittest.mock import AsyncMock

import pytest

from vinyl_vault.api import lookups
from vinyl_vault.exceptions import NotFoundError
from vinyl_vault.models.enrichment import ArtistType
from vinyl_vault.models.records import MarketplaceListing, PriceStats


class TestClassifyArtist:
    def test_members_mean_band(self) -> None:
        profile = lookups.classify_artist({"members": [{"id": 1}], "realname": "x"})
        assert profile.type is ArtistType.BAND

    def test_realname_means_person(self) -> None:
        profile = lookups.classify_artist({"realname": "Stevland Morris"})
        assert profile.type is ArtistType.PERSON
        assert profile.realname == "Stevland Morris"

    def test_group_membership_means_person(self) -> None:
        profile = lookups.classify_artist({"groups": [{"id": 2}]})
        assert profile.type is ArtistType.PERSON
        assert profile.realname is None

    def test_nothing_known_defaults_to_band(self) -> None:
        assert lookups.classify_artist({}).type is ArtistType.BAND


class TestLookups:
    @pytest.fixture
    def mock_client(self) -> AsyncMock:
        return AsyncMock()

    @pytest.mark.asyncio
    async def test_master_year(self, mock_client: AsyncMock) -> None:
        mock_client.get_master.return_value = {"year": 1972}
        assert await lookups.fetch_master_year(mock_client, 5) == 1972

    @pytest.mark.asyncio
    async def test_master_without_year_is_none(self, mock_client: AsyncMock) -> None:
        mock_client.get_master.return_value = {"year": 0}
        assert await lookups.fetch_master_year(mock_client, 5) is None

    @pytest.mark.asyncio
    async def test_lookup_errors_propagate(self, mock_client: AsyncMock) -> None:
        mock_client.get_artist.side_effect = NotFoundError("gone", status=404)
        with pytest.raises(NotFoundError):
            await lookups.fetch_artist_profile(mock_client, 1)

    @pytest.mark.asyncio
    async def test_release_extras(self, mock_client: AsyncMock) -> None:
        mock_client.get_release.return_value = {"country": "Japan", "lowest_price": 40}
        extras = await lookups.fetch_release_extras(mock_client, 9)
        assert extras.country == "Japan"
        assert extras.lowest_price == 40.0

    @pytest.mark.asyncio
    async def test_release_extras_tolerate_missing_fields(self, mock_client: AsyncMock) -> None:
        mock_client.get_release.return_value = {"country": "", "lowest_price": None}
        extras = await lookups.fetch_release_extras(mock_client, 9)
        assert extras.country is None
        assert extras.lowest_price is None

    @pytest.mark.asyncio
    async def test_lowest_price(self, mock_client: AsyncMock) -> None:
        mock_client.get_marketplace_stats.return_value = PriceStats.model_validate(
            {"lowest_price": {"value": 18.5, "currency": "EUR"}, "num_for_sale": 4}
        )
        assert await lookups.fetch_lowest_price(mock_client, 3, "EUR") == 18.5
        mock_client.get_marketplace_stats.assert_awaited_once_with(3, "EUR")

    @pytest.mark.asyncio
    async def test_no_listings_means_no_price(self, mock_client: AsyncMock) -> None:
        mock_client.get_marketplace_stats.return_value = PriceStats.model_validate(
            {"lowest_price": None, "num_for_sale": None}
        )
        assert await lookups.fetch_lowest_price(mock_client, 3) is None

    @pytest.mark.asyncio
    async def test_marketplace_summary_fetches_both(self, mock_client: AsyncMock) -> None:
        stats = PriceStats(num_for_sale=2)
        listing = MarketplaceListing.model_validate(
            {"id": 1, "price": {"value": 9.0}, "release": {"id": 3}}
        )
        mock_client.get_marketplace_stats.return_value = stats
        mock_client.search_marketplace.return_value = [listing]

        result = await lookups.fetch_marketplace_summary(mock_client, 3, "UK", "GBP")

        assert result == (stats, [listing])
        mock_client.get_marketplace_stats.assert_awaited_once_with(3, "GBP")
        mock_client.search_marketplace.assert_awaited_once_with(3, "UK")
