"""Tests for collection statistics aggregation."""

from vinyl_vault.utils.collection_stats import compute_stats


class TestComputeStats:
    def test_empty_collection(self) -> None:
        stats = compute_stats([])
        assert stats.total_records == 0
        assert stats.genres == []
        assert stats.decades == []

    def test_decades_newest_first_unknown_last(self, make_item) -> None:
        items = [
            make_item(1, year=1968),
            make_item(2, year=0),
            make_item(3, year=1994),
            make_item(4, year=1961),
        ]
        stats = compute_stats(items)
        assert stats.decades == [("1990s", 1), ("1960s", 2), ("Unknown", 1)]

    def test_years_start_at_1950_ascending(self, make_item) -> None:
        items = [make_item(1, year=1949), make_item(2, year=1977), make_item(3, year=1955)]
        assert compute_stats(items).years == [(1955, 1), (1977, 1)]

    def test_format_buckets(self, make_item) -> None:
        items = [
            make_item(1, formats=[{"name": "Vinyl", "descriptions": ["LP", "Album"]}]),
            make_item(2, formats=[{"name": "Vinyl", "descriptions": ['7"', "Single"]}]),
            make_item(3, formats=[{"name": "Vinyl", "descriptions": ["EP"]}]),
            make_item(4, formats=[{"name": "Vinyl", "descriptions": ["Album"]}]),
            make_item(5, formats=[{"name": "Cassette", "descriptions": []}]),
            make_item(6, formats=[]),
        ]
        formats = dict(compute_stats(items).formats)
        assert formats == {"LP": 2, "Single": 1, "EP": 1, "Cassette": 1}

    def test_top_artists_exclude_various(self, make_item) -> None:
        items = [
            make_item(1, artist="Various"),
            make_item(2, artist="Can"),
            make_item(3, artist="Can"),
            make_item(4, artist="Faust"),
        ]
        assert compute_stats(items).artists == [("Can", 2), ("Faust", 1)]

    def test_top_lists_are_capped_at_ten(self, make_item) -> None:
        items = [make_item(i, genres=[f"Genre {i}"], styles=[f"Style {i}"]) for i in range(1, 15)]
        stats = compute_stats(items)
        assert len(stats.genres) == 10
        assert len(stats.styles) == 10
        assert stats.total_records == 14

    def test_labels_count_first_label_only(self, make_item) -> None:
        items = [
            make_item(1, labels=[{"name": "Blue Note"}, {"name": "Liberty"}]),
            make_item(2, labels=[{"name": "Blue Note"}]),
            make_item(3, labels=[]),
        ]
        assert compute_stats(items).labels == [("Blue Note", 2)]
