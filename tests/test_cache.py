"""Tests for the JSON file store and the write-once enrichment cache."""

import json

from vinyl_vault.core.enrichers import ARTIST_CODEC, MASTER_YEAR_CODEC
from vinyl_vault.models.enrichment import ArtistType, Resolution
from vinyl_vault.storage.cache import EnrichmentCache, JsonFileStore, MemoryStore


class TestJsonFileStore:
    def test_missing_namespace_loads_empty(self, tmp_path) -> None:
        assert JsonFileStore(tmp_path).load("nothing-here") == {}

    def test_save_then_load(self, tmp_path) -> None:
        store = JsonFileStore(tmp_path)

        assert store.save("years", {"1": 1969, "2": 0}) is True

        assert store.load("years") == {"1": 1969, "2": 0}
        assert (tmp_path / "cache" / "years.json").is_file()
        assert not (tmp_path / "cache" / "years.json.tmp").exists()

    def test_corrupt_file_loads_empty(self, tmp_path) -> None:
        cache_dir = tmp_path / "cache"
        cache_dir.mkdir()
        (cache_dir / "years.json").write_text("{not json", encoding="utf-8")

        assert JsonFileStore(tmp_path).load("years") == {}

    def test_non_object_loads_empty(self, tmp_path) -> None:
        cache_dir = tmp_path / "cache"
        cache_dir.mkdir()
        (cache_dir / "years.json").write_text(json.dumps([1, 2, 3]), encoding="utf-8")

        assert JsonFileStore(tmp_path).load("years") == {}

    def test_unserializable_data_is_not_saved(self, tmp_path) -> None:
        store = JsonFileStore(tmp_path)
        assert store.save("years", {"1": object()}) is False
        assert store.load("years") == {}

    def test_clear_removes_one_or_all_namespaces(self, tmp_path) -> None:
        store = JsonFileStore(tmp_path)
        store.save("a", {"1": 1})
        store.save("b", {"2": 2})

        assert store.clear("a") == 1
        assert store.load("a") == {}
        assert store.load("b") == {"2": 2}
        assert store.clear() == 1
        assert store.clear() == 0

    def test_clear_without_cache_dir(self, tmp_path) -> None:
        assert JsonFileStore(tmp_path / "never-created").clear() == 0


class TestEnrichmentCache:
    def test_loads_lazily_and_skips_bad_keys(self) -> None:
        store = MemoryStore({"years": {"1": 1969, "abc": 1970, "2": 0}})
        cache = EnrichmentCache(store, "years", MASTER_YEAR_CODEC)

        assert len(cache) == 2
        assert cache.get(1) == Resolution(1969)
        assert cache.get(2).is_empty
        assert cache.get(3) is None
        assert 1 in cache
        assert sorted(cache) == [1, 2]

    def test_put_is_write_once(self) -> None:
        cache = EnrichmentCache(MemoryStore(), "years", MASTER_YEAR_CODEC)

        assert cache.put(1, Resolution(1969)) is True
        assert cache.put(1, Resolution(2001)) is False
        assert cache.get(1) == Resolution(1969)

    def test_persist_writes_encoded_entries(self) -> None:
        store = MemoryStore()
        cache = EnrichmentCache(store, "years", MASTER_YEAR_CODEC)
        cache.put(5, Resolution(1977))
        cache.put(6, Resolution.empty())

        assert cache.persist() is True
        assert store.namespaces["years"] == {"5": 1977, "6": 0}
        assert store.save_count == 1

    def test_survives_reload_through_a_file_store(self, tmp_path) -> None:
        first = EnrichmentCache(JsonFileStore(tmp_path), "artists", ARTIST_CODEC)
        first.put(9, ARTIST_CODEC.decode({"type": "person", "realname": "X"}))
        first.persist()

        second = EnrichmentCache(JsonFileStore(tmp_path), "artists", ARTIST_CODEC)
        assert second.get(9).value.type is ArtistType.PERSON
        assert second.get(9).value.realname == "X"

    def test_legacy_string_entries_are_read(self) -> None:
        store = MemoryStore({"artists": {"4": "band", "5": "person"}})
        cache = EnrichmentCache(store, "artists", ARTIST_CODEC)

        assert cache.get(4).value.type is ArtistType.BAND
        assert cache.get(5).value.type is ArtistType.PERSON
