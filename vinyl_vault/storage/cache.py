"""
Namespaced, persistent key-value storage for enrichment results.

Each enrichment kind owns one namespace, stored as a single JSON object
`{"<entity id>": <encoded value>}`. Reads never fail (missing or corrupt data
reads as empty) and writes are best-effort.
"""

import json
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, Protocol, TypeVar

from vinyl_vault.models.enrichment import Resolution

log = logging.getLogger(__name__)

V = TypeVar("V")


class KeyValueStore(Protocol):
    """Whole-map persistence, one map per namespace."""

    def load(self, namespace: str) -> dict[str, Any]: ...

    def save(self, namespace: str, data: dict[str, Any]) -> bool: ...


class JsonFileStore:
    """
    Stores each namespace as `<namespace>.json` inside the cache directory.
    """

    def __init__(self, cache_dir_path: Path):
        self.cache_dir = cache_dir_path / "cache"

    def _get_cache_path(self, namespace: str) -> Path:
        return self.cache_dir / f"{namespace}.json"

    def load(self, namespace: str) -> dict[str, Any]:
        cache_path = self._get_cache_path(namespace)
        if not cache_path.is_file():
            return {}

        try:
            with open(cache_path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            log.debug(f"Cache read failed for '{namespace}', starting empty: {e}")
            return {}

        if not isinstance(data, dict):
            log.debug(f"Cache '{namespace}' does not hold an object, starting empty.")
            return {}
        return data

    def save(self, namespace: str, data: dict[str, Any]) -> bool:
        cache_path = self._get_cache_path(namespace)
        try:
            serialized = json.dumps(data)
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            tmp_path = cache_path.with_suffix(".json.tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(serialized)
            tmp_path.replace(cache_path)
            return True
        except (TypeError, ValueError, OSError) as e:
            log.warning(f"Cache write failed for '{namespace}': {e}")
            return False

    def clear(self, namespace: str | None = None) -> int:
        """Removes one namespace, or all of them. Returns the number of files removed."""
        if not self.cache_dir.is_dir():
            return 0
        pattern = f"{namespace}.json" if namespace else "*.json"
        removed = 0
        for cache_file in self.cache_dir.glob(pattern):
            try:
                cache_file.unlink()
                removed += 1
            except OSError as e:
                log.error(f"Failed to remove cache file {cache_file.name}: {e}")
        return removed


class MemoryStore:
    """A KeyValueStore that lives only as long as the process."""

    def __init__(self, initial: dict[str, dict[str, Any]] | None = None):
        self.namespaces: dict[str, dict[str, Any]] = {
            name: dict(data) for name, data in (initial or {}).items()
        }
        self.save_count = 0

    def load(self, namespace: str) -> dict[str, Any]:
        return dict(self.namespaces.get(namespace, {}))

    def save(self, namespace: str, data: dict[str, Any]) -> bool:
        self.namespaces[namespace] = dict(data)
        self.save_count += 1
        return True


@dataclass(frozen=True)
class Codec(Generic[V]):
    """Translates a Resolution to and from its persisted JSON form."""

    encode: Callable[[Resolution[V]], Any]
    decode: Callable[[Any], Resolution[V]]


class EnrichmentCache(Generic[V]):
    """
    In-memory view of one enrichment namespace, loaded lazily from a store.

    Keys are entity IDs. Entries are write-once: `put` ignores keys that are
    already resolved, so a later run can never replace an earlier answer.
    """

    def __init__(self, store: KeyValueStore, namespace: str, codec: Codec[V]):
        self.store = store
        self.namespace = namespace
        self.codec = codec
        self._entries: dict[int, Resolution[V]] | None = None

    def _load(self) -> dict[int, Resolution[V]]:
        if self._entries is None:
            self._entries = {}
            for raw_key, raw_value in self.store.load(self.namespace).items():
                try:
                    entity_id = int(raw_key)
                    self._entries[entity_id] = self.codec.decode(raw_value)
                except (TypeError, ValueError) as e:
                    log.debug(
                        f"Skipping unreadable cache entry {raw_key!r} in "
                        f"'{self.namespace}': {e}"
                    )
        return self._entries

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._load()

    def __len__(self) -> int:
        return len(self._load())

    def __iter__(self) -> Iterator[int]:
        return iter(self._load())

    def get(self, entity_id: int) -> Resolution[V] | None:
        return self._load().get(entity_id)

    def put(self, entity_id: int, resolution: Resolution[V]) -> bool:
        """Records a resolution. Returns False if the key was already resolved."""
        entries = self._load()
        if entity_id in entries:
            return False
        entries[entity_id] = resolution
        return True

    def persist(self) -> bool:
        entries = self._load()
        data = {str(key): self.codec.encode(value) for key, value in entries.items()}
        return self.store.save(self.namespace, data)
