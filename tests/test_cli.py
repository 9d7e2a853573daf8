"""Smoke tests for the Typer CLI that do not touch the network."""

from typing import Any

import pytest
from typer.testing import CliRunner

from vinyl_vault import __version__
from vinyl_vault.api.client import DiscogsAPIClient
from vinyl_vault.cli import app as app_module
from vinyl_vault.core.enrichers import (
    ARTIST_TYPES_NAMESPACE,
    MASTER_YEARS_NAMESPACE,
    RELEASE_EXTRAS_NAMESPACE,
)
from vinyl_vault.models.config import VaultConfig
from vinyl_vault.storage.cache import JsonFileStore

runner = CliRunner()


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    monkeypatch.delenv("DISCOGS_TOKEN", raising=False)
    monkeypatch.delenv("DISCOGS_USERNAME", raising=False)
    monkeypatch.setattr(app_module, "CONFIG_DIR", tmp_path)
    monkeypatch.setattr(app_module, "CONFIG_FILE", tmp_path / "config.ini")
    return tmp_path


class TestCallbackOptions:
    def test_version(self) -> None:
        result = runner.invoke(app_module.app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_clear_cache(self, config_dir) -> None:
        store = JsonFileStore(config_dir)
        store.save("vinyl-vault-artist-types", {"1": {"type": "band"}})
        store.save("vinyl-vault-master-years", {"2": 1969})

        result = runner.invoke(app_module.app, ["--clear-cache"])

        assert result.exit_code == 0
        assert "2 files removed" in result.output
        assert store.load("vinyl-vault-master-years") == {}

    def test_show_config_without_file(self, config_dir) -> None:
        result = runner.invoke(app_module.app, ["--show-config"])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestCommands:
    def test_init_writes_config(self, config_dir) -> None:
        result = runner.invoke(app_module.app, ["init", "tok123", "digger"])

        assert result.exit_code == 0
        written = (config_dir / "config.ini").read_text(encoding="utf-8")
        assert "username = digger" in written
        assert "token = tok123" in written

    def test_init_asks_before_overwriting(self, config_dir) -> None:
        runner.invoke(app_module.app, ["init", "first", "digger"])

        result = runner.invoke(app_module.app, ["init", "second", "digger"], input="n\n")

        assert result.exit_code != 0
        assert "token = first" in (config_dir / "config.ini").read_text(encoding="utf-8")

    def test_validate_with_environment_credentials(self, config_dir, monkeypatch) -> None:
        monkeypatch.setenv("DISCOGS_TOKEN", "env-token")
        monkeypatch.setenv("DISCOGS_USERNAME", "env-user")

        result = runner.invoke(app_module.app, ["validate"])

        assert result.exit_code == 0
        assert "env-user" in result.output

    def test_validate_without_config_fails(self, config_dir) -> None:
        result = runner.invoke(app_module.app, ["validate"])
        assert result.exit_code == 1

    def test_value_rejects_unknown_sample_size(self, config_dir) -> None:
        result = runner.invoke(app_module.app, ["value", "--sample", "7"])
        assert result.exit_code == 2


class CannedResponse:
    status = 200

    def __init__(self, payload: Any):
        self._payload = payload

    async def json(self, content_type=None):
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeDiscogs:
    """Answers Discogs endpoints from canned payloads and records each path."""

    def __init__(self, routes: dict[str, Any]):
        self.routes = routes
        self.requests: list[str] = []
        self.closed = False

    def request(self, method: str, url: str, params=None):
        path = url.removeprefix(DiscogsAPIClient.BASE_URL)
        self.requests.append(path)
        return CannedResponse(self.routes[path])

    async def close(self):
        self.closed = True


COLLECTION_PATH = "/users/digger/collection/folders/0/releases"


@pytest.fixture
def discogs(config_dir, monkeypatch, make_item) -> list[FakeDiscogs]:
    """Points the CLI at canned Discogs data; returns one session per command run."""
    items = [
        make_item(
            1,
            title="Zulu",
            artist="Aaron Zed",
            artist_id=11,
            year=1990,
            date_added="2024-03-01T00:00:00-08:00",
        ),
        make_item(
            2,
            title="Bloom",
            artist="The Bees",
            artist_id=12,
            year=1985,
            master_id=501,
            date_added="2024-01-01T00:00:00-08:00",
        ),
        make_item(
            3,
            title="Crema",
            artist="Eric Clapton",
            artist_id=13,
            year=1977,
            master_id=502,
            date_added="2024-02-01T00:00:00-08:00",
        ),
    ]
    routes = {
        COLLECTION_PATH: {
            "pagination": {"page": 1, "pages": 1, "per_page": 100, "items": 3},
            "releases": [item.model_dump(mode="json") for item in items],
        },
        "/artists/11": {"realname": "Aaron Zed"},
        "/artists/12": {"members": [{"id": 1, "name": "Bee"}]},
        "/artists/13": {"realname": "Eric Patrick Clapton"},
        "/masters/501": {"year": 1969},
        "/masters/502": {"year": 1970},
        "/releases/1": {"country": "US", "lowest_price": 8.0},
        "/releases/2": {"country": "UK", "lowest_price": 12.5},
        "/releases/3": {"country": "Japan", "lowest_price": 30.0},
    }
    config = VaultConfig(
        token="t", username="digger", config_path=str(config_dir)
    ).model_copy(update={"request_delay": 0.0, "requests_per_second": 1000.0})
    sessions: list[FakeDiscogs] = []

    def make_client(config: VaultConfig) -> DiscogsAPIClient:
        client = DiscogsAPIClient(
            config.token, config.username, requests_per_second=config.requests_per_second
        )
        session = FakeDiscogs(routes)
        client._session = session
        sessions.append(session)
        return client

    monkeypatch.setattr(app_module, "_load_config", lambda: config)
    monkeypatch.setattr(app_module, "_make_client", make_client)
    return sessions


def positions(output: str, *titles: str) -> list[int]:
    return [output.index(title) for title in titles]


class TestCollectionCommand:
    def test_artist_sort_uses_looked_up_artist_types(self, discogs, config_dir) -> None:
        result = runner.invoke(app_module.app, ["collection", "--sort", "artist"])

        assert result.exit_code == 0, result.output
        # "bees", then "clapton, eric", then "zed, aaron"
        bloom, crema, zulu = positions(result.output, "Bloom", "Crema", "Zulu")
        assert bloom < crema < zulu
        assert "1969" in result.output

        lookups = [path for path in discogs[0].requests if path != COLLECTION_PATH]
        assert sorted(lookups) == sorted(set(lookups))
        assert len(lookups) == 8

        store = JsonFileStore(config_dir)
        assert store.load(MASTER_YEARS_NAMESPACE) == {"501": 1969, "502": 1970}
        assert store.load(ARTIST_TYPES_NAMESPACE)["12"] == {"type": "band"}
        assert store.load(RELEASE_EXTRAS_NAMESPACE)["3"] == {
            "country": "Japan",
            "lowest_price": 30.0,
        }

    def test_second_run_is_served_from_the_cache(self, discogs) -> None:
        runner.invoke(app_module.app, ["collection", "--sort", "artist"])

        result = runner.invoke(app_module.app, ["collection", "--sort", "artist"])

        assert result.exit_code == 0, result.output
        assert discogs[1].requests == [COLLECTION_PATH]
        bloom, crema, zulu = positions(result.output, "Bloom", "Crema", "Zulu")
        assert bloom < crema < zulu

    def test_default_order_is_newest_added_first(self, discogs) -> None:
        result = runner.invoke(app_module.app, ["collection", "--no-enrich"])

        assert result.exit_code == 0, result.output
        zulu, crema, bloom = positions(result.output, "Zulu", "Crema", "Bloom")
        assert zulu < crema < bloom
        assert discogs[0].requests == [COLLECTION_PATH]
