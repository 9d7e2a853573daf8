"""Tests for ConfigManager and the VaultConfig model."""

import pytest

from vinyl_vault.exceptions import ConfigurationError
from vinyl_vault.storage.config_manager import ConfigManager


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    monkeypatch.delenv("DISCOGS_TOKEN", raising=False)
    monkeypatch.delenv("DISCOGS_USERNAME", raising=False)


@pytest.fixture
def config_file(tmp_path):
    return tmp_path / "vinyl-vault" / "config.ini"


class TestConfigManager:
    def test_save_then_load_fills_defaults(self, config_file) -> None:
        manager = ConfigManager(config_file)
        manager.save_new_config({"token": "abc123", "username": "digger"})

        config = ConfigManager(config_file).load_config()

        assert config.token == "abc123"
        assert config.username == "digger"
        assert config.request_delay == 1.0
        assert config.max_pages == 10
        assert config.currency == "USD"
        assert config.default_sort == "added"
        assert config.config_path == str(config_file.parent)

    def test_default_sort_is_newest_added_first(self, config_file) -> None:
        config_file.parent.mkdir(parents=True)
        config_file.write_text("[DEFAULT]\ntoken = t\nusername = u\n", encoding="utf-8")

        assert ConfigManager(config_file).get_display_dict()["default_sort"] == "added"
        assert ConfigManager(config_file).load_config().default_sort == "added"

    def test_missing_file_is_an_error(self, config_file) -> None:
        with pytest.raises(ConfigurationError, match="init"):
            ConfigManager(config_file).load_config()

    def test_environment_alone_is_enough(self, config_file, monkeypatch) -> None:
        monkeypatch.setenv("DISCOGS_TOKEN", "from-env")
        monkeypatch.setenv("DISCOGS_USERNAME", "env-user")

        config = ConfigManager(config_file).load_config()

        assert (config.token, config.username) == ("from-env", "env-user")
        assert not config_file.exists()

    def test_environment_overrides_file(self, config_file, monkeypatch) -> None:
        ConfigManager(config_file).save_new_config({"token": "file", "username": "me"})
        monkeypatch.setenv("DISCOGS_TOKEN", "env")

        config = ConfigManager(config_file).load_config()

        assert config.token == "env"
        assert config.username == "me"

    def test_cli_options_override_everything(self, config_file) -> None:
        ConfigManager(config_file).save_new_config({"token": "t", "username": "u"})

        config = ConfigManager(config_file).load_config({"default_sort": "title"})

        assert config.default_sort == "title"

    def test_missing_credentials_fail_validation(self, config_file) -> None:
        ConfigManager(config_file).save_new_config({"username": "u"})

        with pytest.raises(ConfigurationError, match="credentials"):
            ConfigManager(config_file).load_config()

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("request_delay", "0.5"),
            ("requests_per_second", "2"),
            ("per_page", "500"),
            ("max_pages", "0"),
            ("default_sort", "colour"),
        ],
    )
    def test_out_of_range_values_are_rejected(self, config_file, key, value) -> None:
        ConfigManager(config_file).save_new_config(
            {"token": "t", "username": "u", key: value}
        )

        with pytest.raises(ConfigurationError):
            ConfigManager(config_file).load_config()

    def test_migration_adds_missing_keys(self, config_file) -> None:
        config_file.parent.mkdir(parents=True)
        config_file.write_text("[DEFAULT]\ntoken = t\nusername = u\n", encoding="utf-8")

        config = ConfigManager(config_file).load_config()

        written = config_file.read_text(encoding="utf-8")
        assert "max_pages = 10" in written
        assert "marketplace_country = US" in written
        assert config.marketplace_country == "US"

    def test_currency_is_uppercased(self, config_file) -> None:
        ConfigManager(config_file).save_new_config(
            {"token": "t", "username": "u", "currency": "eur"}
        )
        assert ConfigManager(config_file).load_config().currency == "EUR"

    def test_display_dict_reads_file(self, config_file) -> None:
        ConfigManager(config_file).save_new_config({"token": "t", "username": "u"})

        shown = ConfigManager(config_file).get_display_dict()

        assert shown["username"] == "u"
        assert shown["per_page"] == 100
