"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

SORT_CHOICES = ("added", "artist", "artist-reverse", "title", "year", "original-year")


class VaultConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Authentication & API
    token: str
    username: str
    user_agent: str = "VinylVault/1.0"

    # Pacing
    request_delay: float = 1.0
    requests_per_second: float = 1.0

    # Collection loading
    per_page: int = 100
    max_pages: int = 10
    default_sort: str = "added"

    # Marketplace
    currency: str = "USD"
    marketplace_country: str = "US"

    # Internal fields not loaded from INI file
    config_path: str = Field(..., repr=False)

    @field_validator("token", "username")
    @classmethod
    def validate_required(cls, v: str) -> str:
        if not v:
            raise ValueError(
                "Discogs credentials are missing. Run 'vinyl-vault init' or set "
                "DISCOGS_TOKEN and DISCOGS_USERNAME."
            )
        return v

    @field_validator("request_delay")
    @classmethod
    def validate_delay(cls, v: float) -> float:
        """Keeps background lookups under the 60 requests/minute ceiling."""
        if v < 1.0 or v > 60.0:
            raise ValueError("Request delay must be between 1 and 60 seconds.")
        return v

    @field_validator("requests_per_second")
    @classmethod
    def validate_rate(cls, v: float) -> float:
        if v <= 0 or v > 1.0:
            raise ValueError("Requests per second must be greater than 0 and at most 1.")
        return v

    @field_validator("per_page")
    @classmethod
    def validate_per_page(cls, v: int) -> int:
        if v < 1 or v > 100:
            raise ValueError("Discogs pages hold between 1 and 100 items.")
        return v

    @field_validator("max_pages")
    @classmethod
    def validate_max_pages(cls, v: int) -> int:
        if v < 1 or v > 50:
            raise ValueError("Max pages must be between 1 and 50.")
        return v

    @field_validator("default_sort")
    @classmethod
    def validate_sort(cls, v: str) -> str:
        if v not in SORT_CHOICES:
            raise ValueError(f"Default sort must be one of: {', '.join(SORT_CHOICES)}.")
        return v

    @field_validator("currency", "marketplace_country")
    @classmethod
    def validate_upper(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        return {key for key in cls.model_fields if key != "config_path"}
