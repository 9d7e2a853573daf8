"""
Pydantic models for the Discogs payloads the application works with.
Unknown fields are ignored so new upstream keys never break parsing.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DiscogsModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Artist(DiscogsModel):
    id: int = 0
    name: str = ""


class Label(DiscogsModel):
    id: int = 0
    name: str = ""
    catno: str = ""


class Format(DiscogsModel):
    name: str = ""
    qty: str = ""
    text: str | None = None
    descriptions: list[str] = Field(default_factory=list)


class BasicInformation(DiscogsModel):
    """The release summary embedded in collection and wantlist entries."""

    id: int
    master_id: int = 0
    title: str = ""
    year: int = 0
    thumb: str = ""
    cover_image: str = ""
    artists: list[Artist] = Field(default_factory=list)
    formats: list[Format] = Field(default_factory=list)
    labels: list[Label] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    styles: list[str] = Field(default_factory=list)

    @field_validator("master_id", "year", mode="before")
    @classmethod
    def none_to_zero(cls, v):
        return v or 0

    @field_validator("genres", "styles", "artists", "formats", "labels", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or []

    @property
    def primary_artist(self) -> Artist | None:
        return self.artists[0] if self.artists else None


class CollectionNote(DiscogsModel):
    field_id: int
    value: str = ""


class _ListEntry(DiscogsModel):
    id: int
    rating: int = 0
    date_added: str = ""
    basic_information: BasicInformation

    @property
    def added_at(self) -> datetime | None:
        """Parses the ISO-8601 `date_added` timestamp, or None if unparseable."""
        try:
            return datetime.fromisoformat(self.date_added)
        except ValueError:
            return None


class CollectionItem(_ListEntry):
    instance_id: int = 0
    folder_id: int = 0
    notes: list[CollectionNote] = Field(default_factory=list)

    @field_validator("notes", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or []


class WantlistItem(_ListEntry):
    notes: str | None = None


class Pagination(DiscogsModel):
    page: int = 1
    pages: int = 1
    per_page: int = 50
    items: int = 0


class CollectionPage(DiscogsModel):
    items: list[CollectionItem] = Field(default_factory=list, alias="releases")
    pagination: Pagination = Field(default_factory=Pagination)


class WantlistPage(DiscogsModel):
    items: list[WantlistItem] = Field(default_factory=list, alias="wants")
    pagination: Pagination = Field(default_factory=Pagination)


class SearchResult(DiscogsModel):
    """A row from /database/search. Discogs sends `year` as a string here."""

    id: int
    type: str = "release"
    title: str = ""
    year: str | None = None
    country: str | None = None
    master_id: int | None = None
    format: list[str] = Field(default_factory=list)
    label: list[str] = Field(default_factory=list)
    genre: list[str] = Field(default_factory=list)
    thumb: str = ""

    @field_validator("year", mode="before")
    @classmethod
    def year_to_str(cls, v):
        return str(v) if v else None


class Price(DiscogsModel):
    value: float
    currency: str = "USD"


class Seller(DiscogsModel):
    username: str = ""
    rating: float | None = None

    @field_validator("rating", mode="before")
    @classmethod
    def rating_from_stats(cls, v):
        # Listings report the seller rating as a percentage string
        return float(v) if v not in (None, "") else None


class ListingRelease(DiscogsModel):
    id: int
    description: str = ""
    thumbnail: str = ""


class MarketplaceListing(DiscogsModel):
    id: int
    status: str = ""
    price: Price
    condition: str = ""
    sleeve_condition: str = ""
    ships_from: str = ""
    seller: Seller = Field(default_factory=Seller)
    release: ListingRelease


class PriceStats(DiscogsModel):
    lowest_price: Price | None = None
    num_for_sale: int = 0
    blocked_from_sale: bool = False

    @field_validator("num_for_sale", mode="before")
    @classmethod
    def none_to_zero(cls, v):
        return v or 0
