"""
Derived per-entity attributes produced by the enrichment fetchers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

V = TypeVar("V")


@dataclass(frozen=True)
class Resolution(Generic[V]):
    """
    Outcome of looking an entity up.

    A key missing from an enrichment map is unresolved. A present key holds a
    Resolution whose `value` is either the derived attribute or None when the
    lookup succeeded but upstream had nothing to offer (e.g. a master release
    without a year).
    """

    value: V | None = None

    @property
    def is_empty(self) -> bool:
        return self.value is None

    @classmethod
    def empty(cls) -> "Resolution[V]":
        return cls(None)


class ArtistType(str, Enum):
    PERSON = "person"
    BAND = "band"


class ArtistProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ArtistType = ArtistType.BAND
    realname: str | None = None


class ReleaseExtras(BaseModel):
    model_config = ConfigDict(frozen=True)

    country: str | None = None
    lowest_price: float | None = None
