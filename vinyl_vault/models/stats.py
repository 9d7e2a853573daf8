"""
Result types for the collection value estimate and collection statistics.
"""

from dataclasses import dataclass, field

MID_MULTIPLIER = 1.3
HIGH_MULTIPLIER = 1.8


@dataclass(frozen=True)
class EstimationProgress:
    processed: int
    total: int

    @property
    def done(self) -> bool:
        return self.processed >= self.total


@dataclass(frozen=True)
class ValueEstimate:
    """
    Extrapolated collection value.

    `low` is the average lowest marketplace price of the priced sample items
    multiplied by the collection size; `mid` and `high` are fixed heuristic
    multiples of it.
    """

    low: float
    sample_size: int
    priced_count: int
    collection_size: int

    @property
    def mid(self) -> float:
        return self.low * MID_MULTIPLIER

    @property
    def high(self) -> float:
        return self.low * HIGH_MULTIPLIER

    @property
    def average_price(self) -> float:
        return self.low / self.collection_size if self.collection_size else 0.0


@dataclass
class CollectionStats:
    total_records: int = 0
    genres: list[tuple[str, int]] = field(default_factory=list)
    decades: list[tuple[str, int]] = field(default_factory=list)
    years: list[tuple[int, int]] = field(default_factory=list)
    formats: list[tuple[str, int]] = field(default_factory=list)
    styles: list[tuple[str, int]] = field(default_factory=list)
    labels: list[tuple[str, int]] = field(default_factory=list)
    artists: list[tuple[str, int]] = field(default_factory=list)
