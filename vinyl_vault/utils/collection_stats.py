"""
Aggregate statistics over a collection.
"""

from collections import Counter
from collections.abc import Sequence

from vinyl_vault.models.records import CollectionItem
from vinyl_vault.models.stats import CollectionStats

TOP_N = 10
FIRST_CHARTED_YEAR = 1950


def _format_bucket(item: CollectionItem) -> str | None:
    formats = item.basic_information.formats
    if not formats:
        return None
    descriptions = formats[0].descriptions
    if "LP" in descriptions:
        return "LP"
    if "Single" in descriptions:
        return "Single"
    if "EP" in descriptions:
        return "EP"
    if "Album" in descriptions:
        return "LP"
    return formats[0].name or "Other"


def compute_stats(items: Sequence[CollectionItem]) -> CollectionStats:
    genres: Counter[str] = Counter()
    styles: Counter[str] = Counter()
    decades: Counter[str] = Counter()
    years: Counter[int] = Counter()
    formats: Counter[str] = Counter()
    labels: Counter[str] = Counter()
    artists: Counter[str] = Counter()

    for item in items:
        info = item.basic_information
        genres.update(info.genres)
        styles.update(info.styles)

        if info.year:
            decades[f"{info.year // 10 * 10}s"] += 1
            if info.year >= FIRST_CHARTED_YEAR:
                years[info.year] += 1
        else:
            decades["Unknown"] += 1

        if bucket := _format_bucket(item):
            formats[bucket] += 1
        if info.labels and info.labels[0].name:
            labels[info.labels[0].name] += 1
        if (artist := info.primary_artist) and artist.name and artist.name != "Various":
            artists[artist.name] += 1

    # Newest decade first, "Unknown" always last
    decade_rows = sorted(
        (row for row in decades.items() if row[0] != "Unknown"), reverse=True
    )
    if decades["Unknown"]:
        decade_rows.append(("Unknown", decades["Unknown"]))

    return CollectionStats(
        total_records=len(items),
        genres=genres.most_common(TOP_N),
        decades=decade_rows,
        years=sorted(years.items()),
        formats=formats.most_common(),
        styles=styles.most_common(TOP_N),
        labels=labels.most_common(TOP_N),
        artists=artists.most_common(TOP_N),
    )
