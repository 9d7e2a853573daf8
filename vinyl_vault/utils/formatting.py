"""
Helper functions for formatting data into human-readable strings.
"""

import re

from vinyl_vault.models.records import BasicInformation

_DISCOGS_NUMBERING = re.compile(r"\s*\(\d+\)\s*$")

CONDITION_ABBREVIATIONS = {
    "Mint (M)": "M",
    "Near Mint (NM or M-)": "NM",
    "Very Good Plus (VG+)": "VG+",
    "Very Good (VG)": "VG",
    "Good Plus (G+)": "G+",
    "Good (G)": "G",
    "Fair (F)": "F",
    "Poor (P)": "P",
}

COUNTRY_FLAGS = {
    "US": "🇺🇸",
    "USA": "🇺🇸",
    "UK": "🇬🇧",
    "Europe": "🇪🇺",
    "Germany": "🇩🇪",
    "Japan": "🇯🇵",
    "Canada": "🇨🇦",
    "France": "🇫🇷",
    "Italy": "🇮🇹",
    "Spain": "🇪🇸",
    "Netherlands": "🇳🇱",
    "Australia": "🇦🇺",
    "Brazil": "🇧🇷",
    "Sweden": "🇸🇪",
    "Belgium": "🇧🇪",
    "Austria": "🇦🇹",
    "Switzerland": "🇨🇭",
    "Portugal": "🇵🇹",
    "Denmark": "🇩🇰",
    "Norway": "🇳🇴",
    "Finland": "🇫🇮",
    "Ireland": "🇮🇪",
    "New Zealand": "🇳🇿",
    "Mexico": "🇲🇽",
    "Argentina": "🇦🇷",
    "South Korea": "🇰🇷",
    "Greece": "🇬🇷",
    "Poland": "🇵🇱",
    "Czech Republic": "🇨🇿",
    "South Africa": "🇿🇦",
    "India": "🇮🇳",
    "Russia": "🇷🇺",
    "Turkey": "🇹🇷",
    "Yugoslavia": "🇷🇸",
}

COUNTRY_SHORT_NAMES = {
    "United States": "US",
    "United Kingdom": "UK",
    "Germany": "DE",
    "Netherlands": "NL",
    "Australia": "AU",
    "New Zealand": "NZ",
    "South Korea": "KR",
    "South Africa": "ZA",
    "Czech Republic": "CZ",
}


def format_condition(condition: str) -> str:
    """'Near Mint (NM or M-)' -> 'NM'. Unknown grades pass through."""
    return CONDITION_ABBREVIATIONS.get(condition, condition)


def country_flag(country: str) -> str:
    return COUNTRY_FLAGS.get(country, "🌍")


def country_short(country: str) -> str:
    return COUNTRY_SHORT_NAMES.get(country, country)


def format_price(value: float | None, currency: str = "USD") -> str:
    if value is None:
        return "—"
    symbol = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}.get(currency)
    if symbol:
        return f"{symbol}{value:,.2f}"
    return f"{value:,.2f} {currency}"


def artist_names(info: BasicInformation) -> str:
    """Joins credited artists, dropping the Discogs "(2)" numbering."""
    names = [_DISCOGS_NUMBERING.sub("", a.name) for a in info.artists]
    return ", ".join(n for n in names if n) or "Unknown Artist"


def format_label(info: BasicInformation) -> str:
    if not info.labels:
        return ""
    label = info.labels[0]
    return f"{label.name} ({label.catno})" if label.catno else label.name


def format_description(info: BasicInformation) -> str:
    """'LP, Album, Reissue' style summary of the first format."""
    if not info.formats:
        return ""
    fmt = info.formats[0]
    parts = [fmt.name, *fmt.descriptions]
    return ", ".join(p for p in parts if p)
