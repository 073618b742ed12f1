"""Field extraction rules for Transfermarkt payloads.

The API spells the same field differently depending on the endpoint, so
each catalog field gets an ordered tuple of named rules. Rules are pure
functions from the raw payload to a value or ``None``; the first rule that
yields a value wins.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ExtractionRule:
    """One way of reading a field out of a payload."""
    name: str
    extract: Callable[[Mapping[str, Any]], Any]

    def __call__(self, data: Mapping[str, Any]) -> Any:
        return self.extract(data)


def dig(data: Any, *path: str) -> Any:
    """Walk nested mappings, returning None as soon as a step is missing."""
    current = data
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def path_rule(*path: str) -> ExtractionRule:
    return ExtractionRule(".".join(path), lambda data: dig(data, *path))


def string_rule(*path: str) -> ExtractionRule:
    """Like ``path_rule`` but only accepts plain strings."""
    def extract(data: Mapping[str, Any]) -> Any:
        value = dig(data, *path)
        return value if isinstance(value, str) else None
    return ExtractionRule(".".join(path) + ":str", extract)


def constant_rule(value: Any) -> ExtractionRule:
    return ExtractionRule(f"default={value!r}", lambda _data: value)


def first_value(data: Mapping[str, Any], rules: Sequence[ExtractionRule]) -> Any:
    """Apply ``rules`` in order and return the first non-None result."""
    for rule in rules:
        value = rule(data)
        if value is not None:
            return value
    return None


def matching_rule(data: Mapping[str, Any], rules: Sequence[ExtractionRule]) -> str | None:
    """Name of the rule ``first_value`` would use. Handy for debug logs."""
    for rule in rules:
        if rule(data) is not None:
            return rule.name
    return None


# ── Field rule sets ────────────────────────────────────────────────────

TEAM_COUNTRY_RULES = (
    path_rule("country", "name"),
    string_rule("country"),
    path_rule("league", "countryName"),
)

COMPETITION_COUNTRY_RULES = (
    path_rule("country", "name"),
    string_rule("country"),
    path_rule("countryName"),
)

TEAM_MARKET_VALUE_RULES = (
    path_rule("marketValue"),
    path_rule("currentMarketValue"),
    path_rule("value"),
)

TEAM_COMPETITION_RULES = (
    path_rule("competition", "id"),
    path_rule("league", "id"),
)

SEASON_RULES = (
    path_rule("season"),
    path_rule("seasonId"),
    path_rule("currentSeason"),
)

DEFAULT_COMPETITION_TYPE = "League"

COMPETITION_TYPE_RULES = (
    path_rule("type"),
    path_rule("competitionType"),
    path_rule("category"),
    constant_rule(DEFAULT_COMPETITION_TYPE),
)

PLAYER_POSITION_RULES = (
    path_rule("position", "main"),
)


def first_citizenship(data: Mapping[str, Any]) -> Any:
    citizenship = data.get("citizenship")
    if isinstance(citizenship, list) and citizenship:
        return citizenship[0]
    return None


PLAYER_NATIONALITY_RULES = (
    ExtractionRule("citizenship[0]", first_citizenship),
)


# ── Market values ──────────────────────────────────────────────────────

_MULTIPLIERS = (("k", 1_000), ("m", 1_000_000), ("b", 1_000_000_000))
_NUMBER_PREFIX = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)")


def parse_market_value(value: str) -> int:
    """Convert a display value such as "€750.00m" into whole currency units.

    Examples:
        "€750.00m" → 750_000_000
        "€1.2b"    → 1_200_000_000
        "500k"     → 500_000
        "n/a"      → 0
    """
    cleaned = re.sub(r"[^\d.,kmb]", "", value, flags=re.IGNORECASE).strip().lower()

    multiplier = 1
    for suffix, factor in _MULTIPLIERS:
        if suffix in cleaned:
            multiplier = factor
            cleaned = cleaned.replace(suffix, "")
            break
    cleaned = cleaned.replace(",", ".")

    # Leading numeric prefix only, so "1.2.3" reads as 1.2 and "" as 0.
    match = _NUMBER_PREFIX.match(cleaned)
    if not match:
        return 0
    return int(float(match.group(0)) * multiplier)
