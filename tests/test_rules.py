"""Tests for payload extraction rules and market value parsing."""

import pytest

from tmsync.importers.rules import (
    COMPETITION_COUNTRY_RULES,
    COMPETITION_TYPE_RULES,
    PLAYER_NATIONALITY_RULES,
    SEASON_RULES,
    TEAM_COMPETITION_RULES,
    TEAM_COUNTRY_RULES,
    TEAM_MARKET_VALUE_RULES,
    dig,
    first_value,
    matching_rule,
    parse_market_value,
)


class TestParseMarketValue:
    @pytest.mark.parametrize("raw,expected", [
        ("€750.00m", 750_000_000),
        ("€57.50m", 57_500_000),
        ("€1.2b", 1_200_000_000),
        ("500k", 500_000),
        ("€500Th.", 500),
        ("1,5m", 1_500_000),
        ("1234", 1234),
        ("n/a", 0),
        ("", 0),
    ])
    def test_examples(self, raw, expected):
        assert parse_market_value(raw) == expected

    def test_uppercase_suffix(self):
        assert parse_market_value("€2M") == 2_000_000

    def test_only_first_numeric_prefix_counts(self):
        assert parse_market_value("1.2.3m") == 1_200_000


class TestDig:
    def test_nested_path(self):
        assert dig({"a": {"b": {"c": 1}}}, "a", "b", "c") == 1

    def test_missing_step(self):
        assert dig({"a": {}}, "a", "b", "c") is None

    def test_non_mapping_step(self):
        assert dig({"a": "text"}, "a", "b") is None


class TestTeamRules:
    def test_country_prefers_country_name(self):
        data = {"country": {"name": "Spain"}, "league": {"countryName": "Portugal"}}
        assert first_value(data, TEAM_COUNTRY_RULES) == "Spain"

    def test_country_as_plain_string(self):
        assert first_value({"country": "Italy"}, TEAM_COUNTRY_RULES) == "Italy"

    def test_country_from_league(self):
        data = {"country": {"id": 3}, "league": {"countryName": "United States"}}
        assert first_value(data, TEAM_COUNTRY_RULES) == "United States"
        assert matching_rule(data, TEAM_COUNTRY_RULES) == "league.countryName"

    def test_market_value_order(self):
        data = {"currentMarketValue": "€10m", "value": "€1m"}
        assert first_value(data, TEAM_MARKET_VALUE_RULES) == "€10m"
        assert first_value({"value": 5}, TEAM_MARKET_VALUE_RULES) == 5

    def test_competition_reference(self):
        assert first_value({"league": {"id": "ES1"}}, TEAM_COMPETITION_RULES) == "ES1"
        assert first_value({"competition": {"id": "CL"}, "league": {"id": "ES1"}},
                           TEAM_COMPETITION_RULES) == "CL"
        assert first_value({}, TEAM_COMPETITION_RULES) is None


class TestCompetitionRules:
    def test_country_name_fallback(self):
        assert first_value({"countryName": "Germany"}, COMPETITION_COUNTRY_RULES) == "Germany"

    def test_season_order(self):
        assert first_value({"seasonId": "2024", "currentSeason": "2023"}, SEASON_RULES) == "2024"

    def test_type_defaults_to_league(self):
        assert first_value({}, COMPETITION_TYPE_RULES) == "League"
        assert matching_rule({}, COMPETITION_TYPE_RULES) == "default='League'"

    def test_type_from_category(self):
        assert first_value({"category": "Cup"}, COMPETITION_TYPE_RULES) == "Cup"


class TestPlayerRules:
    def test_first_citizenship(self):
        assert first_value({"citizenship": ["Argentina", "Spain"]}, PLAYER_NATIONALITY_RULES) == "Argentina"

    def test_empty_citizenship(self):
        assert first_value({"citizenship": []}, PLAYER_NATIONALITY_RULES) is None
