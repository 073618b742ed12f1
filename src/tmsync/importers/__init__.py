"""Entity importers for Transfermarkt data."""

from tmsync.importers.base import BaseImporter
from tmsync.importers.competition import CompetitionImporter
from tmsync.importers.player import PlayerImporter
from tmsync.importers.rules import parse_market_value
from tmsync.importers.squad import SquadImporter
from tmsync.importers.team import TeamImporter

__all__ = [
    "BaseImporter",
    "CompetitionImporter",
    "PlayerImporter",
    "SquadImporter",
    "TeamImporter",
    "parse_market_value",
]
