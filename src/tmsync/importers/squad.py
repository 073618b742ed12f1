"""Squad importer — one level of players for a team.

Reads ``/clubs/{id}/players`` once and runs the player importer for every
listed player. Each player is isolated: a failure is logged and the loop
moves on.
"""

from __future__ import annotations

import logging
from typing import Any

from tmsync.api.client import TransfermarktClient
from tmsync.db.repository import CatalogRepository
from tmsync.importers.player import PlayerImporter
from tmsync.models.catalog import EntityKind, SquadStatus

logger = logging.getLogger(__name__)


class SquadImporter:
    """Imports and inspects team squads."""

    def __init__(
        self,
        client: TransfermarktClient,
        catalog: CatalogRepository,
        players: PlayerImporter,
    ):
        self.client = client
        self.catalog = catalog
        self.players = players

    def import_team_squad(self, team_external_id: str, team_catalog_id: int) -> list[int]:
        """Import every listed player and attach them to the team.

        Returns the catalog ids of players imported or updated; empty when
        the team has no squad data.
        """
        try:
            squad = self._fetch_squad(team_external_id)
        except Exception as exc:
            logger.exception(f"Error importing team squad: {exc}")
            return []
        if squad is None:
            logger.error(f"Failed to fetch squad data for team ID: {team_external_id}")
            return []

        imported: list[int] = []
        for entry in squad:
            try:
                player_id = self._import_member(entry, team_external_id, team_catalog_id)
            except Exception as exc:
                logger.error(f"Error processing player in squad: {exc}")
                continue
            if player_id:
                imported.append(player_id)

        logger.info(f"Imported {len(imported)} players for team ID: {team_external_id}")
        return imported

    def import_squad_player(self, team_catalog_id: int, player_external_id: str) -> int | None:
        """Import a single listed player and put them in the team."""
        try:
            player_id = self.players.import_player(player_external_id)
            if not player_id:
                logger.error(f"Failed to import player with ID: {player_external_id}")
                return None
            return self._assign_club(player_id, team_catalog_id)
        except Exception as exc:
            logger.exception(f"Error importing player {player_external_id} into squad: {exc}")
            return None

    def squad_status(self, team_catalog_id: int) -> SquadStatus:
        """Listed squad for a catalog team, with what is already imported.

        Raises:
            LookupError: the team is not in the catalog or has no external id.
            ApiError: the squad could not be fetched.
        """
        team = self.catalog.get(team_catalog_id)
        if team is None or team.kind is not EntityKind.TEAM:
            raise LookupError(f"No team with id {team_catalog_id}")
        if not team.external_id:
            raise LookupError(f"Team {team.display_name} does not have a Transfermarkt ID")

        squad = self._fetch_squad(team.external_id)
        if squad is None:
            raise LookupError(f"Failed to fetch squad data for team {team.display_name}")

        imported: dict[str, int] = {}
        for entry in squad:
            if not isinstance(entry, dict) or entry.get("id") is None:
                continue
            player = self.players.get_player_by_external_id(str(entry["id"]))
            if player is not None:
                imported[str(entry["id"])] = player.id
        return SquadStatus(
            team_id=team.id,
            team_name=team.display_name,
            team_external_id=team.external_id,
            players=[e for e in squad if isinstance(e, dict)],
            imported=imported,
        )

    # ── Helpers ─────────────────────────────────────────────────────────

    def _fetch_squad(self, team_external_id: str) -> list[Any] | None:
        data = self.client.get_club_players(team_external_id)
        if not isinstance(data, dict) or not isinstance(data.get("players"), list):
            return None
        return data["players"]

    def _import_member(
        self, entry: Any, team_external_id: str, team_catalog_id: int
    ) -> int | None:
        if not isinstance(entry, dict) or entry.get("id") is None:
            logger.warning(f"Player data missing ID in squad data for team ID: {team_external_id}")
            return None
        player_id = self.players.import_player(str(entry["id"]))
        if not player_id:
            logger.error(f"Failed to import player with Transfermarkt ID: {entry['id']}")
            return None
        return self._assign_club(player_id, team_catalog_id)

    def _assign_club(self, player_id: int, team_catalog_id: int) -> int | None:
        player = self.catalog.get(player_id)
        if player is None:
            logger.error(f"Failed to load player with id: {player_id}")
            return None
        player.current_club_id = team_catalog_id
        self.catalog.save(player)
        logger.info(f"Added player {player.display_name} (id: {player_id}) to team squad")
        return player_id
