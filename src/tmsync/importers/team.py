"""Team importer.

Maps ``/clubs/{id}/profile`` onto a Team entity. Competitions referenced by
a club are linked only when already in the catalog; they are never
imported from here. The squad is imported afterwards when requested.
"""

from __future__ import annotations

import logging
from typing import Any

from tmsync.api.client import TransfermarktClient
from tmsync.db.assets import AssetStore
from tmsync.db.repository import CatalogRepository, LabelRepository
from tmsync.importers.base import BaseImporter
from tmsync.importers.rules import (
    TEAM_COMPETITION_RULES,
    TEAM_COUNTRY_RULES,
    TEAM_MARKET_VALUE_RULES,
    dig,
    first_value,
    matching_rule,
    parse_market_value,
)
from tmsync.importers.squad import SquadImporter
from tmsync.models.catalog import CatalogEntity, EntityKind, Vocabulary

logger = logging.getLogger(__name__)

LOGO_DIRECTORY = "teams"


class TeamImporter(BaseImporter):
    kind = EntityKind.TEAM

    def __init__(
        self,
        client: TransfermarktClient,
        catalog: CatalogRepository,
        labels: LabelRepository | None = None,
        assets: AssetStore | None = None,
        squads: SquadImporter | None = None,
    ):
        super().__init__(client, catalog, labels, assets)
        self.squads = squads

    def get_team_by_external_id(self, external_id: str) -> CatalogEntity | None:
        return self.get_by_external_id(external_id)

    def import_team(
        self,
        external_id: str,
        update_if_exists: bool = True,
        import_squad: bool = True,
    ) -> int | None:
        """Import or refresh one team. Returns the catalog id, None on failure."""
        external_id = str(external_id)
        try:
            existing = self.get_by_external_id(external_id)
            if existing is not None and not update_if_exists:
                logger.info(f"Team already exists: {existing.display_name} (ID: {external_id})")
                return existing.id

            data = self.client.get_club_profile(external_id)
            if not isinstance(data, dict):
                raise ValueError(f"Unexpected team payload for {external_id}: {type(data).__name__}")
            logger.debug(f"Team data received from API: {data}")

            logo_uri = None
            if data.get("image"):
                logo_uri = self._download_image(
                    data["image"], LOGO_DIRECTORY, f"team_{external_id}.jpg"
                )

            team = self._start_entity(existing, external_id, data.get("name") or "")
            self._map_fields(team, data)
            if logo_uri:
                team.attributes["logo_ref"] = logo_uri

            saved_id = self.catalog.save(team)
            logger.info(f"Team saved successfully with id: {saved_id}")

            if import_squad:
                if self.squads is None:
                    logger.warning(f"Squad import requested for team {external_id} but no squad importer set")
                elif self.catalog.get(saved_id) is None:
                    logger.error(f"Team could not be verified in catalog after save: {saved_id}")
                else:
                    logger.info(f"Importing squad for team: {team.display_name} (ID: {external_id})")
                    self.squads.import_team_squad(external_id, saved_id)

            return saved_id
        except Exception as exc:
            logger.exception(f"Error importing team {external_id}: {exc}")
            return None

    # ── Mapping ─────────────────────────────────────────────────────────

    def _map_fields(self, team: CatalogEntity, data: dict[str, Any]) -> None:
        attrs = team.attributes

        country = first_value(data, TEAM_COUNTRY_RULES)
        if country:
            logger.debug(f"Country for {team.display_name} read from {matching_rule(data, TEAM_COUNTRY_RULES)}")
            label = self._label(Vocabulary.COUNTRY, country)
            if label:
                attrs["country_label"] = label

        market_value = first_value(data, TEAM_MARKET_VALUE_RULES)
        if market_value is not None:
            if isinstance(market_value, str):
                market_value = parse_market_value(market_value)
            attrs["market_value"] = market_value

        competition_id = first_value(data, TEAM_COMPETITION_RULES)
        if competition_id:
            self._link_competition(team, data, str(competition_id))

    def _link_competition(
        self, team: CatalogEntity, data: dict[str, Any], competition_id: str
    ) -> None:
        competition = self.catalog.find_by_external_id(EntityKind.COMPETITION, competition_id)
        if competition is not None:
            team.league_id = competition.id
            return
        name = (
            dig(data, "competition", "name")
            or dig(data, "league", "name")
            or "Unknown Competition"
        )
        logger.info(
            f"Team {team.display_name} references competition {competition_id} "
            f"({name}) which is not imported"
        )
