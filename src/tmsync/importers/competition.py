"""Competition importer.

Maps ``/competitions/{id}`` (or its clubs endpoint as a fallback) onto a
Competition entity. Standings are stored as the raw club list; teams are
never created from them.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from tmsync.importers.base import BaseImporter
from tmsync.importers.rules import (
    COMPETITION_COUNTRY_RULES,
    COMPETITION_TYPE_RULES,
    SEASON_RULES,
    first_value,
    matching_rule,
)
from tmsync.models.catalog import CatalogEntity, EntityKind, Vocabulary

logger = logging.getLogger(__name__)


def competition_display_name(data: dict[str, Any], external_id: str) -> str:
    """API name, else "Competition {api id}", else "Competition {external id}"."""
    if data.get("name"):
        return str(data["name"])
    if data.get("id"):
        return f"Competition {data['id']}"
    return f"Competition {external_id}"


class CompetitionImporter(BaseImporter):
    kind = EntityKind.COMPETITION

    def get_competition_by_external_id(self, external_id: str) -> CatalogEntity | None:
        return self.get_by_external_id(external_id)

    def import_competition(
        self,
        external_id: str,
        update_if_exists: bool = True,
        import_standings: bool = False,
    ) -> int | None:
        """Import or refresh one competition. Returns the catalog id, None on failure."""
        external_id = str(external_id)
        try:
            existing = self.get_by_external_id(external_id)
            if existing is not None and not update_if_exists:
                logger.info(f"Competition already exists: {existing.display_name} (ID: {external_id})")
                return existing.id

            data = self.client.get_competition(external_id)
            if not isinstance(data, dict):
                raise ValueError(
                    f"Unexpected competition payload for {external_id}: {type(data).__name__}"
                )

            name = competition_display_name(data, external_id)
            if not data.get("name"):
                logger.warning(f"Competition name not found in API response, using fallback: {name}")
            logger.debug(f"Competition data received from API: {data}")

            competition = self._start_entity(existing, external_id, name)
            self._map_fields(competition, data)

            saved_id = self.catalog.save(competition)
            logger.info(f"Competition saved successfully with id: {saved_id}")

            if import_standings:
                self.import_competition_standings(external_id, saved_id)
            return saved_id
        except Exception as exc:
            logger.exception(f"Error importing competition {external_id}: {exc}")
            return None

    def import_competition_standings(
        self, external_id: str, competition_id: int, season_id: str | None = None
    ) -> bool:
        """Store the competition's club list on the entity. False when nothing was stored."""
        try:
            response = self.client.get_competition_clubs(external_id, season_id)
            clubs = response.get("clubs") if isinstance(response, dict) else None
            if not isinstance(clubs, list):
                logger.warning(f"No clubs data found for competition ID: {external_id}")
                return False

            competition = self.catalog.get(competition_id)
            if competition is None:
                logger.error(f"Competition not found in catalog: {competition_id}")
                return False

            competition.attributes["standings_data"] = json.dumps(clubs)
            competition.attributes["clubs"] = len(clubs)
            self.catalog.save(competition)
            logger.info(
                f"Saved standings data for {len(clubs)} clubs without importing individual teams"
            )
            return True
        except Exception as exc:
            logger.error(f"Error importing competition standings: {exc}")
            return False

    # ── Mapping ─────────────────────────────────────────────────────────

    def _map_fields(self, competition: CatalogEntity, data: dict[str, Any]) -> None:
        attrs = competition.attributes

        country = first_value(data, COMPETITION_COUNTRY_RULES)
        if country:
            logger.debug(
                f"Country for {competition.display_name} read from "
                f"{matching_rule(data, COMPETITION_COUNTRY_RULES)}"
            )
            label = self._label(Vocabulary.COUNTRY, country)
            if label:
                attrs["country_label"] = label

        season = first_value(data, SEASON_RULES)
        if season:
            attrs["season"] = season

        competition_type = self._label(
            Vocabulary.COMPETITION_TYPE, first_value(data, COMPETITION_TYPE_RULES)
        )
        if competition_type:
            attrs["competition_type_label"] = competition_type
