"""Player importer.

Pulls ``/players/{id}/profile``, downloads the photo, maps the profile onto
a Player entity and links the player's current club. A missing club is
imported once through ``club_importer`` (which must not import squads), so
a player import never fans out further than one team.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from tmsync.api.client import TransfermarktClient
from tmsync.db.assets import AssetStore
from tmsync.db.repository import CatalogRepository, LabelRepository
from tmsync.importers.base import BaseImporter
from tmsync.importers.rules import (
    PLAYER_NATIONALITY_RULES,
    PLAYER_POSITION_RULES,
    dig,
    first_value,
)
from tmsync.models.catalog import CatalogEntity, EntityKind, Vocabulary

logger = logging.getLogger(__name__)

PHOTO_DIRECTORY = "players"

ClubImporter = Callable[[str], int | None]


class PlayerImporter(BaseImporter):
    kind = EntityKind.PLAYER

    def __init__(
        self,
        client: TransfermarktClient,
        catalog: CatalogRepository,
        labels: LabelRepository | None = None,
        assets: AssetStore | None = None,
        club_importer: ClubImporter | None = None,
    ):
        super().__init__(client, catalog, labels, assets)
        self.club_importer = club_importer

    def get_player_by_external_id(self, external_id: str) -> CatalogEntity | None:
        return self.get_by_external_id(external_id)

    def import_player(self, external_id: str, update_if_exists: bool = True) -> int | None:
        """Import or refresh one player. Returns the catalog id, None on failure."""
        external_id = str(external_id)
        try:
            existing = self.get_by_external_id(external_id)
            if existing is not None and not update_if_exists:
                logger.info(f"Player already exists: {existing.display_name} (ID: {external_id})")
                return existing.id

            data = self.client.get_player_profile(external_id)
            if not isinstance(data, dict):
                raise ValueError(f"Unexpected player payload for {external_id}: {type(data).__name__}")
            logger.debug(f"Player data received from API: {data}")

            photo_uri = self._fetch_photo(external_id, data)

            player = self._start_entity(existing, external_id, data.get("name") or "")
            self._map_fields(player, data)
            if photo_uri:
                player.attributes["image_ref"] = photo_uri

            club_id = dig(data, "club", "id")
            if club_id is not None:
                self._link_club(player, str(club_id))

            saved_id = self.catalog.save(player)
            logger.info(f"Player saved successfully with id: {saved_id}")
            if player.current_club_id is None:
                logger.warning("Player was saved but club reference is missing.")
            return saved_id
        except Exception as exc:
            logger.exception(f"Error importing player {external_id}: {exc}")
            return None

    def import_top_valuable_players(self, limit: int = 10) -> list[int]:
        """Import the ``limit`` most valuable players. Empty list on API failure."""
        try:
            players = self.client.get_top_valuable_players(limit)
        except Exception as exc:
            logger.error(f"Error importing top valuable players: {exc}")
            return []

        imported: list[int] = []
        for summary in players:
            if summary.get("id") is None:
                continue
            player_id = self.import_player(str(summary["id"]))
            if player_id:
                imported.append(player_id)
        logger.info(f"Imported {len(imported)} top valuable players")
        return imported

    # ── Mapping ─────────────────────────────────────────────────────────

    def _fetch_photo(self, external_id: str, data: dict[str, Any]) -> str | None:
        url = data.get("imageUrl")
        if not url:
            logger.warning(f"No image URL found for player ID: {external_id}")
            return None
        uri = self._download_image(url, PHOTO_DIRECTORY, f"player_{external_id}.jpg")
        if uri:
            logger.info(f"Downloaded player photo: {uri}")
        else:
            logger.warning(f"Failed to download player photo from URL: {url}")
        return uri

    def _map_fields(self, player: CatalogEntity, data: dict[str, Any]) -> None:
        attrs = player.attributes
        if data.get("age") is not None:
            attrs["age"] = data["age"]
        if data.get("dateOfBirth") is not None:
            attrs["date_of_birth"] = data["dateOfBirth"]
        # Profile endpoint already reports a number here.
        if data.get("marketValue") is not None:
            attrs["market_value"] = data["marketValue"]

        nationality = self._label(
            Vocabulary.NATIONALITY, first_value(data, PLAYER_NATIONALITY_RULES)
        )
        if nationality:
            attrs["nationality_label"] = nationality

        position = self._label(Vocabulary.POSITION, first_value(data, PLAYER_POSITION_RULES))
        if position:
            attrs["position_label"] = position

    def _link_club(self, player: CatalogEntity, club_external_id: str) -> None:
        """Point the player at its club, importing the club once if needed.

        Failures are logged; the player is then saved without a club.
        """
        try:
            team = self.catalog.find_by_external_id(EntityKind.TEAM, club_external_id)
            if team is not None:
                player.current_club_id = team.id
                logger.info(f"Found existing team for player: {team.display_name} (id: {team.id})")
                return

            if self.club_importer is None:
                logger.info(f"Team {club_external_id} not in catalog and no club importer set")
                return

            logger.info(f"Team does not exist, attempting to import team ID: {club_external_id}")
            team_id = self.club_importer(club_external_id)
            if team_id and self.catalog.get(team_id) is not None:
                player.current_club_id = team_id
                logger.info(f"Imported new team for player (id: {team_id})")
            else:
                logger.warning(
                    f"Failed to import team with ID: {club_external_id}. "
                    "Player will be saved without club reference."
                )
        except Exception as exc:
            logger.warning(
                f"Exception while handling club reference for player: {exc}. "
                "Player will be saved without club reference."
            )
