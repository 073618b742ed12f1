"""CatalogSync — wires the importers together and runs bulk sweeps.

The importers only know the fetch client and the repositories. This layer
owns all three of them and hands the player importer a club-import callable
that always skips the squad, which is what keeps a player import from
recursing back into squad imports.

Usage:
    sync = CatalogSync.from_settings(Settings())
    sync.import_team("131")                      # team + one level of players
    sync.update_all(EntityKind.PLAYER)           # refresh every stored player
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from tmsync.api.client import TransfermarktClient
from tmsync.config import Settings
from tmsync.db.assets import AssetStore
from tmsync.db.repository import CatalogRepository, LabelRepository
from tmsync.db.session import get_engine, get_session, init_db
from tmsync.importers.competition import CompetitionImporter
from tmsync.importers.player import PlayerImporter
from tmsync.importers.squad import SquadImporter
from tmsync.importers.team import TeamImporter
from tmsync.models.catalog import CatalogEntity, EntityKind, SquadStatus

logger = logging.getLogger(__name__)


class CatalogSync:
    """Entry point for on-demand imports and refresh sweeps."""

    def __init__(
        self,
        client: TransfermarktClient,
        session: Session,
        assets: AssetStore | None = None,
        settings: Settings | None = None,
    ):
        self.client = client
        self.session = session
        self.settings = settings or Settings()

        self.catalog = CatalogRepository(session)
        self.labels = LabelRepository(session)
        self.assets = assets

        self.players = PlayerImporter(
            client, self.catalog, self.labels, assets, club_importer=self._import_club
        )
        self.squads = SquadImporter(client, self.catalog, self.players)
        self.teams = TeamImporter(client, self.catalog, self.labels, assets, squads=self.squads)
        self.competitions = CompetitionImporter(client, self.catalog, self.labels)

    @classmethod
    def from_settings(cls, settings: Settings) -> CatalogSync:
        """Build the client, database session and asset store from settings."""
        engine = init_db(get_engine(settings.database_path))
        session = get_session(engine)
        assets = AssetStore(session, settings.asset_root)
        client = TransfermarktClient.from_settings(settings)
        return cls(client, session, assets=assets, settings=settings)

    def close(self) -> None:
        self.session.close()

    # ── Single imports ──────────────────────────────────────────────────

    def import_player(self, external_id: str, update_if_exists: bool = True) -> int | None:
        return self.players.import_player(external_id, update_if_exists)

    def import_team(
        self, external_id: str, update_if_exists: bool = True, import_squad: bool = True
    ) -> int | None:
        return self.teams.import_team(external_id, update_if_exists, import_squad)

    def import_competition(
        self, external_id: str, update_if_exists: bool = True, import_standings: bool = False
    ) -> int | None:
        return self.competitions.import_competition(external_id, update_if_exists, import_standings)

    def get_player_by_external_id(self, external_id: str) -> CatalogEntity | None:
        return self.players.get_player_by_external_id(external_id)

    def import_top_valuable_players(self, limit: int = 10) -> list[int]:
        return self.players.import_top_valuable_players(limit)

    def squad_status(self, team_catalog_id: int) -> SquadStatus:
        return self.squads.squad_status(team_catalog_id)

    def import_squad_player(self, team_catalog_id: int, player_external_id: str) -> int | None:
        return self.squads.import_squad_player(team_catalog_id, player_external_id)

    def _import_club(self, club_external_id: str) -> int | None:
        # Nested import on behalf of a player: never pull the club's squad.
        return self.teams.import_team(club_external_id, update_if_exists=True, import_squad=False)

    # ── Sweeps ──────────────────────────────────────────────────────────

    def update_all(self, kind: EntityKind, cascade: bool = False) -> int:
        """Re-import every stored entity of ``kind``. Returns how many were processed.

        ``cascade`` is forwarded as ``import_squad`` for teams and
        ``import_standings`` for competitions; players ignore it.
        """
        try:
            external_ids = self.catalog.external_ids(kind)
        except Exception as exc:
            logger.error(f"Error listing {kind.value}s for update: {exc}")
            return 0

        count = 0
        for external_id in external_ids:
            try:
                if kind is EntityKind.PLAYER:
                    self.players.import_player(external_id, True)
                elif kind is EntityKind.TEAM:
                    self.teams.import_team(external_id, True, cascade)
                else:
                    self.competitions.import_competition(external_id, True, cascade)
            except Exception as exc:
                logger.error(f"Error updating {kind.value} {external_id}: {exc}")
            count += 1

        logger.info(f"Updated {count} {kind.value}s")
        return count

    def update_all_data(self) -> dict[str, int]:
        """Run the sweeps enabled in settings, without cascading."""
        logger.info("Starting update of all data from Transfermarkt API")
        enabled = {
            EntityKind.PLAYER: self.settings.update_players,
            EntityKind.TEAM: self.settings.update_teams,
            EntityKind.COMPETITION: self.settings.update_competitions,
        }
        counts: dict[str, int] = {}
        for kind, is_enabled in enabled.items():
            if not is_enabled:
                continue
            counts[kind.value] = self.update_all(kind, cascade=False)
        logger.info("Completed update of all data from Transfermarkt API")
        return counts

    def is_update_due(self, last_run: datetime | None, now: datetime | None = None) -> bool:
        """True when ``update_interval`` seconds have passed since ``last_run``."""
        if last_run is None:
            return True
        now = now or datetime.now(timezone.utc)
        # Naive timestamps are read as UTC.
        if last_run.tzinfo is None:
            last_run = last_run.replace(tzinfo=timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return (now - last_run).total_seconds() >= self.settings.update_interval
