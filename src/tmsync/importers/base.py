"""Base importer — shared plumbing for the entity importers.

Each importer pulls one Transfermarkt resource, normalizes it into a
``CatalogEntity`` and upserts it by external id. Subclasses implement the
per-kind mapping; this class owns lookups, label resolution and image
downloads.
"""

from __future__ import annotations

import logging
from abc import ABC

from tmsync.api.client import TransfermarktClient
from tmsync.db.assets import AssetStore
from tmsync.db.repository import CatalogRepository, LabelRepository
from tmsync.models.catalog import CatalogEntity, EntityKind, Vocabulary

logger = logging.getLogger(__name__)


class BaseImporter(ABC):
    """Abstract base for the Player, Team and Competition importers."""

    kind: EntityKind

    def __init__(
        self,
        client: TransfermarktClient,
        catalog: CatalogRepository,
        labels: LabelRepository | None = None,
        assets: AssetStore | None = None,
    ):
        self.client = client
        self.catalog = catalog
        self.labels = labels
        self.assets = assets

    def get_by_external_id(self, external_id: str) -> CatalogEntity | None:
        return self.catalog.find_by_external_id(self.kind, str(external_id))

    def _start_entity(
        self, existing: CatalogEntity | None, external_id: str, display_name: str
    ) -> CatalogEntity:
        """Working copy to map fields onto.

        Mapping happens on a detached copy so a failure before the final save
        leaves the stored entity untouched.
        """
        display_name = (display_name or "").strip()
        if not display_name:
            raise ValueError(f"No name in API data for {self.kind.value} {external_id}")
        if existing is not None:
            logger.info(f"Updating existing {self.kind.value}: {display_name} (ID: {external_id})")
            entity = existing.model_copy(deep=True)
            entity.display_name = display_name
            return entity
        logger.info(f"Creating new {self.kind.value}: {display_name} (ID: {external_id})")
        return CatalogEntity(kind=self.kind, external_id=external_id, display_name=display_name)

    def _label(self, vocabulary: Vocabulary, name) -> str | None:
        """Resolve ``name`` to a label term; the stored name, or None to skip."""
        if self.labels is None or name is None or name == "":
            return None
        term = self.labels.find_or_create(vocabulary, str(name))
        return term.name if term else None

    def _download_image(self, url: str | None, directory: str, filename: str) -> str | None:
        """Best-effort image download; returns the asset uri or None."""
        if self.assets is None or not url:
            return None
        asset = self.assets.download(url, directory, filename)
        return asset.uri if asset else None
