"""Binary asset store — downloads player photos and club logos to disk.

Assets are keyed by their destination uri (``players/player_28003.jpg``).
A uri that already has a record is returned as-is, never re-downloaded.
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tmsync.db.models import BinaryAssetDB
from tmsync.models.catalog import BinaryAsset

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 30
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class AssetStore:
    """Download-once file store backed by the ``binary_assets`` table."""

    def __init__(
        self,
        session: Session,
        root: str | Path,
        http: requests.Session | None = None,
        timeout: float = DOWNLOAD_TIMEOUT,
    ):
        self.session = session
        self.root = Path(root)
        self.http = http or requests.Session()
        self.timeout = timeout

    def find(self, uri: str) -> BinaryAsset | None:
        db_obj = self.session.scalars(
            select(BinaryAssetDB).where(BinaryAssetDB.uri == uri).limit(1)
        ).first()
        if db_obj is None:
            return None
        return BinaryAsset(id=db_obj.id, uri=db_obj.uri, permanent=db_obj.permanent)

    def path_for(self, uri: str) -> Path:
        return self.root / uri

    def download(self, url: str, directory: str, filename: str) -> BinaryAsset | None:
        """Fetch ``url`` into ``{directory}/{filename}``. None on any failure."""
        if not url:
            logger.info("Empty image URL provided")
            return None

        uri = f"{directory}/{filename}"
        try:
            existing = self.find(uri)
            if existing is not None:
                logger.info(f"Image already exists: {uri}")
                return existing

            logger.info(f"Attempting to download image from URL: {url}")
            response = self.http.get(
                url, timeout=self.timeout, headers={"User-Agent": USER_AGENT}
            )
            if response.status_code != 200:
                logger.error(f"Failed to download image. Status code: {response.status_code}")
                return None

            destination = self.path_for(uri)
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(response.content)

            db_obj = BinaryAssetDB(uri=uri, permanent=True)
            self.session.add(db_obj)
            self.session.commit()
            logger.info(f"Image downloaded and saved successfully: {uri} (id: {db_obj.id})")
            return BinaryAsset(id=db_obj.id, uri=db_obj.uri, permanent=db_obj.permanent)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(f"Error recording image {uri}: {exc}")
            return None
        except (requests.RequestException, OSError) as exc:
            logger.error(f"Error downloading image: {exc}")
            return None
