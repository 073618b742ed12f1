"""Repository layer — catalog upserts, label lookups and JSON snapshot export.

Handles conversion between pydantic models and SQLAlchemy ORM objects.
Every write commits on its own; there is no transaction spanning more than
one entity.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tmsync.db.models import CatalogEntityDB, LabelTermDB
from tmsync.models.catalog import CatalogEntity, EntityKind, LabelTerm, Vocabulary

logger = logging.getLogger(__name__)


class CatalogRepository:
    """CRUD for catalog entities, keyed by (kind, external_id)."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, entity_id: int) -> CatalogEntity | None:
        """Get a single entity by catalog id."""
        db_obj = self.session.get(CatalogEntityDB, entity_id)
        if db_obj is None:
            return None
        return _db_to_entity(db_obj)

    def find_by_external_id(self, kind: EntityKind, external_id: str) -> CatalogEntity | None:
        """Exact, case-sensitive lookup by upstream id."""
        db_obj = self.session.scalars(
            select(CatalogEntityDB)
            .where(
                CatalogEntityDB.kind == kind.value,
                CatalogEntityDB.external_id == str(external_id),
            )
            .limit(1)
        ).first()
        if db_obj is None:
            return None
        return _db_to_entity(db_obj)

    def save(self, entity: CatalogEntity) -> int:
        """Insert or update an entity. Sets and returns its catalog id."""
        try:
            db_obj = self.session.merge(_entity_to_db(entity))
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        entity.id = db_obj.id
        return entity.id

    def list_by_kind(self, kind: EntityKind) -> list[CatalogEntity]:
        db_objs = self.session.scalars(
            select(CatalogEntityDB)
            .where(CatalogEntityDB.kind == kind.value)
            .order_by(CatalogEntityDB.id)
        ).all()
        return [_db_to_entity(obj) for obj in db_objs]

    def external_ids(self, kind: EntityKind) -> list[str]:
        """Upstream ids of every entity of ``kind`` that has a non-empty one."""
        return list(
            self.session.scalars(
                select(CatalogEntityDB.external_id)
                .where(
                    CatalogEntityDB.kind == kind.value,
                    CatalogEntityDB.external_id != "",
                )
                .order_by(CatalogEntityDB.id)
            ).all()
        )

    def players_in_club(self, team_id: int) -> list[CatalogEntity]:
        db_objs = self.session.scalars(
            select(CatalogEntityDB)
            .where(
                CatalogEntityDB.kind == EntityKind.PLAYER.value,
                CatalogEntityDB.current_club_id == team_id,
            )
            .order_by(CatalogEntityDB.id)
        ).all()
        return [_db_to_entity(obj) for obj in db_objs]

    def count(self, kind: EntityKind | None = None) -> int:
        query = self.session.query(CatalogEntityDB)
        if kind is not None:
            query = query.filter(CatalogEntityDB.kind == kind.value)
        return query.count()


class LabelRepository:
    """Find-or-create store for label terms."""

    def __init__(self, session: Session):
        self.session = session

    def find(self, vocabulary: Vocabulary, name: str) -> LabelTerm | None:
        db_obj = self.session.scalars(
            select(LabelTermDB)
            .where(LabelTermDB.vocabulary == vocabulary.value, LabelTermDB.name == name)
            .limit(1)
        ).first()
        if db_obj is None:
            return None
        return _db_to_label(db_obj)

    def find_or_create(self, vocabulary: Vocabulary, name: str) -> LabelTerm | None:
        """Return the term, creating it on first use. None if the store fails.

        Concurrent creation of the same term is not guarded against.
        """
        name = str(name).strip()
        if not name:
            return None
        try:
            existing = self.find(vocabulary, name)
            if existing is not None:
                return existing
            db_obj = LabelTermDB(vocabulary=vocabulary.value, name=name)
            self.session.add(db_obj)
            self.session.commit()
            logger.debug(f"Created {vocabulary.value} term: {name}")
            return _db_to_label(db_obj)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(f"Error creating taxonomy term: {exc}")
            return None

    def list_vocabulary(self, vocabulary: Vocabulary) -> list[LabelTerm]:
        db_objs = self.session.scalars(
            select(LabelTermDB)
            .where(LabelTermDB.vocabulary == vocabulary.value)
            .order_by(LabelTermDB.name)
        ).all()
        return [_db_to_label(obj) for obj in db_objs]


def export_snapshot(session: Session, output_path: str | Path) -> dict:
    """Export the whole catalog as a JSON snapshot."""
    catalog = CatalogRepository(session)
    labels = LabelRepository(session)

    snapshot = {
        kind.value + "s": [e.model_dump(mode="json") for e in catalog.list_by_kind(kind)]
        for kind in EntityKind
    }
    snapshot["labels"] = {
        vocab.value: [t.name for t in labels.list_vocabulary(vocab)] for vocab in Vocabulary
    }
    snapshot["meta"] = {f"{kind.value}_count": catalog.count(kind) for kind in EntityKind}

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w") as f:
        json.dump(snapshot, f, indent=2, ensure_ascii=False)

    logger.info(f"Exported snapshot to {output}: {snapshot['meta']}")
    return snapshot


# ── Conversion Helpers ──────────────────────────────────────────────────


def _entity_to_db(entity: CatalogEntity) -> CatalogEntityDB:
    return CatalogEntityDB(
        id=entity.id,
        kind=entity.kind.value,
        external_id=entity.external_id,
        display_name=entity.display_name,
        attributes=dict(entity.attributes),
        current_club_id=entity.current_club_id,
        league_id=entity.league_id,
    )


def _db_to_entity(db_obj: CatalogEntityDB) -> CatalogEntity:
    return CatalogEntity(
        id=db_obj.id,
        kind=EntityKind(db_obj.kind),
        external_id=db_obj.external_id,
        display_name=db_obj.display_name,
        attributes=dict(db_obj.attributes or {}),
        current_club_id=db_obj.current_club_id,
        league_id=db_obj.league_id,
    )


def _db_to_label(db_obj: LabelTermDB) -> LabelTerm:
    return LabelTerm(id=db_obj.id, vocabulary=Vocabulary(db_obj.vocabulary), name=db_obj.name)
