"""SQLAlchemy ORM models for the tmsync catalog.

One table holds every imported entity; labels and downloaded assets get
their own tables.
"""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class CatalogEntityDB(Base):
    """Players, teams and competitions, unique per (kind, external_id)."""

    __tablename__ = "catalog_entities"
    __table_args__ = (
        UniqueConstraint("kind", "external_id", name="uq_catalog_kind_external_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(16), nullable=False, index=True)
    external_id = Column(String(64), nullable=False, index=True)
    display_name = Column(Text, nullable=False)
    attributes = Column(JSON, nullable=False, default=dict)

    # Relations
    current_club_id = Column(
        Integer, ForeignKey("catalog_entities.id", ondelete="SET NULL"), nullable=True
    )
    league_id = Column(
        Integer, ForeignKey("catalog_entities.id", ondelete="SET NULL"), nullable=True
    )

    def __repr__(self) -> str:
        return f"<CatalogEntityDB {self.kind}:{self.external_id} {self.display_name!r}>"


class LabelTermDB(Base):
    """Find-or-create label terms (nationality, position, country, competition type)."""

    __tablename__ = "label_terms"
    __table_args__ = (
        UniqueConstraint("vocabulary", "name", name="uq_label_vocabulary_name"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vocabulary = Column(String(32), nullable=False, index=True)
    name = Column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<LabelTermDB {self.vocabulary}:{self.name}>"


class BinaryAssetDB(Base):
    """Downloaded images, deduplicated by uri."""

    __tablename__ = "binary_assets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uri = Column(String(512), nullable=False, unique=True)
    permanent = Column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<BinaryAssetDB {self.uri}>"
