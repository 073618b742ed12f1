"""Model exports for tmsync."""

from tmsync.models.catalog import (
    BinaryAsset,
    CatalogEntity,
    EntityKind,
    LabelTerm,
    SquadStatus,
    Vocabulary,
)

__all__ = [
    "BinaryAsset",
    "CatalogEntity",
    "EntityKind",
    "LabelTerm",
    "SquadStatus",
    "Vocabulary",
]
