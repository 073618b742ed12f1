"""Catalog domain models.

A ``CatalogEntity`` is one imported Player, Team or Competition, keyed by
``(kind, external_id)``. Free-form imported fields live in ``attributes``;
cross-references point at other entities by catalog id.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class EntityKind(str, Enum):
    PLAYER = "player"
    TEAM = "team"
    COMPETITION = "competition"


class Vocabulary(str, Enum):
    """Label vocabularies shared across entities."""
    NATIONALITY = "nationality"
    POSITION = "position"
    COUNTRY = "country"
    COMPETITION_TYPE = "competition_type"


class CatalogEntity(BaseModel):
    """A Player, Team or Competition owned by the catalog."""
    id: int | None = Field(default=None, description="Catalog id, None until first save")
    kind: EntityKind
    external_id: str = Field(min_length=1, description="Transfermarkt id")
    display_name: str = Field(min_length=1)
    attributes: dict[str, Any] = Field(default_factory=dict)

    # Relations (catalog ids)
    current_club_id: int | None = None
    league_id: int | None = None

    @field_validator("external_id", mode="before")
    @classmethod
    def coerce_external_id(cls, v: Any) -> Any:
        # The API hands out ids as both strings and ints.
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("display_name")
    @classmethod
    def strip_display_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("display_name cannot be blank")
        return v

    @property
    def is_persisted(self) -> bool:
        return self.id is not None


class LabelTerm(BaseModel):
    """A reusable named tag, unique per (vocabulary, name)."""
    id: int | None = None
    vocabulary: Vocabulary
    name: str = Field(min_length=1)


class BinaryAsset(BaseModel):
    """A downloaded file, deduplicated by destination uri."""
    id: int | None = None
    uri: str = Field(min_length=1)
    permanent: bool = True


class SquadStatus(BaseModel):
    """A team's listed squad next to what is already in the catalog."""
    team_id: int
    team_name: str
    team_external_id: str
    players: list[dict[str, Any]] = Field(default_factory=list)
    imported: dict[str, int] = Field(
        default_factory=dict, description="player external id → catalog id"
    )

    @property
    def pending(self) -> list[dict[str, Any]]:
        """Listed players that have not been imported yet."""
        return [
            p for p in self.players
            if p.get("id") is not None and str(p["id"]) not in self.imported
        ]
