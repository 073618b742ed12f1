"""Shared fixtures: in-memory catalog, canned API payloads and a fake client."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tmsync.api.client import RateLimiter, TransfermarktClient
from tmsync.db.repository import CatalogRepository, LabelRepository
from tmsync.db.session import get_engine, get_session, init_db
from tmsync.errors import NotFound
from tmsync.sync import CatalogSync

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict:
    with open(FIXTURES_DIR / name) as f:
        return json.load(f)


class FakeClient(TransfermarktClient):
    """Serves canned payloads per endpoint and records every fetch.

    A response that is an exception instance is raised instead of returned.
    Unknown endpoints raise NotFound.
    """

    def __init__(self, responses: dict | None = None):
        super().__init__(base_url="https://api.test", session=MagicMock(), limiter=RateLimiter(0.0))
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, dict | None]] = []

    def fetch(self, endpoint, params=None):
        self.calls.append((endpoint, params))
        if endpoint not in self.responses:
            raise NotFound(f"No canned response for {endpoint}")
        response = self.responses[endpoint]
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)

    @property
    def endpoints(self) -> list[str]:
        return [endpoint for endpoint, _ in self.calls]


class FakeClock:
    """Monotonic clock whose sleep just moves time forward."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def db_session():
    """Create an in-memory SQLite database for testing."""
    engine = get_engine(":memory:")
    init_db(engine)
    session = get_session(engine)
    yield session
    session.close()


@pytest.fixture
def catalog(db_session):
    return CatalogRepository(db_session)


@pytest.fixture
def labels(db_session):
    return LabelRepository(db_session)


@pytest.fixture
def player_profile():
    return load_fixture("player_profile.json")


@pytest.fixture
def club_profile():
    return load_fixture("club_profile.json")


@pytest.fixture
def club_players():
    return load_fixture("club_players.json")


@pytest.fixture
def competition_payload():
    return load_fixture("competition.json")


@pytest.fixture
def competition_clubs():
    return load_fixture("competition_clubs.json")


def squad_member_profile(player_id: str, name: str, club_id: str = "69261") -> dict:
    return {
        "id": player_id,
        "name": name,
        "age": 30,
        "citizenship": ["Spain"],
        "position": {"main": "Midfield"},
        "club": {"id": club_id, "name": "Inter Miami CF"},
    }


@pytest.fixture
def api_responses(player_profile, club_profile, club_players, competition_payload, competition_clubs):
    """Endpoint → payload map covering a player, their club and its squad."""
    responses = {
        "/players/28003/profile": player_profile,
        "/clubs/69261/profile": club_profile,
        "/clubs/69261/players": club_players,
        "/competitions/GB1": competition_payload,
        "/competitions/GB1/clubs": competition_clubs,
    }
    for entry in club_players["players"]:
        responses[f"/players/{entry['id']}/profile"] = squad_member_profile(entry["id"], entry["name"])
    return responses


@pytest.fixture
def fake_client(api_responses):
    return FakeClient(api_responses)


@pytest.fixture
def sync(fake_client, db_session):
    """CatalogSync over the fake client, without an asset store."""
    return CatalogSync(fake_client, db_session)
