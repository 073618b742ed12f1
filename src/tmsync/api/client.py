"""Rate-limited HTTP client for the Transfermarkt REST API.

Every real request is preceded by a cheap availability probe against the
bare base URL and spaced at least ``min_interval`` seconds after the
previous one. Failures are mapped onto the ``tmsync.errors`` taxonomy;
nothing is retried here.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import requests

from tmsync.config import DEFAULT_API_BASE_URL
from tmsync.errors import ApiError, ApiUnavailable, InvalidResponse, NotFound, RequestFailed

logger = logging.getLogger(__name__)


class RateLimiter:
    """Minimum spacing between consecutive dispatches.

    Not thread-safe; a client instance is meant to be driven from one thread.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_dispatch: float | None = None

    def acquire(self) -> float:
        """Block until ``min_interval`` has passed since the last dispatch.

        Returns the number of seconds slept.
        """
        if self._last_dispatch is None:
            return 0.0
        elapsed = self._clock() - self._last_dispatch
        if elapsed >= self.min_interval:
            return 0.0
        wait = self.min_interval - elapsed
        logger.debug(f"Throttling for {wait:.3f}s")
        self._sleep(wait)
        return wait

    def record(self) -> None:
        """Stamp a dispatch happening now."""
        self._last_dispatch = self._clock()


class TransfermarktClient:
    """Thin JSON client over ``requests`` with throttling and error mapping."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        session: requests.Session | None = None,
        limiter: RateLimiter | None = None,
        probe_timeout: float = 5.0,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.limiter = limiter or RateLimiter()
        self.probe_timeout = probe_timeout
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> TransfermarktClient:
        return cls(
            base_url=settings.api_base_url,
            limiter=RateLimiter(min_interval=settings.request_interval),
            probe_timeout=settings.probe_timeout,
            timeout=settings.request_timeout,
        )

    # ── Core request ─────────────────────────────────────────────────────

    def fetch(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``{base_url}{endpoint}`` and return the decoded JSON body.

        Raises:
            ApiUnavailable: the availability probe failed.
            NotFound: the endpoint answered 404.
            RequestFailed: any other transport or HTTP error.
            InvalidResponse: empty body or body that is not JSON.
        """
        self.limiter.acquire()
        self._probe()

        url = f"{self.base_url}{endpoint}"
        logger.info(f"Making API request to: {url}")
        self.limiter.record()

        try:
            response = self.session.get(
                url,
                params=params or None,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            if _is_not_found(exc):
                logger.error(
                    f"API endpoint not found: {endpoint}. The API structure may have changed."
                )
                raise NotFound(
                    "Resource not found. The API structure may have changed."
                ) from exc
            logger.error(f"API request failed: {exc}")
            raise RequestFailed(f"API request failed: {exc}") from exc

        if not response.text or not response.text.strip():
            raise InvalidResponse("Empty response from Transfermarkt API")
        try:
            return response.json()
        except ValueError as exc:
            logger.error(f"Failed to decode JSON: {exc}")
            raise InvalidResponse(f"Failed to decode JSON: {exc}") from exc

    def _probe(self) -> None:
        try:
            response = self.session.get(self.base_url, timeout=self.probe_timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ApiUnavailable(
                "The Transfermarkt API is currently unavailable. "
                "Please try again later or check your API configuration."
            ) from exc

    # ── Players ──────────────────────────────────────────────────────────

    def get_player_profile(self, player_id: str) -> Any:
        return self.fetch(f"/players/{player_id}/profile")

    def search_players(self, name: str) -> Any:
        return self.fetch(f"/players/search/{quote(name, safe='')}")

    def get_player_market_value(self, player_id: str) -> Any:
        return self.fetch(f"/players/{player_id}/market_value")

    def get_player_transfers(self, player_id: str) -> Any:
        return self.fetch(f"/players/{player_id}/transfers")

    def get_player_stats(self, player_id: str) -> Any:
        return self.fetch(f"/players/{player_id}/stats")

    def get_player_injuries(self, player_id: str) -> Any:
        return self.fetch(f"/players/{player_id}/injuries")

    def get_player_achievements(self, player_id: str) -> Any:
        return self.fetch(f"/players/{player_id}/achievements")

    def get_top_valuable_players(self, limit: int = 10) -> list[dict[str, Any]]:
        """Players ordered by market value, reduced to a flat summary each."""
        data = self.fetch(
            "/players",
            {"order_by": "market_value", "order": "desc", "limit": limit},
        )
        if not isinstance(data, dict) or not isinstance(data.get("players"), list):
            raise InvalidResponse("Invalid response format for top players")

        players: list[dict[str, Any]] = []
        for raw in data["players"]:
            if not isinstance(raw, dict):
                continue
            player: dict[str, Any] = {
                "id": raw.get("id"),
                "name": raw.get("name") or "Unknown Player",
                "market_value": raw.get("marketValue") or "Unknown",
            }
            for key, source in (
                ("position", "position"),
                ("age", "age"),
                ("nationality", "nationality"),
                ("image_url", "imageUrl"),
            ):
                if raw.get(source) is not None:
                    player[key] = raw[source]
            club = raw.get("currentClub")
            if isinstance(club, dict):
                player["current_club"] = {
                    "name": club.get("name") or "Unknown Club",
                    "id": club.get("id"),
                }
            players.append(player)
            if len(players) >= limit:
                break
        return players

    # ── Clubs ────────────────────────────────────────────────────────────

    def get_club_profile(self, club_id: str) -> Any:
        return self.fetch(f"/clubs/{club_id}/profile")

    def get_club_players(self, club_id: str) -> Any:
        return self.fetch(f"/clubs/{club_id}/players")

    def search_clubs(self, name: str) -> Any:
        return self.fetch(f"/clubs/search/{quote(name, safe='')}")

    # ── Competitions ─────────────────────────────────────────────────────

    def get_competition(self, competition_id: str) -> Any:
        """Competition data, falling back to the clubs endpoint.

        When both endpoints fail the error from the primary one is raised.
        """
        try:
            return self.fetch(f"/competitions/{competition_id}")
        except ApiError as exc:
            logger.warning(
                f"Failed to fetch competition data from main endpoint: {exc}. "
                "Trying clubs endpoint..."
            )
            try:
                return self.fetch(f"/competitions/{competition_id}/clubs")
            except ApiError as fallback_exc:
                logger.error(
                    f"Failed to fetch competition data from clubs endpoint: {fallback_exc}"
                )
                raise exc

    def get_competition_clubs(
        self, competition_id: str, season_id: str | None = None
    ) -> dict[str, Any]:
        """Clubs of a competition; a placeholder with no clubs on failure."""
        params = {"season_id": season_id} if season_id else None
        try:
            return self.fetch(f"/competitions/{competition_id}/clubs", params)
        except ApiError as exc:
            logger.warning(f"Failed to fetch competition clubs data: {exc}")
            return {
                "id": competition_id,
                "name": "Unknown Competition",
                "seasonId": season_id or "current",
                "clubs": [],
            }

    def search_competitions(self, name: str) -> Any:
        return self.fetch(f"/competitions/search/{quote(name, safe='')}")


def _is_not_found(exc: requests.RequestException) -> bool:
    response = getattr(exc, "response", None)
    if response is not None and response.status_code == 404:
        return True
    return "404 Not Found" in str(exc)
