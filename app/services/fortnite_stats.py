"""
Fortnite stats client and normalizer.

Fetches Battle Royale stats from fortnite-api.com and reduces the payload to
the handful of numbers the market prices on.

Fundamental score policy (fixed constants, not fitted):
    score = 0.5 * clamp(kd / 5) + 0.3 * clamp(winRate / 25) + 0.2 * clamp(wins / 100)
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import StatsApiError, StatsNotFoundError, StatsRateLimitedError
from app.core.logging import get_logger
from app.domain.market import Platform, Scope
from app.domain.stats import FortniteStats
from app.services.pricing import clamp

logger = get_logger("services.fortnite_stats")

STATS_PATH = "/v2/stats/br/v2"
ERROR_BODY_PREVIEW = 180

# Score weights and the stat values at which each component saturates
KD_WEIGHT, KD_CAP = 0.5, 5.0
WIN_RATE_WEIGHT, WIN_RATE_CAP = 0.3, 25.0
WINS_WEIGHT, WINS_CAP = 0.2, 100.0


def as_number(value: Any) -> float:
    """Coerce to a finite float, 0 for anything else."""
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def pick_stats_block(raw: Any, platform: Platform) -> Mapping[str, Any]:
    """Return ``data.stats.<platform>.overall``, or ``data.stats.all.overall`` if that is empty."""
    stats = _mapping(_mapping(_mapping(raw).get("data")).get("stats"))
    from_platform = _mapping(_mapping(stats.get(platform)).get("overall"))
    if from_platform:
        return from_platform
    return _mapping(_mapping(stats.get("all")).get("overall"))


def compute_fundamental_score(kd: float, win_rate: float, wins: float) -> float:
    """Weighted sum of three normalized stats, in [0, 1]."""
    return (
        KD_WEIGHT * clamp(kd / KD_CAP, 0.0, 1.0)
        + WIN_RATE_WEIGHT * clamp(win_rate / WIN_RATE_CAP, 0.0, 1.0)
        + WINS_WEIGHT * clamp(wins / WINS_CAP, 0.0, 1.0)
    )


def normalize_stats(raw: Any, player: str, platform: Platform, scope: Scope) -> FortniteStats:
    """Build a FortniteStats record from a raw payload. Never raises on odd shapes."""
    block = pick_stats_block(raw, platform)
    wins = as_number(block.get("wins"))
    kd = as_number(block.get("kd"))
    win_rate = as_number(block.get("winRate"))
    return FortniteStats(
        player=player,
        platform=platform,
        scope=scope,
        wins=wins,
        kd=kd,
        win_rate=win_rate,
        matches=as_number(block.get("matches")),
        kills=as_number(block.get("kills")),
        score=compute_fundamental_score(kd, win_rate, wins),
        raw=raw,
    )


class FortniteStatsClient:
    """Thin httpx client for the fortnite-api.com stats endpoint.

    Single attempt per call, no retry. An ``httpx.AsyncClient`` may be injected
    (tests use ``httpx.MockTransport``); otherwise one is opened per call.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = settings.fortnite_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.fortnite_api_base_url).rstrip("/")
        self.timeout = float(settings.external_api_timeout) if timeout is None else timeout
        self._http_client = http_client

    async def _get(self, url: str, params: dict[str, str], headers: dict[str, str]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.get(url, params=params, headers=headers)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url, params=params, headers=headers)

    async def fetch(self, player: str, platform: Platform, scope: Scope) -> FortniteStats:
        """Fetch and normalize one player's stats.

        Raises:
            StatsNotFoundError: upstream 404
            StatsRateLimitedError: upstream 429
            StatsApiError: any other failure
        """
        params = {
            "name": player,
            "accountType": "epic",
            "timeWindow": "season" if scope == "season" else "lifetime",
        }
        headers = {"Authorization": self.api_key} if self.api_key else {}

        try:
            response = await self._get(f"{self.base_url}{STATS_PATH}", params, headers)
        except httpx.TimeoutException as e:
            raise StatsApiError(f"Fortnite-API timeout for {player}") from e
        except httpx.HTTPError as e:
            raise StatsApiError(f"Fortnite-API request failed: {e}") from e

        if response.status_code == 404:
            raise StatsNotFoundError(f"Fortnite player not found: {player}")
        if response.status_code == 429:
            raise StatsRateLimitedError("Fortnite-API rate limited (429)")
        if not response.is_success:
            raise StatsApiError(
                f"Fortnite-API error {response.status_code}: {response.text[:ERROR_BODY_PREVIEW]}"
            )

        try:
            raw = response.json()
        except ValueError as e:
            raise StatsApiError("Fortnite-API returned invalid JSON") from e

        stats = normalize_stats(raw, player, platform, scope)
        logger.debug(f"Fetched stats for {player}/{platform}/{scope}: score={stats.score:.4f}")
        return stats
