# client.py
# Riot TFT API access.
# - RateLimitedClient: fixed delay after every successful call, bounded 429
#   retry honouring Retry-After, status -> exception translation
# - RiotApi: the endpoints the collector uses, returning decoded JSON

import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from .errors import NotFound, RateLimitExceeded, TransientNetworkError
from .models import MATCHES_PER_PLAYER

DEFAULT_RETRY_AFTER = 10     # seconds, when 429 carries no Retry-After
MAX_ATTEMPTS = 3
REQUEST_TIMEOUT = 20

log = logging.getLogger(__name__)


def url(route: str, path: str) -> str:
    return f"https://{route}.api.riotgames.com{path}"


class RateLimitedClient:
    """Wraps every outbound call; one shared rate limit, strictly sequential."""

    def __init__(self, api_key: str, delay: float = 1.3, max_attempts: int = MAX_ATTEMPTS,
                 fallback_wait: float = DEFAULT_RETRY_AFTER, timeout: float = REQUEST_TIMEOUT,
                 session: Optional[requests.Session] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 logger: Optional[logging.Logger] = None):
        self.delay = delay
        self.max_attempts = max(1, max_attempts)
        self.fallback_wait = fallback_wait
        self.timeout = timeout
        self.sleep = sleep
        self.log = logger or log
        self.session = session or requests.Session()
        self.session.headers.update({"X-Riot-Token": api_key})

    def _retry_after(self, r: requests.Response) -> float:
        raw = r.headers.get("Retry-After")
        try:
            return float(raw) if raw is not None else self.fallback_wait
        except ValueError:
            return self.fallback_wait

    def call(self, request_fn: Callable[[], requests.Response]) -> requests.Response:
        for attempt in range(1, self.max_attempts + 1):
            try:
                r = request_fn()
            except requests.RequestException as e:
                raise TransientNetworkError(f"network error: {e}") from e

            if r.status_code == 429:
                if attempt == self.max_attempts:
                    break
                wait = self._retry_after(r)
                self.log.warning("Rate limited, waiting %ss (attempt %d/%d)", wait, attempt, self.max_attempts)
                self.sleep(wait)
                continue

            if r.status_code == 404:
                raise NotFound(f"not found: {r.url}", status=404)
            try:
                r.raise_for_status()
            except requests.HTTPError as e:
                raise TransientNetworkError(str(e), status=r.status_code) from e

            if self.delay > 0:
                self.sleep(self.delay)
            return r
        raise RateLimitExceeded(f"rate limited after {self.max_attempts} attempts: {r.url}", status=429)

    def get(self, full_url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        r = self.call(lambda: self.session.get(full_url, params=params, timeout=self.timeout))
        try:
            return r.json()
        except ValueError as e:
            raise TransientNetworkError(f"invalid JSON from {full_url}", status=r.status_code) from e


class RiotApi:
    """TFT endpoints. League calls go to the platform host, match calls to the
    regional host, account calls to the account region."""

    def __init__(self, client: RateLimitedClient, platform: str, match_region: str, account_region: str):
        self.client = client
        self.platform = platform
        self.match_region = match_region
        self.account_region = account_region

    # --- League-v1 ---
    def high_tier_league(self, tier: str) -> Any:
        # /tft/league/v1/{challenger|grandmaster|master}
        return self.client.get(url(self.platform, f"/tft/league/v1/{tier.lower()}"))

    def league_entries(self, tier: str, division: str, page: int = 1) -> Any:
        # /tft/league/v1/entries/{TIER}/{DIVISION}?page={page}
        path = f"/tft/league/v1/entries/{tier.upper()}/{division}"
        return self.client.get(url(self.platform, path), params={"page": page})

    def league_by_puuid(self, puuid: str) -> Any:
        return self.client.get(url(self.platform, f"/tft/league/v1/by-puuid/{puuid}"))

    # --- Match-v1 ---
    def match_ids_by_puuid(self, puuid: str, count: int = MATCHES_PER_PLAYER) -> Any:
        return self.client.get(url(self.match_region, f"/tft/match/v1/matches/by-puuid/{puuid}/ids"),
                               params={"count": count})

    def match(self, match_id: str) -> Any:
        return self.client.get(url(self.match_region, f"/tft/match/v1/matches/{match_id}"))

    # --- Account-v1 ---
    def account_by_puuid(self, puuid: str) -> Any:
        return self.client.get(url(self.account_region, f"/riot/account/v1/accounts/by-puuid/{puuid}"))
