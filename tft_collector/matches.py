# matches.py
# Match discovery and download.
# - MatchIdCollector: recent match ids per player, merged into one set
# - MatchDetailStreamer: one match at a time -> on_match callback, nothing buffered

import logging
from typing import Callable, Iterable, Optional, Set

from tqdm import tqdm

from .client import RiotApi
from .errors import ApiError, InvalidArgument, ValidationError
from .log import short_id
from .models import (MATCHES_PER_PLAYER, PLAYERS_PER_MATCH, Match, MatchResult,
                     parse, parse_match_ids)

log = logging.getLogger(__name__)

OnMatch = Callable[[MatchResult], None]


class MatchIdCollector:
    def __init__(self, api: RiotApi, count: int = MATCHES_PER_PLAYER,
                 logger: Optional[logging.Logger] = None):
        self.api = api
        self.count = count
        self.log = logger or log

    def collect(self, player_ids: Set[str]) -> Set[str]:
        if not player_ids:
            raise InvalidArgument("player id set is empty; nothing to collect matches from")

        match_ids: Set[str] = set()
        for puuid in tqdm(list(player_ids), desc="fetch match ids"):
            try:
                ids = parse_match_ids(self.api.match_ids_by_puuid(puuid, count=self.count))
            except ApiError as e:
                self.log.warning("Match ids for %s failed (status=%s): %s", short_id(puuid), e.status, e)
                continue
            except ValidationError as e:
                self.log.warning("Match ids for %s malformed: %s", short_id(puuid), e)
                continue
            match_ids.update(ids)

        self.log.info("Unique match ids: %d from %d players", len(match_ids), len(player_ids))
        return match_ids


class MatchDetailStreamer:
    def __init__(self, api: RiotApi, region: str = "", players_per_match: int = PLAYERS_PER_MATCH,
                 logger: Optional[logging.Logger] = None):
        self.api = api
        self.region = region
        self.players_per_match = players_per_match
        self.log = logger or log

    def fetch(self, match_id: str) -> MatchResult:
        raw = self.api.match(match_id)
        m = parse(Match, raw)
        n = len(m.info.participants)
        if n != self.players_per_match:
            raise ValidationError(f"{match_id}: expected {self.players_per_match} participants, got {n}")
        return MatchResult.from_match(match_id, raw, m, region=self.region)

    def stream(self, match_ids: Iterable[str], on_match: OnMatch) -> int:
        saved = 0
        seen: Set[str] = set()
        for match_id in tqdm(match_ids, desc="download matches"):
            if match_id in seen:
                continue
            seen.add(match_id)
            try:
                result = self.fetch(match_id)
            except ApiError as e:
                self.log.error("Match %s fetch failed (status=%s): %s", match_id, e.status, e)
                continue
            except ValidationError as e:
                self.log.warning("Match %s skipped, invalid payload: %s", match_id, e)
                continue

            try:
                on_match(result)
            except Exception as e:
                self.log.error("Match %s save failed: %s", match_id, e)
                continue
            saved += 1

        self.log.info("Saved %d/%d matches", saved, len(seen))
        return saved
