# enrichment.py
# Per-player enrichment passes, streamed: fetch one record, hand it to the
# callback, move on.
#   AccountEnricher -> game name / tag line (404 = skip, no write)
#   LeagueEnricher  -> RANKED_TFT entry only; no such entry = skip, no write

import logging
from typing import Callable, Generic, Iterable, Optional, TypeVar

from tqdm import tqdm

from .client import RiotApi
from .errors import ApiError, NotFound, ValidationError
from .log import short_id
from .models import (RANKED_QUEUE, Account, AccountRecord, LeagueEntry, PlayerRecord,
                     parse, parse_list)

R = TypeVar("R")

log = logging.getLogger(__name__)


class EnrichmentStreamer(Generic[R]):
    name = "enrich"

    def __init__(self, api: RiotApi, logger: Optional[logging.Logger] = None):
        self.api = api
        self.log = logger or log

    def fetch_one(self, puuid: str) -> Optional[R]:
        raise NotImplementedError

    def describe(self, record: R) -> str:
        return ""

    def enrich(self, player_ids: Iterable[str], on_record: Callable[[R], None]) -> int:
        ids = list(player_ids)
        ok = 0
        for puuid in tqdm(ids, desc=self.name):
            try:
                record = self.fetch_one(puuid)
            except NotFound:
                self.log.warning("[%s] not found for %s", self.name, short_id(puuid))
                continue
            except ApiError as e:
                self.log.error("[%s] API error for %s (status=%s): %s", self.name, short_id(puuid), e.status, e)
                continue
            except ValidationError as e:
                self.log.error("[%s] invalid payload for %s: %s", self.name, short_id(puuid), e)
                continue
            if record is None:
                continue

            try:
                on_record(record)
            except Exception as e:
                self.log.error("[%s] failed to save %s: %s", self.name, short_id(puuid), e)
                continue
            ok += 1
            self.log.debug("[%s] %s: %s", self.name, short_id(puuid), self.describe(record))

        self.log.info("[%s] enriched %d/%d players", self.name, ok, len(ids))
        return ok


class AccountEnricher(EnrichmentStreamer[AccountRecord]):
    name = "accounts"

    def fetch_one(self, puuid: str) -> Optional[AccountRecord]:
        a = parse(Account, self.api.account_by_puuid(puuid))
        return AccountRecord(puuid=puuid, game_name=a.gameName, tag_line=a.tagLine)

    def describe(self, record: AccountRecord) -> str:
        return f"{record.game_name}#{record.tag_line}"


class LeagueEnricher(EnrichmentStreamer[PlayerRecord]):
    name = "leagues"

    def __init__(self, api: RiotApi, queue_type: str = RANKED_QUEUE,
                 logger: Optional[logging.Logger] = None):
        super().__init__(api, logger=logger)
        self.queue_type = queue_type

    def fetch_one(self, puuid: str) -> Optional[PlayerRecord]:
        entries = parse_list(LeagueEntry, self.api.league_by_puuid(puuid))
        ranked = next((e for e in entries if e.queueType == self.queue_type), None)
        if ranked is None:
            self.log.warning("[%s] no %s entry for %s (queues: %s)", self.name, self.queue_type,
                             short_id(puuid), [e.queueType for e in entries])
            return None
        return PlayerRecord.from_league(ranked, puuid)

    def describe(self, record: PlayerRecord) -> str:
        return f"{record.tier} {record.rank} ({record.league_points} LP)"
