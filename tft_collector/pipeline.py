# pipeline.py
# Full collection run:
#   per tier : seed ladder -> sample to match goal -> upsert seeds
#              -> match ids -> drop ids seen this run / already stored
#              -> stream match details (match + stubs + links per match)
#   snowball : participants found this run become the next round's seeds
#   once     : orphan cleanup -> account enrichment -> league enrichment

import logging
from typing import Iterable, List, Optional, Sequence, Set

from .client import RiotApi
from .enrichment import AccountEnricher, LeagueEnricher
from .log import short_id
from .matches import MatchDetailStreamer, MatchIdCollector
from .models import MatchResult, PlayerRecord, RunSummary
from .reconcile import OrphanReconciler
from .sampling import PlayerSampler
from .seeds import SeedPlayerCollector
from .store import Store
from .tiers import ALL_DIVISIONS, Tier

log = logging.getLogger(__name__)


class Collector:
    def __init__(self, api: RiotApi, store: Store, sampler: Optional[PlayerSampler] = None,
                 region: str = "", logger: Optional[logging.Logger] = None):
        self.store = store
        self.log = logger or log
        self.sampler = sampler or PlayerSampler(logger=logger)
        self.seeds = SeedPlayerCollector(api, logger=logger)
        self.match_ids = MatchIdCollector(api, logger=logger)
        self.details = MatchDetailStreamer(api, region=region or api.match_region, logger=logger)
        # every match of the run is linked before cleanup, so an empty link table is real
        self.reconciler = OrphanReconciler(store, allow_empty=True, logger=logger)
        self.accounts = AccountEnricher(api, logger=logger)
        self.leagues = LeagueEnricher(api, logger=logger)

        # run-scoped identifier sets
        self.seen_match_ids: Set[str] = set()
        self.seed_ids: Set[str] = set()
        self.discovered_ids: Set[str] = set()

    # -------------------------
    # stages
    # -------------------------

    def collect_seeds(self, tier: Tier, match_goal: int, divisions: Sequence[int],
                      pages: Sequence[int]) -> Set[str]:
        self.log.info("Stage 1 [%s]: collecting seed players", tier.label)
        entries = self.seeds.fetch(tier, divisions, pages)
        selected = self.sampler.select(entries, match_goal)
        upserted = self.store.upsert_players(PlayerRecord.from_entry(e) for e in selected)
        ids = set(upserted)
        self.seed_ids.update(ids)
        self.log.info("Seed list for %s: %d unique players", tier.label, len(ids))
        return ids

    def save_match(self, m: MatchResult) -> None:
        self.store.save_match(m)
        self.discovered_ids.update(m.participants)

    def collect_matches(self, player_ids: Set[str]) -> int:
        """Match ids for the players, then stream every id not fetched before."""
        ids = self.match_ids.collect(player_ids)
        fresh = ids - self.seen_match_ids
        self.seen_match_ids.update(ids)
        stored = self.store.known_match_ids(fresh)
        todo = fresh - stored
        self.log.info("Match ids: %d found, %d already seen this run, %d already stored, %d to download",
                      len(ids), len(ids) - len(fresh), len(stored), len(todo))
        if not todo:
            return 0
        return self.details.stream(todo, self.save_match)

    def snowball(self, match_goal: int) -> Set[str]:
        """Next-round seeds: participants seen this run that were never seeds."""
        candidates = sorted(self.discovered_ids - self.seed_ids)
        if not candidates:
            return set()
        picked = set(self.sampler.select(candidates, match_goal))
        self.seed_ids.update(picked)
        return picked

    def reconcile(self) -> int:
        self.log.info("Stage 3: deleting players without matches")
        if self.store.link_count() == 0:
            self.log.warning("No player-match links stored; every player of this run is an orphan")
        return self.reconciler.reconcile()

    def enrich_accounts(self, player_ids: Optional[Iterable[str]] = None) -> int:
        self.log.info("Stage 4: collecting account data")
        ids = list(player_ids) if player_ids is not None else self.store.all_player_ids()
        return self.accounts.enrich(ids, self.store.update_account)

    def enrich_leagues(self, player_ids: Optional[Iterable[str]] = None) -> int:
        self.log.info("Stage 5: collecting league data")
        ids = list(player_ids) if player_ids is not None else self.store.all_player_ids()
        return self.leagues.enrich(ids, self.store.update_league)

    # -------------------------
    # full run
    # -------------------------

    def run(self, tiers: List[Tier], match_goal: int, account: bool = True, league: bool = True,
            divisions: Sequence[int] = ALL_DIVISIONS, pages: Sequence[int] = (1,),
            snowball_rounds: int = 0) -> RunSummary:
        summary = RunSummary(tiers=[t.label for t in tiers])
        self.log.info("Starting collection: tiers=%s match_goal=%d", summary.tiers, match_goal)

        for tier in tiers:
            seeds = self.collect_seeds(tier, match_goal, divisions, pages)
            summary.seed_players += len(seeds)
            if not seeds:
                self.log.warning("No seed players for %s; skipping its match stage", tier.label)
                continue
            self.log.info("Stage 2 [%s]: collecting matches", tier.label)
            summary.matches_saved += self.collect_matches(seeds)

        for n in range(1, snowball_rounds + 1):
            seeds = self.snowball(match_goal)
            if not seeds:
                self.log.info("Snowball round %d: no new players, stopping", n)
                break
            self.log.info("Snowball round %d: %d players (e.g. %s)", n, len(seeds), short_id(next(iter(seeds))))
            summary.matches_saved += self.collect_matches(seeds)

        summary.match_ids = len(self.seen_match_ids)
        summary.discovered_players = len(self.discovered_ids - self.seed_ids)
        summary.orphans_deleted = self.reconcile()
        if account:
            summary.accounts_enriched = self.enrich_accounts()
        if league:
            summary.leagues_enriched = self.enrich_leagues()

        self.log.info("Data collection complete: %s", summary)
        return summary
