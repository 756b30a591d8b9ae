# seeds.py
# Seed players from the ranked ladder.
#   apex tiers  -> one /tft/league/v1/{tier} call, tier stamped onto entries
#   other tiers -> /tft/league/v1/entries/{TIER}/{DIV}?page=N per division x page;
#                  a failed or empty page is logged and skipped

import logging
from typing import List, Optional, Sequence

from .client import RiotApi
from .errors import ApiError, ValidationError
from .models import HighTierLeague, PlayerEntry, parse, parse_list
from .tiers import ALL_DIVISIONS, HighTier, LowTier, Tier, division_code

log = logging.getLogger(__name__)


class SeedPlayerCollector:
    def __init__(self, api: RiotApi, logger: Optional[logging.Logger] = None):
        self.api = api
        self.log = logger or log

    def fetch(self, tier: Tier, divisions: Sequence[int] = ALL_DIVISIONS,
              pages: Sequence[int] = (1,)) -> List[PlayerEntry]:
        return tier.fetch_seed_players(self, divisions, pages)

    def fetch_high_tier(self, tier: HighTier) -> List[PlayerEntry]:
        self.log.info("Fetching high tier players: %s", tier.label)
        league = parse(HighTierLeague, self.api.high_tier_league(tier.name))
        players = [e.model_copy(update={"tier": tier.label}) for e in league.entries]
        self.log.info("Total %s players: %d", tier.label, len(players))
        return players

    def fetch_low_tier_page(self, tier: LowTier, division: int, page: int) -> List[PlayerEntry]:
        payload = self.api.league_entries(tier.label, division_code(division), page)
        return [e.model_copy(update={"tier": e.tier.upper() or tier.label})
                for e in parse_list(PlayerEntry, payload)]

    def fetch_low_tier(self, tier: LowTier, divisions: Sequence[int],
                       pages: Sequence[int]) -> List[PlayerEntry]:
        self.log.info("Fetching low tier players: %s (divisions %s, pages %s)",
                      tier.label, list(divisions), list(pages))
        players: List[PlayerEntry] = []
        for division in divisions:
            code = division_code(division)
            for page in pages:
                try:
                    got = self.fetch_low_tier_page(tier, division, page)
                except (ApiError, ValidationError) as e:
                    self.log.warning("%s %s page=%d: error (status=%s): %s",
                                     tier.label, code, page, getattr(e, "status", None), e)
                    continue
                if not got:
                    self.log.info("%s %s page=%d: no players", tier.label, code, page)
                    continue
                self.log.info("%s %s page=%d: %d players", tier.label, code, page, len(got))
                players.extend(got)
        self.log.info("Total %s players: %d", tier.label, len(players))
        return players
