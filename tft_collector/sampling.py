# sampling.py
# Pick just enough seed players to reach a match goal:
#   players_needed = ceil(match_goal / MATCHES_PER_PLAYER)
# "random" = Fisher-Yates on a copy (inject a seeded random.Random for tests),
# "top"    = highest league points first.

import logging
import math
import random
from typing import List, Optional, Sequence, TypeVar

from .errors import InvalidArgument
from .models import MATCHES_PER_PLAYER

T = TypeVar("T")

STRATEGIES = ("random", "top")

log = logging.getLogger(__name__)


def players_needed(match_goal: int, matches_per_player: int = MATCHES_PER_PLAYER) -> int:
    if match_goal <= 0:
        raise InvalidArgument(f"match goal must be positive, got {match_goal}")
    return math.ceil(match_goal / matches_per_player)


class PlayerSampler:
    def __init__(self, strategy: str = "random", rng: Optional[random.Random] = None,
                 matches_per_player: int = MATCHES_PER_PLAYER,
                 logger: Optional[logging.Logger] = None):
        if strategy not in STRATEGIES:
            raise InvalidArgument(f"unknown sampling strategy: {strategy!r}")
        self.strategy = strategy
        self.rng = rng or random.Random()
        self.matches_per_player = matches_per_player
        self.log = logger or log

    def select(self, players: Sequence[T], match_goal: int) -> List[T]:
        needed = players_needed(match_goal, self.matches_per_player)
        self.log.info("Match goal %d: %d players needed, %d available", match_goal, needed, len(players))
        if needed >= len(players):
            return list(players)
        if self.strategy == "top":
            return self.select_top(players, needed)
        return self.select_random(players, needed)

    def select_random(self, players: Sequence[T], n: int) -> List[T]:
        shuffled = list(players)
        for i in range(len(shuffled) - 1, 0, -1):
            j = self.rng.randint(0, i)
            shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
        return shuffled[:n]

    def select_top(self, players: Sequence[T], n: int) -> List[T]:
        ranked = sorted(players, key=lambda p: getattr(p, "leaguePoints", 0), reverse=True)
        top = ranked[:n]
        self.log.info("Selected top %d players (%s - %s LP)", len(top),
                      getattr(top[0], "leaguePoints", "?"), getattr(top[-1], "leaguePoints", "?"))
        return top
