# tiers.py
# Ranked ladder bands as a closed variant: HighTier (single unpaginated
# ladder call) or LowTier (division x page entries). classify_tier() is the
# only place the split is decided.

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Sequence, Union

from .errors import InvalidArgument

if TYPE_CHECKING:
    from .models import PlayerEntry
    from .seeds import SeedPlayerCollector

HIGH_TIERS = ("challenger", "grandmaster", "master")
LOW_TIERS = ("diamond", "emerald", "platinum", "gold", "silver", "bronze", "iron")
ALL_TIERS = HIGH_TIERS + LOW_TIERS

DIVISIONS = {1: "I", 2: "II", 3: "III", 4: "IV"}
ALL_DIVISIONS = (1, 2, 3, 4)


@dataclass(frozen=True)
class HighTier:
    name: str

    @property
    def label(self) -> str:
        return self.name.upper()

    def fetch_seed_players(self, collector: "SeedPlayerCollector",
                           divisions: Sequence[int], pages: Sequence[int]) -> List["PlayerEntry"]:
        return collector.fetch_high_tier(self)


@dataclass(frozen=True)
class LowTier:
    name: str

    @property
    def label(self) -> str:
        return self.name.upper()

    def fetch_seed_players(self, collector: "SeedPlayerCollector",
                           divisions: Sequence[int], pages: Sequence[int]) -> List["PlayerEntry"]:
        return collector.fetch_low_tier(self, divisions, pages)


Tier = Union[HighTier, LowTier]


def classify_tier(name: str) -> Tier:
    t = name.strip().lower()
    if t in HIGH_TIERS:
        return HighTier(t)
    if t in LOW_TIERS:
        return LowTier(t)
    raise InvalidArgument(f"Invalid tier: {name!r}. Must be one of: {', '.join(ALL_TIERS)} or 'all'")


def parse_tiers(values: Iterable[str]) -> List[Tier]:
    """Tier names (any case) or the literal 'all' -> ordered, de-duplicated tiers."""
    out: List[Tier] = []
    for v in values:
        names = ALL_TIERS if v.strip().lower() == "all" else (v,)
        for n in names:
            tier = classify_tier(n)
            if tier not in out:
                out.append(tier)
    if not out:
        raise InvalidArgument("At least one tier is required")
    return out


def division_code(division: int) -> str:
    try:
        return DIVISIONS[division]
    except KeyError:
        raise InvalidArgument(f"Invalid division: {division!r}. Must be 1-4")
