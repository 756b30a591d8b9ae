# models.py
# Upstream payload shapes (pydantic, camelCase as the API sends them) and the
# plain records handed to the store.

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type, TypeVar

import pydantic
from pydantic import BaseModel

from .errors import ValidationError

MATCHES_PER_PLAYER = 20     # match-v1 ids per call cap
PLAYERS_PER_MATCH = 8       # TFT lobby size
RANKED_QUEUE = "RANKED_TFT"

STUB_TIER = "UNKNOWN"

M = TypeVar("M", bound=BaseModel)

# -------------------------
# League-v1
# -------------------------

class PlayerEntry(BaseModel):
    """Ladder entry. Apex ladders omit `tier`; the seed collector stamps it."""
    puuid: str
    tier: str = ""
    rank: str
    leaguePoints: int
    wins: int
    losses: int
    veteran: bool = False
    inactive: bool = False
    freshBlood: bool = False
    hotStreak: bool = False
    leagueId: Optional[str] = None
    queueType: Optional[str] = None


class HighTierLeague(BaseModel):
    """GET /tft/league/v1/{challenger|grandmaster|master}"""
    tier: str
    leagueId: str
    queue: str
    name: Optional[str] = None
    entries: List[PlayerEntry]


class LeagueEntry(BaseModel):
    """One queue entry from GET /tft/league/v1/by-puuid/{puuid}."""
    puuid: Optional[str] = None
    leagueId: Optional[str] = None
    queueType: str
    tier: str = ""
    rank: str = ""
    leaguePoints: int = 0
    wins: int = 0
    losses: int = 0
    veteran: bool = False
    inactive: bool = False
    freshBlood: bool = False
    hotStreak: bool = False

# -------------------------
# Account-v1
# -------------------------

class Account(BaseModel):
    puuid: str
    gameName: str
    tagLine: str

# -------------------------
# Match-v1
# -------------------------

class Participant(BaseModel):
    puuid: str
    placement: int
    level: Optional[int] = None
    gold_left: Optional[int] = None
    last_round: Optional[int] = None
    players_eliminated: Optional[int] = None
    total_damage_to_players: Optional[int] = None
    riotIdGameName: Optional[str] = None
    riotIdTagline: Optional[str] = None
    win: Optional[bool] = None


class MatchMetadata(BaseModel):
    data_version: Optional[str] = None
    match_id: str
    participants: List[str]


class MatchInfo(BaseModel):
    game_datetime: int
    game_length: float
    game_version: Optional[str] = None
    queue_id: int
    tft_game_type: Optional[str] = None
    tft_set_number: Optional[int] = None
    participants: List[Participant]


class Match(BaseModel):
    metadata: MatchMetadata
    info: MatchInfo

# -------------------------
# parsing
# -------------------------

def parse(model: Type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(f"{model.__name__}: {e.error_count()} validation error(s): {e.errors()[0]['msg']}") from e


def parse_list(model: Type[M], payload: Any) -> List[M]:
    if not isinstance(payload, list):
        raise ValidationError(f"expected a list of {model.__name__}, got {type(payload).__name__}")
    return [parse(model, item) for item in payload]


def parse_match_ids(payload: Any) -> List[str]:
    if not isinstance(payload, list) or not all(isinstance(x, str) for x in payload):
        raise ValidationError("expected a list of match id strings")
    return payload

# -------------------------
# records for the store
# -------------------------

@dataclass
class PlayerRecord:
    puuid: str
    tier: str = STUB_TIER
    rank: Optional[str] = None
    league_points: int = 0
    wins: int = 0
    losses: int = 0
    veteran: bool = False
    inactive: bool = False
    fresh_blood: bool = False
    hot_streak: bool = False
    game_name: Optional[str] = None
    tag_line: Optional[str] = None

    @classmethod
    def from_entry(cls, e: "PlayerEntry") -> "PlayerRecord":
        return cls(
            puuid=e.puuid,
            tier=e.tier.upper(),
            rank=e.rank,
            league_points=e.leaguePoints,
            wins=e.wins,
            losses=e.losses,
            veteran=e.veteran,
            inactive=e.inactive,
            fresh_blood=e.freshBlood,
            hot_streak=e.hotStreak,
        )

    @classmethod
    def from_league(cls, e: "LeagueEntry", puuid: str) -> "PlayerRecord":
        return cls(
            puuid=puuid,
            tier=e.tier.upper(),
            rank=e.rank,
            league_points=e.leaguePoints,
            wins=e.wins,
            losses=e.losses,
            veteran=e.veteran,
            inactive=e.inactive,
            fresh_blood=e.freshBlood,
            hot_streak=e.hotStreak,
        )


@dataclass
class MatchResult:
    """One fetched match, handed to the persistence callback."""
    match_id: str
    data: Dict[str, Any]
    participants: List[str]
    region: str = ""
    game_datetime: Optional[int] = None
    queue_id: Optional[int] = None
    tft_set_number: Optional[int] = None

    @classmethod
    def from_match(cls, match_id: str, raw: Dict[str, Any], m: Match, region: str = "") -> "MatchResult":
        return cls(
            match_id=match_id,
            data=raw,
            participants=[p.puuid for p in m.info.participants],
            region=region,
            game_datetime=m.info.game_datetime,
            queue_id=m.info.queue_id,
            tft_set_number=m.info.tft_set_number,
        )


@dataclass
class AccountRecord:
    puuid: str
    game_name: str
    tag_line: str


@dataclass
class RunSummary:
    tiers: List[str] = field(default_factory=list)
    seed_players: int = 0
    match_ids: int = 0
    matches_saved: int = 0
    discovered_players: int = 0
    orphans_deleted: int = 0
    accounts_enriched: int = 0
    leagues_enriched: int = 0
