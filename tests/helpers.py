# tests/helpers.py
# Fake API and payload builders shared by the tests.

from tft_collector.errors import NotFound


class FakeApi:
    """Stands in for RiotApi. Tables map a key to a payload or an exception
    instance; a missing key is a 404 (except ladder pages, which are empty)."""

    match_region = "sea"

    def __init__(self, high=None, low=None, match_ids=None, matches=None,
                 accounts=None, leagues=None):
        self.high = high or {}
        self.low = low or {}
        self.match_id_lists = match_ids or {}
        self.matches = matches or {}
        self.accounts = accounts or {}
        self.leagues = leagues or {}
        self.calls = []

    def _get(self, table, key, kind, default=NotFound):
        self.calls.append((kind, key))
        if key not in table:
            if default is NotFound:
                raise NotFound(f"{kind} {key} not found", status=404)
            return default
        value = table[key]
        if isinstance(value, Exception):
            raise value
        return value

    def calls_of(self, kind):
        return [key for k, key in self.calls if k == kind]

    def high_tier_league(self, tier):
        return self._get(self.high, tier.lower(), "high")

    def league_entries(self, tier, division, page=1):
        return self._get(self.low, (tier, division, page), "entries", default=[])

    def league_by_puuid(self, puuid):
        return self._get(self.leagues, puuid, "league")

    def match_ids_by_puuid(self, puuid, count=20):
        return self._get(self.match_id_lists, puuid, "match_ids")

    def match(self, match_id):
        return self._get(self.matches, match_id, "match")

    def account_by_puuid(self, puuid):
        return self._get(self.accounts, puuid, "account")


def entry(puuid, lp=100, tier=None, rank="I", **extra):
    e = {
        "puuid": puuid,
        "rank": rank,
        "leaguePoints": lp,
        "wins": 10,
        "losses": 8,
        "veteran": False,
        "inactive": False,
        "freshBlood": False,
        "hotStreak": False,
    }
    if tier is not None:
        e.update({"tier": tier, "leagueId": "league-1", "queueType": "RANKED_TFT"})
    e.update(extra)
    return e


def high_league(tier, entries):
    return {"tier": tier.upper(), "leagueId": "league-apex", "queue": "RANKED_TFT",
            "name": "Apex League", "entries": entries}


def lobby(match_id, puuids, set_number=14):
    return {
        "metadata": {"data_version": "6", "match_id": match_id, "participants": list(puuids)},
        "info": {
            "game_datetime": 1760000000000,
            "game_length": 2100.5,
            "game_version": "Version 15.20",
            "queue_id": 1100,
            "tft_game_type": "standard",
            "tft_set_number": set_number,
            "participants": [
                {"puuid": p, "placement": i + 1, "level": 8, "gold_left": 3}
                for i, p in enumerate(puuids)
            ],
        },
    }


def league_entry(puuid, queue="RANKED_TFT", tier="GOLD", rank="II", lp=42, wins=30, losses=25, **extra):
    e = {
        "puuid": puuid,
        "leagueId": f"league-{queue}",
        "queueType": queue,
        "tier": tier,
        "rank": rank,
        "leaguePoints": lp,
        "wins": wins,
        "losses": losses,
        "veteran": False,
        "inactive": False,
        "freshBlood": True,
        "hotStreak": False,
    }
    e.update(extra)
    return e


def account(puuid, name="Player", tag="VN2"):
    return {"puuid": puuid, "gameName": name, "tagLine": tag}


