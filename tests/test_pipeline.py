import random

import pytest

from tft_collector.errors import TransientNetworkError
from tft_collector.models import STUB_TIER
from tft_collector.pipeline import Collector
from tft_collector.sampling import PlayerSampler
from tft_collector.tiers import parse_tiers

from tests.helpers import FakeApi, account, entry, high_league, league_entry, lobby

X = [f"X{i}" for i in range(1, 8)]
Y = [f"Y{i}" for i in range(1, 7)]


def challenger_api():
    everyone = ["C1", "C2"] + X + Y
    return FakeApi(
        high={"challenger": high_league("challenger", [entry("C1", 1000), entry("C2", 900), entry("C3", 800)])},
        match_ids={
            "C1": ["M1", "M2"],
            "C2": ["M2", "M3"],
            "C3": TransientNetworkError("server error", status=500),
        },
        matches={
            "M1": lobby("M1", ["C1"] + X),
            "M2": lobby("M2", ["C1", "C2"] + Y),
            "M3": lobby("M3", ["C2"] + Y),
        },
        accounts={p: account(p, name=f"name-{p}") for p in everyone if p != "X7"},
        leagues={
            "C1": [league_entry("C1", tier="CHALLENGER", rank="I", lp=1000)],
            "X1": [league_entry("X1")],
            "Y1": [league_entry("Y1", queue="RANKED_TFT_TURBO")],
        },
    )


def collector(api, store, seed=1):
    return Collector(api, store, sampler=PlayerSampler(rng=random.Random(seed)))


def test_full_run(store):
    api = challenger_api()
    s = collector(api, store).run(parse_tiers(["challenger"]), 60)

    assert s.tiers == ["CHALLENGER"]
    assert s.seed_players == 3
    assert s.match_ids == 3
    assert s.matches_saved == 2
    assert s.discovered_players == 13
    assert s.orphans_deleted == 1
    assert s.accounts_enriched == 14
    assert s.leagues_enriched == 2

    assert store.match_count() == 2
    assert store.get_player("C3") is None
    assert store.player_count() == 15
    assert store.match_participants("M2") == sorted(["C1", "C2"] + Y)
    assert store.get_player("X1").tier == "GOLD"
    assert store.get_player("Y1").tier == STUB_TIER
    assert store.get_player("X7").game_name is None
    assert store.get_player("C2").game_name == "name-C2"
    assert sorted(api.calls_of("match")) == ["M1", "M2", "M3"]


def test_rerun_skips_stored_matches(store):
    collector(challenger_api(), store).run(parse_tiers(["challenger"]), 60, account=False, league=False)
    api = challenger_api()
    s = collector(api, store).run(parse_tiers(["challenger"]), 60, account=False, league=False)
    assert s.matches_saved == 0
    assert api.calls_of("match") == ["M3"]
    assert store.match_count() == 2


def test_match_shared_across_tiers_is_fetched_once(store):
    others = [f"O{i}" for i in range(1, 7)]
    api = FakeApi(
        high={
            "challenger": high_league("challenger", [entry("C1")]),
            "grandmaster": high_league("grandmaster", [entry("G1")]),
        },
        match_ids={"C1": ["M1"], "G1": ["M1", "M2"]},
        matches={
            "M1": lobby("M1", ["C1", "G1"] + others),
            "M2": lobby("M2", ["G1"] + [f"Z{i}" for i in range(1, 8)]),
        },
    )
    s = collector(api, store).run(parse_tiers(["challenger", "grandmaster"]), 20,
                                  account=False, league=False)
    assert sorted(api.calls_of("match")) == ["M1", "M2"]
    assert s.matches_saved == 2
    assert s.match_ids == 2
    assert store.get_player("G1").tier == "GRANDMASTER"


def test_snowball_round_seeds_from_discovered_players(store):
    d = [f"D{i}" for i in range(1, 8)]
    api = FakeApi(
        high={"master": high_league("master", [entry("S1")])},
        match_ids=dict({"S1": ["M1"]}, **{p: ["M1", "M2"] for p in d}),
        matches={
            "M1": lobby("M1", ["S1"] + d),
            "M2": lobby("M2", d + ["E1"]),
        },
    )
    s = collector(api, store, seed=0).run(parse_tiers(["master"]), 20, account=False,
                                          league=False, snowball_rounds=1)
    assert s.matches_saved == 2
    assert len(api.calls_of("match_ids")) == 2
    assert api.calls_of("match_ids")[1] in d
    assert store.match_count() == 2
    assert store.get_player("E1") is not None


def test_tier_without_seeds_is_skipped(store):
    s = collector(FakeApi(), store).run(parse_tiers(["gold"]), 20, divisions=[1], pages=[1])
    assert s.seed_players == 0
    assert s.matches_saved == 0
    assert s.orphans_deleted == 0


def test_seed_failure_ends_the_run(store):
    api = FakeApi(high={"challenger": TransientNetworkError("unavailable", status=503)})
    with pytest.raises(TransientNetworkError):
        collector(api, store).run(parse_tiers(["challenger"]), 20)


def test_seeds_without_matches_are_cleaned_up(store):
    api = FakeApi(
        low={("GOLD", "I", 1): [entry("G1", tier="GOLD"), entry("G2", tier="GOLD")]},
        match_ids={"G1": TransientNetworkError("server error", status=500), "G2": []},
        accounts={"G1": account("G1"), "G2": account("G2")},
    )
    s = collector(api, store).run(parse_tiers(["gold"]), 40, divisions=[1], pages=[1])
    assert s.seed_players == 2
    assert s.matches_saved == 0
    assert s.orphans_deleted == 2
    assert store.all_player_ids() == []
    assert s.accounts_enriched == 0
    assert api.calls_of("account") == []
