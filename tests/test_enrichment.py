import logging

from tft_collector.enrichment import AccountEnricher, LeagueEnricher
from tft_collector.errors import TransientNetworkError
from tft_collector.models import STUB_TIER

from tests.helpers import FakeApi, account, league_entry


def test_turbo_only_player_is_skipped_with_warning(store, caplog):
    store.upsert_player_stubs(["T1"])
    api = FakeApi(leagues={"T1": [league_entry("T1", queue="RANKED_TFT_TURBO", tier="", rank="")]})
    with caplog.at_level(logging.WARNING, logger="tft_collector"):
        n = LeagueEnricher(api).enrich(["T1"], store.update_league)
    assert n == 0
    assert store.get_player("T1").tier == STUB_TIER
    assert any("no RANKED_TFT entry" in r.getMessage() for r in caplog.records)


def test_ranked_entry_replaces_stub(store):
    store.upsert_player_stubs(["P1"])
    api = FakeApi(leagues={"P1": [
        league_entry("P1", queue="RANKED_TFT_DOUBLE_UP", tier="DIAMOND"),
        league_entry("P1", tier="gold", rank="II", lp=42, wins=30, losses=25),
    ]})
    assert LeagueEnricher(api).enrich(["P1"], store.update_league) == 1
    p = store.get_player("P1")
    assert (p.tier, p.rank, p.league_points, p.wins, p.losses) == ("GOLD", "II", 42, 30, 25)
    assert p.fresh_blood is True
    assert store.players_missing_league() == []


def test_empty_league_list_is_skipped(store):
    store.upsert_player_stubs(["U1"])
    assert LeagueEnricher(FakeApi(leagues={"U1": []})).enrich(["U1"], store.update_league) == 0


def test_accounts_skip_404_and_errors(store):
    store.upsert_player_stubs(["A1", "A2", "A3", "A4"])
    api = FakeApi(accounts={
        "A1": account("A1", "One", "VN2"),
        "A3": TransientNetworkError("timeout"),
        "A4": {"puuid": "A4"},
    })
    assert AccountEnricher(api).enrich(store.all_player_ids(), store.update_account) == 1
    assert store.get_player("A1").game_name == "One"
    assert store.players_missing_account() == ["A2", "A3", "A4"]
    assert api.calls_of("account") == ["A1", "A2", "A3", "A4"]


def test_save_failure_is_logged_and_counted_out(store, caplog):
    api = FakeApi(accounts={"ghost": account("ghost"), "A1": account("A1")})
    store.upsert_player_stubs(["A1"])
    with caplog.at_level(logging.ERROR, logger="tft_collector"):
        n = AccountEnricher(api).enrich(["ghost", "A1"], store.update_account)
    assert n == 1
    assert any("failed to save" in r.getMessage() for r in caplog.records)
