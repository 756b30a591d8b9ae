# cli.py
# Riot TFT ranked-match collector (SQLite, throttled)
#
# CLI:
#   python -m tft_collector init-db
#   python -m tft_collector collect challenger grandmaster 400 --account on --league on
#   python -m tft_collector collect all 200 --divisions 1,2 --pages 1,2 --strategy top
#   python -m tft_collector collect diamond 1000 --snowball 2 --seed 42
#   python -m tft_collector cleanup
#   python -m tft_collector enrich-accounts --missing-only
#   python -m tft_collector enrich-league --missing-only
#   python -m tft_collector status
#
# Env: see config.py (RIOT_API_KEY must be set for commands that call the API).

import argparse
import logging
import random
import sys
from typing import List, Optional

from .client import RateLimitedClient, RiotApi
from .config import DB_PATH_DEFAULT, LOG_DIR_DEFAULT, Settings, local_paths_from_env
from .errors import CollectorError, InvalidArgument
from .log import setup_logging
from .pipeline import Collector
from .reconcile import OrphanReconciler
from .sampling import STRATEGIES, PlayerSampler
from .store import Store
from .tiers import ALL_TIERS, DIVISIONS, parse_tiers

API_COMMANDS = ("collect", "enrich-accounts", "enrich-league")

# -------------------------
# argument types (all validation happens before any network call)
# -------------------------

def positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value!r}")
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value!r}")
    return n


def non_negative_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be a non-negative integer, got {value!r}")
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be a non-negative integer, got {value!r}")
    return n


def non_negative_float(value: str) -> float:
    try:
        x = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be a non-negative number, got {value!r}")
    if x < 0:
        raise argparse.ArgumentTypeError(f"must be a non-negative number, got {value!r}")
    return x


def on_off(value: str) -> bool:
    v = value.strip().lower()
    if v not in ("on", "off"):
        raise argparse.ArgumentTypeError(f"must be 'on' or 'off', got {value!r}")
    return v == "on"


def tier_name(value: str) -> str:
    v = value.strip().lower()
    if v != "all" and v not in ALL_TIERS:
        raise argparse.ArgumentTypeError(
            f"invalid tier {value!r}; choose from {', '.join(ALL_TIERS)} or 'all'")
    return v


def int_list(value: str) -> List[int]:
    try:
        out = [int(x) for x in value.split(",") if x.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated integers, got {value!r}")
    if not out or any(n <= 0 for n in out):
        raise argparse.ArgumentTypeError(f"expected positive integers, got {value!r}")
    return out


def division_list(value: str) -> List[int]:
    out = int_list(value)
    bad = [n for n in out if n not in DIVISIONS]
    if bad:
        raise argparse.ArgumentTypeError(f"divisions must be 1-4, got {bad}")
    return out

# -------------------------
# parser
# -------------------------

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="tft-collector",
                                 description="Riot TFT ranked-match collector (SQLite, throttled)")
    ap.add_argument("--log-dir", default=None, help=f"log directory (default env or {LOG_DIR_DEFAULT})")
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="cmd", required=True)

    def db_arg(p):
        p.add_argument("--db", default=None, help=f"sqlite path (default env or {DB_PATH_DEFAULT})")

    p_init = sub.add_parser("init-db")
    db_arg(p_init)

    p_col = sub.add_parser("collect", help="seed -> matches -> cleanup -> enrichment")
    p_col.add_argument("tiers", nargs="+", type=tier_name, metavar="TIER",
                       help="one or more tiers, or 'all'")
    p_col.add_argument("match_goal", type=positive_int, metavar="MATCH_GOAL",
                       help="matches to aim for per tier")
    p_col.add_argument("--account", type=on_off, default=True, metavar="on|off")
    p_col.add_argument("--league", type=on_off, default=True, metavar="on|off")
    p_col.add_argument("--divisions", type=division_list, default=[1, 2, 3, 4])
    p_col.add_argument("--pages", type=int_list, default=[1])
    p_col.add_argument("--strategy", choices=STRATEGIES, default="random")
    p_col.add_argument("--snowball", type=non_negative_int, default=0,
                       help="extra rounds seeded from discovered participants")
    p_col.add_argument("--seed", type=int, default=None, help="rng seed for random sampling")
    p_col.add_argument("--min-interval", type=non_negative_float, default=None,
                       help="seconds slept after each request (throttle)")
    db_arg(p_col)

    p_clean = sub.add_parser("cleanup", help="delete players without matches")
    db_arg(p_clean)

    for name in ("enrich-accounts", "enrich-league"):
        p = sub.add_parser(name)
        p.add_argument("--missing-only", action="store_true",
                       help="only players whose data was never fetched")
        p.add_argument("--min-interval", type=non_negative_float, default=None)
        db_arg(p)

    p_stat = sub.add_parser("status")
    db_arg(p_stat)
    return ap

# -------------------------
# commands
# -------------------------

def make_api(settings: Settings, min_interval: Optional[float] = None) -> RiotApi:
    delay = settings.min_interval if min_interval is None else min_interval
    client = RateLimitedClient(settings.api_key, delay=delay)
    return RiotApi(client, settings.platform, settings.match_region, settings.account_region)


def open_store(path: str) -> Store:
    store = Store(path)
    store.init_schema()
    return store


def cmd_collect(args, settings: Settings, store: Store) -> int:
    tiers = parse_tiers(args.tiers)
    rng = random.Random(args.seed) if args.seed is not None else None
    api = make_api(settings, args.min_interval)
    collector = Collector(api, store, sampler=PlayerSampler(args.strategy, rng=rng))
    s = collector.run(tiers, args.match_goal, account=args.account, league=args.league,
                      divisions=args.divisions, pages=args.pages, snowball_rounds=args.snowball)
    print(f"tiers: {', '.join(s.tiers)}")
    print(f"seed players: {s.seed_players} | unique match ids: {s.match_ids} | matches saved: {s.matches_saved}")
    print(f"discovered players: {s.discovered_players} | orphans deleted: {s.orphans_deleted}")
    print(f"accounts enriched: {s.accounts_enriched} | leagues enriched: {s.leagues_enriched}")
    return 0


def cmd_enrich(args, settings: Settings, store: Store) -> int:
    collector = Collector(make_api(settings, args.min_interval), store)
    if args.cmd == "enrich-accounts":
        ids = store.players_missing_account() if args.missing_only else None
        n = collector.enrich_accounts(ids)
    else:
        ids = store.players_missing_league() if args.missing_only else None
        n = collector.enrich_leagues(ids)
    print(f"Enriched {n} players")
    return 0


def cmd_status(store: Store) -> int:
    st = store.status()
    print(f"players: {st['players']} (missing account: {st['missing_account']}, "
          f"missing league: {st['missing_league']}, orphans: {st['orphans']})")
    print(f"matches: {st['matches']} | links: {st['links']}")
    print("players by tier:")
    for tier, c in st["by_tier"]:
        print(f"  {tier}: {c}")
    print("matches by set:")
    for set_no, c in st["by_set"]:
        print(f"  {set_no}: {c}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = None
        if args.cmd in API_COMMANDS:
            settings = Settings.from_env()
            db_path, log_dir = settings.db_path, settings.log_dir
        else:
            db_path, log_dir = local_paths_from_env()
        setup_logging(args.log_dir or log_dir, logging.DEBUG if args.verbose else logging.INFO)

        db_path = args.db or db_path
        with open_store(db_path) as store:
            if args.cmd == "init-db":
                print(f"Initialized DB at {db_path}")
                return 0
            if args.cmd == "collect":
                return cmd_collect(args, settings, store)
            if args.cmd in ("enrich-accounts", "enrich-league"):
                return cmd_enrich(args, settings, store)
            if args.cmd == "cleanup":
                n = OrphanReconciler(store).reconcile()
                print(f"Deleted {n} orphaned players")
                return 0
            if args.cmd == "status":
                return cmd_status(store)
            raise InvalidArgument(f"unknown command: {args.cmd}")
    except CollectorError as e:
        logging.getLogger("tft_collector").error("Fatal: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
