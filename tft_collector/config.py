# config.py
# Environment-driven settings. A local .env file is merged first (python-dotenv).
#
# Env:
#   RIOT_API_KEY        required
#   RIOT_PLATFORM       league host, default vn2
#   RIOT_MATCH_REGION   match host, default derived from platform
#   RIOT_ACCOUNT_REGION account host, default derived from match region
#   RIOT_MIN_INTERVAL   seconds slept after every successful call (default 1.3)
#   COLLECTOR_DB        sqlite path (default riot_tft.db)
#   COLLECTOR_LOG_DIR   log directory (default logs)

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from .errors import ConfigError

DB_PATH_DEFAULT = "riot_tft.db"
LOG_DIR_DEFAULT = "logs"

# ~100 requests / 120s => <= 0.83 rps => ~1.2–1.3s between calls
MIN_INTERVAL_DEFAULT = 1.3


def platform_to_region(platform: str) -> str:
    p = platform.lower()
    if p in {"na1","br1","la1","la2","oc1"}: return "americas"
    if p in {"euw1","eun1","tr1","ru","me1"}: return "europe"
    if p in {"kr","jp1"}:                     return "asia"
    if p in {"ph2","sg2","th2","tw2","vn2"}:  return "sea"
    raise ConfigError(f"Unknown platform: {platform}")


def region_to_account_region(region: str) -> str:
    # account-v1 is only served from americas / europe / asia
    r = region.lower()
    if r == "sea":
        return "asia"
    if r in {"americas", "europe", "asia"}:
        return r
    raise ConfigError(f"Unknown match region: {region}")


def local_paths_from_env(environ: Optional[Mapping[str, str]] = None) -> Tuple[str, str]:
    """(db_path, log_dir) for commands that never call the API."""
    if environ is None:
        load_dotenv()
        environ = os.environ
    return (environ.get("COLLECTOR_DB") or DB_PATH_DEFAULT,
            environ.get("COLLECTOR_LOG_DIR") or LOG_DIR_DEFAULT)


@dataclass(frozen=True)
class Settings:
    api_key: str
    platform: str = "vn2"
    match_region: str = "sea"
    account_region: str = "asia"
    min_interval: float = MIN_INTERVAL_DEFAULT
    db_path: str = DB_PATH_DEFAULT
    log_dir: str = LOG_DIR_DEFAULT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 use_dotenv: bool = True) -> "Settings":
        if environ is None:
            if use_dotenv:
                load_dotenv()
            environ = os.environ

        api_key = (environ.get("RIOT_API_KEY") or "").strip()
        if not api_key:
            raise ConfigError("RIOT_API_KEY is not set (environment or .env)")

        platform = (environ.get("RIOT_PLATFORM") or "vn2").strip().lower()
        match_region = (environ.get("RIOT_MATCH_REGION") or platform_to_region(platform)).strip().lower()
        account_region = (environ.get("RIOT_ACCOUNT_REGION") or region_to_account_region(match_region)).strip().lower()

        raw_interval = environ.get("RIOT_MIN_INTERVAL", str(MIN_INTERVAL_DEFAULT))
        try:
            min_interval = float(raw_interval)
        except ValueError:
            raise ConfigError(f"RIOT_MIN_INTERVAL must be a number, got {raw_interval!r}")
        if min_interval < 0:
            raise ConfigError("RIOT_MIN_INTERVAL must not be negative")

        return cls(
            api_key=api_key,
            platform=platform,
            match_region=match_region,
            account_region=account_region,
            min_interval=min_interval,
            db_path=environ.get("COLLECTOR_DB") or DB_PATH_DEFAULT,
            log_dir=environ.get("COLLECTOR_LOG_DIR") or LOG_DIR_DEFAULT,
        )
