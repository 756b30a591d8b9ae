import logging
import os

import pytest

from tft_collector.config import (DB_PATH_DEFAULT, LOG_DIR_DEFAULT, Settings, local_paths_from_env,
                                  platform_to_region, region_to_account_region)
from tft_collector.errors import ConfigError
from tft_collector.log import setup_logging, short_id


def test_defaults_route_vn2_to_sea():
    s = Settings.from_env({"RIOT_API_KEY": " RGAPI-abc "})
    assert s.api_key == "RGAPI-abc"
    assert (s.platform, s.match_region, s.account_region) == ("vn2", "sea", "asia")
    assert s.min_interval == 1.3
    assert (s.db_path, s.log_dir) == (DB_PATH_DEFAULT, LOG_DIR_DEFAULT)


def test_overrides():
    s = Settings.from_env({
        "RIOT_API_KEY": "k",
        "RIOT_PLATFORM": "EUW1",
        "RIOT_MIN_INTERVAL": "0",
        "COLLECTOR_DB": "/tmp/x.db",
    })
    assert (s.platform, s.match_region, s.account_region) == ("euw1", "europe", "europe")
    assert s.min_interval == 0
    assert s.db_path == "/tmp/x.db"


@pytest.mark.parametrize("environ", [
    {},
    {"RIOT_API_KEY": "   "},
    {"RIOT_API_KEY": "k", "RIOT_MIN_INTERVAL": "fast"},
    {"RIOT_API_KEY": "k", "RIOT_MIN_INTERVAL": "-1"},
    {"RIOT_API_KEY": "k", "RIOT_PLATFORM": "moon1"},
])
def test_bad_settings(environ):
    with pytest.raises(ConfigError):
        Settings.from_env(environ)


def test_region_tables():
    assert platform_to_region("kr") == "asia"
    assert platform_to_region("NA1") == "americas"
    assert region_to_account_region("sea") == "asia"
    with pytest.raises(ConfigError):
        region_to_account_region("mars")


def test_local_paths():
    assert local_paths_from_env({}) == (DB_PATH_DEFAULT, LOG_DIR_DEFAULT)
    assert local_paths_from_env({"COLLECTOR_DB": "a.db", "COLLECTOR_LOG_DIR": "l"}) == ("a.db", "l")


def test_setup_logging_writes_file(tmp_path):
    logger = setup_logging(str(tmp_path / "logs"), logging.DEBUG)
    logging.getLogger("tft_collector.pipeline").info("hello collector")
    for h in logger.handlers:
        h.flush()
    with open(os.path.join(str(tmp_path), "logs", "collector.log"), encoding="utf-8") as f:
        line = f.read()
    assert "[INFO] tft_collector.pipeline: hello collector" in line


def test_setup_logging_is_repeatable(tmp_path):
    setup_logging(str(tmp_path))
    logger = setup_logging(str(tmp_path))
    assert len(logger.handlers) == 2


def test_short_id():
    assert short_id("abcdefghijklmnop") == "abcdefghij..."
    assert short_id("abc") == "abc"
