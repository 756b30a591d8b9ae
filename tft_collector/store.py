# store.py
# SQLite persistence: players, matches, player_match_links.
# All writes are idempotent upserts; a match, its player stubs and its links
# go in one transaction so a link never points at a missing row.

import json
import sqlite3
import time
from typing import Dict, Iterable, List, Optional, Set

from .errors import PersistenceError
from .models import STUB_TIER, AccountRecord, MatchResult, PlayerRecord

DDL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS players (
  puuid         TEXT PRIMARY KEY,
  game_name     TEXT,                 -- account display name
  tag_line      TEXT,                 -- account discriminator
  tier          TEXT NOT NULL DEFAULT 'UNKNOWN',
  rank          TEXT,                 -- division I..IV
  league_points INTEGER NOT NULL DEFAULT 0,
  wins          INTEGER NOT NULL DEFAULT 0,
  losses        INTEGER NOT NULL DEFAULT 0,
  veteran       INTEGER NOT NULL DEFAULT 0,
  inactive      INTEGER NOT NULL DEFAULT 0,
  fresh_blood   INTEGER NOT NULL DEFAULT 0,
  hot_streak    INTEGER NOT NULL DEFAULT 0,
  updated_at    INTEGER               -- unix seconds of last league/account write
);

CREATE TABLE IF NOT EXISTS matches (
  match_id       TEXT PRIMARY KEY,
  data           TEXT NOT NULL,       -- full match JSON
  region         TEXT NOT NULL,
  is_processed   INTEGER NOT NULL DEFAULT 0,
  game_datetime  INTEGER,             -- unix ms
  queue_id       INTEGER,
  tft_set_number INTEGER,
  collected_at   INTEGER
);

CREATE TABLE IF NOT EXISTS player_match_links (
  puuid    TEXT NOT NULL,
  match_id TEXT NOT NULL,
  PRIMARY KEY (puuid, match_id),
  FOREIGN KEY (puuid) REFERENCES players(puuid) ON DELETE CASCADE,
  FOREIGN KEY (match_id) REFERENCES matches(match_id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_links_match ON player_match_links(match_id);
CREATE INDEX IF NOT EXISTS idx_players_tier ON players(tier);
CREATE INDEX IF NOT EXISTS idx_matches_queue ON matches(queue_id);
"""

PLAYER_COLUMNS = ("puuid", "tier", "rank", "league_points", "wins", "losses",
                  "veteran", "inactive", "fresh_blood", "hot_streak")

UPSERT_PLAYER = f"""
INSERT INTO players({", ".join(PLAYER_COLUMNS)}, updated_at)
VALUES({", ".join("?" * len(PLAYER_COLUMNS))}, ?)
ON CONFLICT(puuid) DO UPDATE SET
  tier=excluded.tier, rank=excluded.rank, league_points=excluded.league_points,
  wins=excluded.wins, losses=excluded.losses, veteran=excluded.veteran,
  inactive=excluded.inactive, fresh_blood=excluded.fresh_blood,
  hot_streak=excluded.hot_streak, updated_at=excluded.updated_at;
"""


def db_connect(path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA foreign_keys=ON;")
    return conn


def _player_row(p: PlayerRecord, now: int) -> tuple:
    return (p.puuid, p.tier, p.rank, p.league_points, p.wins, p.losses,
            int(p.veteran), int(p.inactive), int(p.fresh_blood), int(p.hot_streak), now)


class Store:
    def __init__(self, path: str):
        self.path = path
        try:
            self.conn = db_connect(path)
        except sqlite3.Error as e:
            raise PersistenceError(f"cannot open database {path}: {e}") from e

    def close(self):
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _write(self, fn, *args):
        try:
            with self.conn:
                return fn(self.conn.cursor(), *args)
        except sqlite3.Error as e:
            raise PersistenceError(str(e)) from e

    def init_schema(self):
        try:
            self.conn.executescript(DDL)
            self.conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"schema init failed: {e}") from e

    # -------------------------
    # players
    # -------------------------

    def upsert_players(self, players: Iterable[PlayerRecord]) -> List[str]:
        """Seed players with authoritative ladder data; returns the upserted puuids."""
        now = int(time.time())
        rows = [_player_row(p, now) for p in players]

        def run(cur):
            cur.executemany(UPSERT_PLAYER, rows)
            return [r[0] for r in rows]
        return self._write(run)

    def upsert_player_stubs(self, puuids: Iterable[str]) -> None:
        ids = list(puuids)
        self._write(lambda cur: self._insert_stubs(cur, ids))

    @staticmethod
    def _insert_stubs(cur, puuids: List[str]):
        cur.executemany("INSERT OR IGNORE INTO players(puuid, tier) VALUES(?, ?);",
                        [(p, STUB_TIER) for p in puuids])

    def update_account(self, a: AccountRecord) -> None:
        def run(cur):
            cur.execute("UPDATE players SET game_name=?, tag_line=?, updated_at=? WHERE puuid=?;",
                        (a.game_name, a.tag_line, int(time.time()), a.puuid))
            if cur.rowcount == 0:
                raise PersistenceError(f"no player row for {a.puuid}")
        self._write(run)

    def update_league(self, p: PlayerRecord) -> None:
        def run(cur):
            cur.execute("""
              UPDATE players SET tier=?, rank=?, league_points=?, wins=?, losses=?,
                veteran=?, inactive=?, fresh_blood=?, hot_streak=?, updated_at=?
              WHERE puuid=?;
            """, _player_row(p, int(time.time()))[1:] + (p.puuid,))
            if cur.rowcount == 0:
                raise PersistenceError(f"no player row for {p.puuid}")
        self._write(run)

    def get_player(self, puuid: str) -> Optional[PlayerRecord]:
        row = self.conn.execute(f"""
          SELECT {", ".join(PLAYER_COLUMNS)}, game_name, tag_line FROM players WHERE puuid=?;
        """, (puuid,)).fetchone()
        if row is None:
            return None
        return PlayerRecord(
            puuid=row[0], tier=row[1], rank=row[2], league_points=row[3], wins=row[4],
            losses=row[5], veteran=bool(row[6]), inactive=bool(row[7]),
            fresh_blood=bool(row[8]), hot_streak=bool(row[9]),
            game_name=row[10], tag_line=row[11],
        )

    def all_player_ids(self) -> List[str]:
        return [r[0] for r in self.conn.execute("SELECT puuid FROM players ORDER BY puuid;")]

    def players_missing_account(self) -> List[str]:
        q = "SELECT puuid FROM players WHERE game_name IS NULL OR tag_line IS NULL ORDER BY puuid;"
        return [r[0] for r in self.conn.execute(q)]

    def players_missing_league(self) -> List[str]:
        q = "SELECT puuid FROM players WHERE tier = ? ORDER BY puuid;"
        return [r[0] for r in self.conn.execute(q, (STUB_TIER,))]

    def delete_orphaned_players(self) -> int:
        def run(cur):
            cur.execute("""
              DELETE FROM players
              WHERE NOT EXISTS (SELECT 1 FROM player_match_links l WHERE l.puuid = players.puuid);
            """)
            return cur.rowcount
        return self._write(run)

    # -------------------------
    # matches
    # -------------------------

    def save_match(self, m: MatchResult) -> bool:
        """Match row, then participant stubs, then links. True if the match was new."""
        def run(cur):
            cur.execute("""
              INSERT OR IGNORE INTO matches(match_id, data, region, is_processed,
                                            game_datetime, queue_id, tft_set_number, collected_at)
              VALUES(?,?,?,0,?,?,?,?);
            """, (m.match_id, json.dumps(m.data), m.region, m.game_datetime,
                  m.queue_id, m.tft_set_number, int(time.time())))
            inserted = cur.rowcount == 1
            self._insert_stubs(cur, m.participants)
            self._insert_links(cur, m.match_id, m.participants)
            return inserted
        return self._write(run)

    def upsert_links(self, match_id: str, puuids: Iterable[str]) -> None:
        """Links for an already stored match; players and match must exist."""
        ids = list(puuids)
        self._write(lambda cur: self._insert_links(cur, match_id, ids))

    @staticmethod
    def _insert_links(cur, match_id: str, puuids: List[str]):
        cur.executemany("INSERT OR IGNORE INTO player_match_links(puuid, match_id) VALUES(?,?);",
                        [(p, match_id) for p in puuids])

    def known_match_ids(self, match_ids: Iterable[str]) -> Set[str]:
        ids = list(match_ids)
        known: Set[str] = set()
        # stay under sqlite's bound-parameter limit
        for i in range(0, len(ids), 500):
            chunk = ids[i:i + 500]
            q = f"SELECT match_id FROM matches WHERE match_id IN ({','.join('?' * len(chunk))});"
            known.update(r[0] for r in self.conn.execute(q, chunk))
        return known

    def get_match_data(self, match_id: str) -> Optional[Dict]:
        """Stored raw match payload, None if the match was never saved."""
        row = self.conn.execute("SELECT data FROM matches WHERE match_id=?;", (match_id,)).fetchone()
        return json.loads(row[0]) if row else None

    def match_participants(self, match_id: str) -> List[str]:
        """Linked participants of a stored match, sorted."""
        q = "SELECT puuid FROM player_match_links WHERE match_id=? ORDER BY puuid;"
        return [r[0] for r in self.conn.execute(q, (match_id,))]

    # -------------------------
    # counts / status
    # -------------------------

    def match_count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM matches;").fetchone()[0]

    def player_count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM players;").fetchone()[0]

    def link_count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM player_match_links;").fetchone()[0]

    def status(self) -> Dict[str, object]:
        c = self.conn
        by_tier = list(c.execute("SELECT tier, COUNT(*) FROM players GROUP BY tier ORDER BY 2 DESC;"))
        by_set = list(c.execute("""
          SELECT tft_set_number, COUNT(*) FROM matches
          WHERE tft_set_number IS NOT NULL GROUP BY tft_set_number ORDER BY tft_set_number DESC LIMIT 10;
        """))
        return {
            "players": self.player_count(),
            "matches": self.match_count(),
            "links": self.link_count(),
            "missing_account": len(self.players_missing_account()),
            "missing_league": len(self.players_missing_league()),
            "orphans": c.execute("""
              SELECT COUNT(*) FROM players p
              WHERE NOT EXISTS (SELECT 1 FROM player_match_links l WHERE l.puuid = p.puuid);
            """).fetchone()[0],
            "by_tier": by_tier,
            "by_set": by_set,
        }
