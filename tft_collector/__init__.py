"""Riot TFT ranked-match collector: seed ladder players, download their
matches into SQLite, grow the player set from match participants, and
enrich every player with account and league data."""

__version__ = "0.1.0"
