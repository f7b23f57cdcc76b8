"""Per-game team statistics entry for a league platform."""
