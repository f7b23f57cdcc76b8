from dataclasses import dataclass

TOTALS_ROW_ID = "totals"
NEW_ROW_ID = "new"
UNKNOWN_PLAYER = "Unknown Player"

INNINGS_FIELD = "ip_decimal"

BATTING_FIELDS: tuple[str, ...] = (
    "ab",
    "h",
    "r",
    "d",
    "t",
    "hr",
    "rbi",
    "so",
    "bb",
    "hbp",
    "sb",
    "cs",
    "sf",
    "sh",
    "re",
    "intr",
    "lob",
)

PITCHING_FIELDS: tuple[str, ...] = (
    INNINGS_FIELD,
    "w",
    "l",
    "s",
    "h",
    "r",
    "er",
    "d",
    "t",
    "hr",
    "so",
    "bb",
    "bf",
    "wp",
    "hbp",
    "bk",
    "sc",
)

BATTING_LABELS: dict[str, str] = {
    "ab": "AB",
    "h": "H",
    "r": "R",
    "d": "2B",
    "t": "3B",
    "hr": "HR",
    "rbi": "RBI",
    "so": "SO",
    "bb": "BB",
    "hbp": "HBP",
    "sb": "SB",
    "cs": "CS",
    "sf": "SF",
    "sh": "SH",
    "re": "RE",
    "intr": "INTR",
    "lob": "LOB",
}

PITCHING_LABELS: dict[str, str] = {
    INNINGS_FIELD: "IP",
    "w": "W",
    "l": "L",
    "s": "S",
    "h": "H",
    "r": "R",
    "er": "ER",
    "d": "2B",
    "t": "3B",
    "hr": "HR",
    "so": "SO",
    "bb": "BB",
    "bf": "BF",
    "wp": "WP",
    "hbp": "HBP",
    "bk": "BK",
    "sc": "SC",
}


@dataclass(frozen=True)
class BattingLine:
    stat_id: str
    roster_season_id: str
    player_name: str = UNKNOWN_PLAYER
    player_number: int | None = None
    ab: int = 0
    h: int = 0
    r: int = 0
    d: int = 0
    t: int = 0
    hr: int = 0
    rbi: int = 0
    so: int = 0
    bb: int = 0
    hbp: int = 0
    sb: int = 0
    cs: int = 0
    sf: int = 0
    sh: int = 0
    re: int = 0
    intr: int = 0
    lob: int = 0


@dataclass(frozen=True)
class PitchingLine:
    """One pitcher's line for a game.

    ``ip_decimal`` uses outs notation: ``6.2`` means six innings and two outs.
    """

    stat_id: str
    roster_season_id: str
    player_name: str = UNKNOWN_PLAYER
    player_number: int | None = None
    ip_decimal: float = 0.0
    w: int = 0
    l: int = 0  # noqa: E741
    s: int = 0
    h: int = 0
    r: int = 0
    er: int = 0
    d: int = 0
    t: int = 0
    hr: int = 0
    so: int = 0
    bb: int = 0
    bf: int = 0
    wp: int = 0
    hbp: int = 0
    bk: int = 0
    sc: int = 0


type StatLine = BattingLine | PitchingLine
