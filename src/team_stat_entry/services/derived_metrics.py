"""Derived baseball metrics computed from raw counting stats.

Every function here is total: malformed, non-finite or unparseable inputs
produce ``None`` (the undefined sentinel) instead of raising, and negative
counts are clamped to zero.

Innings pitched are stored in outs notation, where the digit after the
decimal point counts extra outs rather than tenths: ``6.2`` is six innings
plus two outs (20 outs). Rate stats divide by *true* innings
(``outs / 3``), never by the notation value.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass

from team_stat_entry.domain.stat_line import (
    BATTING_FIELDS,
    INNINGS_FIELD,
    PITCHING_FIELDS,
    TOTALS_ROW_ID,
    BattingLine,
    PitchingLine,
)

type Numeric = int | float | str | None

OUTS_PER_INNING = 3
MAX_EXTRA_OUTS = OUTS_PER_INNING - 1
TOTALS_LABEL = "Totals"


@dataclass(frozen=True)
class BattingMetrics:
    tb: int
    pa: int
    avg: float | None
    obp: float | None
    slg: float | None
    ops: float | None


@dataclass(frozen=True)
class PitchingMetrics:
    outs: int
    ip_display: float
    true_innings: float
    era: float | None
    whip: float | None
    k9: float | None
    bb9: float | None
    oba: float | None
    slg: float | None


def _count(value: Numeric) -> float | None:
    if value is None:
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(numeric):
        return None
    return max(numeric, 0.0)


def _ratio(numerator: float | None, denominator: float | None) -> float | None:
    if numerator is None or denominator is None or denominator <= 0:
        return None
    return numerator / denominator


def _sum(*values: Numeric) -> float | None:
    counts = [_count(v) for v in values]
    if any(c is None for c in counts):
        return None
    return sum(c for c in counts if c is not None)


# -- Batting ---------------------------------------------------------------


def total_bases(h: Numeric, d: Numeric, t: Numeric, hr: Numeric) -> int | None:
    hits, doubles, triples, homers = _count(h), _count(d), _count(t), _count(hr)
    if hits is None or doubles is None or triples is None or homers is None:
        return None
    return int(hits + doubles + 2 * triples + 3 * homers)


def plate_appearances(
    ab: Numeric, bb: Numeric, hbp: Numeric, sh: Numeric, sf: Numeric, intr: Numeric
) -> int | None:
    total = _sum(ab, bb, hbp, sh, sf, intr)
    return None if total is None else int(total)


def batting_average(h: Numeric, ab: Numeric) -> float | None:
    return _ratio(_count(h), _count(ab))


def on_base_percentage(h: Numeric, bb: Numeric, hbp: Numeric, ab: Numeric, sf: Numeric) -> float | None:
    return _ratio(_sum(h, bb, hbp), _sum(ab, bb, hbp, sf))


def slugging_percentage(tb: Numeric, ab: Numeric) -> float | None:
    return _ratio(_count(tb), _count(ab))


def on_base_plus_slugging(obp: float | None, slg: float | None) -> float | None:
    if obp is None or slg is None:
        return None
    if not (math.isfinite(obp) and math.isfinite(slg)):
        return None
    return obp + slg


def batting_metrics(line: BattingLine) -> BattingMetrics:
    tb = total_bases(line.h, line.d, line.t, line.hr) or 0
    obp = on_base_percentage(line.h, line.bb, line.hbp, line.ab, line.sf)
    slg = slugging_percentage(tb, line.ab)
    return BattingMetrics(
        tb=tb,
        pa=plate_appearances(line.ab, line.bb, line.hbp, line.sh, line.sf, line.intr) or 0,
        avg=batting_average(line.h, line.ab),
        obp=obp,
        slg=slg,
        ops=on_base_plus_slugging(obp, slg),
    )


# -- Innings notation ------------------------------------------------------


def split_innings(ip_decimal: Numeric) -> tuple[int, int] | None:
    """Split outs notation into ``(whole_innings, extra_outs)``.

    Extra-out digits above 2 cannot occur in valid input and are clamped.
    """
    value = _count(ip_decimal)
    if value is None:
        return None
    whole = math.floor(value)
    extra = round((value - whole) * 10)
    return whole, min(extra, MAX_EXTRA_OUTS)


def innings_to_outs(ip_decimal: Numeric) -> int | None:
    parts = split_innings(ip_decimal)
    if parts is None:
        return None
    whole, extra = parts
    return whole * OUTS_PER_INNING + extra


def outs_to_innings_decimal(outs: int) -> float:
    outs = max(int(outs), 0)
    whole, extra = divmod(outs, OUTS_PER_INNING)
    return round(whole + extra / 10, 1)


def true_innings(ip_decimal: Numeric) -> float | None:
    outs = innings_to_outs(ip_decimal)
    if outs is None:
        return None
    return outs / OUTS_PER_INNING


# -- Pitching --------------------------------------------------------------


def earned_run_average(er: Numeric, ip_decimal: Numeric) -> float | None:
    earned = _count(er)
    return _ratio(None if earned is None else earned * 9, true_innings(ip_decimal))


def walks_hits_per_inning(bb: Numeric, h: Numeric, ip_decimal: Numeric) -> float | None:
    return _ratio(_sum(bb, h), true_innings(ip_decimal))


def strikeouts_per_9(so: Numeric, ip_decimal: Numeric) -> float | None:
    strikeouts = _count(so)
    return _ratio(None if strikeouts is None else strikeouts * 9, true_innings(ip_decimal))


def walks_per_9(bb: Numeric, ip_decimal: Numeric) -> float | None:
    walks = _count(bb)
    return _ratio(None if walks is None else walks * 9, true_innings(ip_decimal))


def _at_bats_against(bf: Numeric, bb: Numeric, hbp: Numeric, sc: Numeric) -> float | None:
    faced = _count(bf)
    removed = _sum(bb, hbp, sc)
    if faced is None or removed is None:
        return None
    return faced - removed


def opponent_batting_average(h: Numeric, bf: Numeric, bb: Numeric, hbp: Numeric, sc: Numeric) -> float | None:
    return _ratio(_count(h), _at_bats_against(bf, bb, hbp, sc))


def slugging_against(
    h: Numeric, d: Numeric, t: Numeric, hr: Numeric, bf: Numeric, bb: Numeric, hbp: Numeric, sc: Numeric
) -> float | None:
    tb = total_bases(h, d, t, hr)
    return _ratio(None if tb is None else float(tb), _at_bats_against(bf, bb, hbp, sc))


def pitching_metrics(line: PitchingLine) -> PitchingMetrics:
    outs = innings_to_outs(line.ip_decimal) or 0
    return PitchingMetrics(
        outs=outs,
        ip_display=outs_to_innings_decimal(outs),
        true_innings=outs / OUTS_PER_INNING,
        era=earned_run_average(line.er, line.ip_decimal),
        whip=walks_hits_per_inning(line.bb, line.h, line.ip_decimal),
        k9=strikeouts_per_9(line.so, line.ip_decimal),
        bb9=walks_per_9(line.bb, line.ip_decimal),
        oba=opponent_batting_average(line.h, line.bf, line.bb, line.hbp, line.sc),
        slg=slugging_against(line.h, line.d, line.t, line.hr, line.bf, line.bb, line.hbp, line.sc),
    )


# -- Aggregation -----------------------------------------------------------


def sum_batting_lines(lines: Iterable[BattingLine], *, stat_id: str = TOTALS_ROW_ID) -> BattingLine:
    """Sum counting stats; derive rates afterwards with :func:`batting_metrics`."""
    totals = dict.fromkeys(BATTING_FIELDS, 0)
    for line in lines:
        for field in BATTING_FIELDS:
            totals[field] += int(getattr(line, field))
    return BattingLine(stat_id=stat_id, roster_season_id="", player_name=TOTALS_LABEL, **totals)


def sum_pitching_lines(lines: Iterable[PitchingLine], *, stat_id: str = TOTALS_ROW_ID) -> PitchingLine:
    """Sum counting stats, carrying innings as outs so ``0.2 + 0.2`` totals ``1.1``."""
    counting = [f for f in PITCHING_FIELDS if f != INNINGS_FIELD]
    totals = dict.fromkeys(counting, 0)
    outs = 0
    for line in lines:
        outs += innings_to_outs(line.ip_decimal) or 0
        for field in counting:
            totals[field] += int(getattr(line, field))
    return PitchingLine(
        stat_id=stat_id,
        roster_season_id="",
        player_name=TOTALS_LABEL,
        ip_decimal=outs_to_innings_decimal(outs),
        **totals,
    )
