import math

from team_stat_entry.services.derived_metrics import Numeric, outs_to_innings_decimal, innings_to_outs

SENTINEL = "-"


def format_rate(value: float | None, decimals: int = 3) -> str:
    """Format a rate stat the way a box score prints it.

    Values below one drop the leading zero (``.500``); undefined values
    render as ``-``.
    """
    if value is None or not math.isfinite(value):
        return SENTINEL
    text = f"{value:.{decimals}f}"
    if text.startswith("0."):
        return text[1:]
    return text


def format_innings(ip_decimal: Numeric) -> str:
    outs = innings_to_outs(ip_decimal)
    if outs is None:
        return SENTINEL
    return f"{outs_to_innings_decimal(outs):.1f}"


def format_count(value: Numeric) -> str:
    if value is None:
        return SENTINEL
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return SENTINEL
    if not math.isfinite(numeric):
        return SENTINEL
    return str(int(numeric))
