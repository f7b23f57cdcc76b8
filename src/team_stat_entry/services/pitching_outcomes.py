"""Pitching decisions (W, L, S) for a single game.

At most one pitcher may hold each decision, nobody may hold both a win and a
save, and the decisions must agree with the final score.
"""

from collections.abc import Iterable

from team_stat_entry.domain.errors import ValidationError
from team_stat_entry.domain.game import GameOutcome
from team_stat_entry.domain.stat_line import PITCHING_LABELS, PitchingLine

_DECISION_FIELDS = ("w", "l", "s")


def _describe(names: list[str]) -> str:
    return ", ".join(names)


def validate_pitching_outcomes(lines: Iterable[PitchingLine], outcome: GameOutcome | None) -> None:
    """Raise ``ValidationError`` when the decisions in *lines* break a rule."""
    assignments: dict[str, list[str]] = {field: [] for field in _DECISION_FIELDS}

    for line in lines:
        name = line.player_name.strip() or "Unnamed pitcher"
        for field in _DECISION_FIELDS:
            label = PITCHING_LABELS[field]
            value = getattr(line, field)
            if value < 0:
                raise ValidationError(f"{label} must be a non-negative whole number for {name}.", field)
            if value > 1:
                raise ValidationError(f"{label} can only be 0 or 1 for {name}.", field)
            if value == 1:
                assignments[field].append(name)
        if line.w == 1 and line.s == 1:
            raise ValidationError(
                f"{name} cannot be credited with both a {PITCHING_LABELS['w']} and a {PITCHING_LABELS['s']}.",
                "s",
            )

    for field in _DECISION_FIELDS:
        if len(assignments[field]) > 1:
            label = PITCHING_LABELS[field]
            raise ValidationError(
                f"Only one pitcher can be assigned a {label}. "
                f"Currently assigned to {_describe(assignments[field])}.",
                field,
            )

    if outcome is None:
        return

    if outcome is GameOutcome.WIN:
        if assignments["l"]:
            raise ValidationError("Cannot assign a loss to your team in a game they won.", "l")
        return

    if outcome is GameOutcome.LOSS:
        if assignments["w"]:
            raise ValidationError("Cannot assign a win to your team in a game they lost.", "w")
        if assignments["s"]:
            raise ValidationError("A save can only be recorded when the team wins.", "s")
        return

    if assignments["w"] or assignments["l"]:
        raise ValidationError("Wins and losses cannot be recorded for a tied game.", "w" if assignments["w"] else "l")
    if assignments["s"]:
        raise ValidationError("A save can only be recorded when the team wins.", "s")
