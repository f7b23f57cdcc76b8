"""Row-level dirty tracking for one stat entry grid.

A grid has exactly one dirty slot: at most one of its rows (the new-line
draft included) may carry unsaved edits at any time. The slot is released
only by a successful save, an explicit discard, or the row disappearing from
refreshed data.
"""

import logging
import math
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace

from team_stat_entry.domain.errors import DirtyRowConflictError, ValidationError
from team_stat_entry.domain.result import Err, Ok, Result
from team_stat_entry.domain.stat_line import INNINGS_FIELD, NEW_ROW_ID, BattingLine, PitchingLine

logger = logging.getLogger(__name__)

_IDENTITY_FIELD = "roster_season_id"
_ALLOWED_EXTRA_OUTS = frozenset({0, 1, 2})


@dataclass(frozen=True)
class DirtySlot[L: (BattingLine, PitchingLine)]:
    row_id: str | None = None
    fields: frozenset[str] = field(default_factory=frozenset)
    original: L | None = None

    @property
    def is_dirty(self) -> bool:
        return self.row_id is not None


def parse_field_value(field_name: str, raw: object, label: str | None = None) -> Result[int | float, ValidationError]:
    """Coerce raw cell input into a stored value.

    Blank input means zero. Counting fields are truncated to integers; the
    innings field keeps its fraction, which must be .0, .1 or .2.
    """
    label = label or field_name
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return Ok(0.0 if field_name == INNINGS_FIELD else 0)
    if isinstance(raw, bool):
        return Err(ValidationError(f"{label} must be a number.", field_name))
    try:
        value = float(raw.strip() if isinstance(raw, str) else raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return Err(ValidationError(f"{label} must be a number.", field_name))
    if not math.isfinite(value):
        return Err(ValidationError(f"{label} must be a finite number.", field_name))
    if value < 0:
        return Err(ValidationError(f"{label} cannot be negative.", field_name))

    if field_name != INNINGS_FIELD:
        return Ok(int(value))

    tenths = round(value * 10)
    if abs(value * 10 - tenths) > 1e-6 or tenths % 10 not in _ALLOWED_EXTRA_OUTS:
        return Err(ValidationError(f"{label} must end in .0, .1 or .2 (outs in the inning).", field_name))
    return Ok(tenths / 10)


class RowDirtyTracker[L: (BattingLine, PitchingLine)]:
    """Current values, baselines and the single dirty slot for one grid."""

    def __init__(
        self,
        fields: tuple[str, ...],
        *,
        labels: Mapping[str, str] | None = None,
        on_change: Callable[[bool], None] | None = None,
    ) -> None:
        self._fields = fields
        self._compared = (_IDENTITY_FIELD, *fields)
        self._labels = dict(labels or {})
        self._on_change = on_change
        self._rows: dict[str, L] = {}
        self._originals: dict[str, L] = {}
        self._slot: DirtySlot[L] = DirtySlot()

    # -- Queries -----------------------------------------------------------

    @property
    def slot(self) -> DirtySlot[L]:
        return self._slot

    @property
    def dirty_row_id(self) -> str | None:
        return self._slot.row_id

    def has_dirty_row(self) -> bool:
        return self._slot.is_dirty

    def rows(self) -> list[L]:
        """Persisted rows in display order, excluding the new-line draft."""
        return [row for row_id, row in self._rows.items() if row_id != NEW_ROW_ID]

    def get(self, row_id: str) -> L | None:
        return self._rows.get(row_id)

    def original(self, row_id: str) -> L | None:
        return self._originals.get(row_id)

    def draft(self) -> L | None:
        return self._rows.get(NEW_ROW_ID)

    def __contains__(self, row_id: object) -> bool:
        return row_id in self._rows

    def compute_dirty_fields(self, row: L) -> frozenset[str]:
        original = self._originals.get(row.stat_id)
        if original is None:
            return frozenset(self._fields)
        return frozenset(f for f in self._compared if getattr(row, f) != getattr(original, f))

    def diff(self, row_id: str) -> dict[str, int | float]:
        """Changed editable fields of *row_id* with their current values."""
        row = self._rows.get(row_id)
        if row is None:
            return {}
        changed = self.compute_dirty_fields(row)
        return {f: getattr(row, f) for f in self._fields if f in changed}

    # -- Edits -------------------------------------------------------------

    def apply_field_edit(
        self,
        row_id: str,
        field_name: str,
        raw: object,
        *,
        check: Callable[[L], ValidationError | None] | None = None,
    ) -> Result[L, ValidationError]:
        if field_name not in self._fields:
            return Err(ValidationError(f"{field_name!r} is not an editable field.", field_name))
        self._ensure_editable(row_id)
        row = self._rows.get(row_id)
        if row is None:
            raise KeyError(row_id)

        match parse_field_value(field_name, raw, self._labels.get(field_name)):
            case Err(error):
                return Err(error)
            case Ok(value):
                candidate = replace(row, **{field_name: value})

        if check is not None:
            problem = check(candidate)
            if problem is not None:
                return Err(problem)

        self._rows[row_id] = candidate
        self.mark_dirty(candidate)
        return Ok(candidate)

    def set_identity(self, row_id: str, roster_season_id: str, player_name: str, player_number: int | None) -> L:
        """Rebind the draft row to a roster player."""
        self._ensure_editable(row_id)
        row = self._rows[row_id]
        updated = replace(
            row,
            roster_season_id=roster_season_id,
            player_name=player_name,
            player_number=player_number,
        )
        self._rows[row_id] = updated
        self.mark_dirty(updated)
        return updated

    def mark_dirty(self, row: L) -> None:
        dirty_fields = self.compute_dirty_fields(row)
        if dirty_fields:
            if self._slot.is_dirty and self._slot.row_id != row.stat_id:
                raise DirtyRowConflictError(self._slot.row_id or "", row.stat_id)
            original = self._slot.original if self._slot.row_id == row.stat_id else self._originals.get(row.stat_id)
            self._set_slot(DirtySlot(row.stat_id, dirty_fields, original))
        elif self._slot.row_id == row.stat_id:
            self._set_slot(DirtySlot())

    def discard(self, row_id: str | None = None) -> L | None:
        """Restore the dirty row's original snapshot and clear the slot."""
        row_id = row_id or self._slot.row_id
        if row_id is None:
            return None
        original = self._slot.original if self._slot.row_id == row_id else self._originals.get(row_id)
        if original is not None:
            self._rows[row_id] = original
        if self._slot.row_id == row_id:
            logger.debug("Discarded edits to row %s", row_id)
            self._set_slot(DirtySlot())
        return original

    def commit(self, row_id: str, saved: L, sent: L | None = None) -> L:
        """Make *saved* the new baseline for *row_id*.

        Fields edited after *sent* went out stay on the row and keep it dirty.
        A row that was removed meanwhile stays removed.
        """
        if row_id not in self._rows:
            return saved
        current = self._rows[row_id]
        self._originals[row_id] = saved
        if sent is not None and current != sent:
            later = {f: getattr(current, f) for f in self._fields if getattr(current, f) != getattr(sent, f)}
            current = replace(saved, **later)
        else:
            current = saved
        self._rows[row_id] = current
        self._settle(current, saved)
        return current

    # -- Row set -----------------------------------------------------------

    def load(self, rows: Iterable[L]) -> bool:
        """Replace the baseline from fresh data.

        Returns ``True`` when the dirty row's edits were overlaid onto its
        refreshed counterpart.
        """
        draft = self._rows.get(NEW_ROW_ID)
        draft_original = self._originals.get(NEW_ROW_ID)
        fresh = {row.stat_id: row for row in rows}
        dirty_id = self._slot.row_id
        edited: dict[str, object] = {}
        if dirty_id is not None and dirty_id in self._rows:
            current = self._rows[dirty_id]
            edited = {f: getattr(current, f) for f in self._slot.fields if f in self._fields}

        self._originals = dict(fresh)
        self._rows = dict(fresh)
        if draft is not None and draft_original is not None:
            self._rows[NEW_ROW_ID] = draft
            self._originals[NEW_ROW_ID] = draft_original

        if dirty_id is None or dirty_id == NEW_ROW_ID:
            return False

        refreshed = fresh.get(dirty_id)
        if refreshed is None:
            logger.info("Dirty row %s is gone after refresh; dropping its edits", dirty_id)
            self._set_slot(DirtySlot())
            return False

        overlaid = replace(refreshed, **edited)
        self._rows[dirty_id] = overlaid
        self._settle(overlaid, refreshed)
        logger.debug("Overlaid unsaved edits onto refreshed row %s", dirty_id)
        return True

    def insert(self, row: L) -> None:
        self._rows[row.stat_id] = row
        self._originals[row.stat_id] = row
        if NEW_ROW_ID in self._rows:
            self._rows[NEW_ROW_ID] = self._rows.pop(NEW_ROW_ID)

    def remove(self, row_id: str) -> L | None:
        """Drop *row_id*, force-clearing the slot when it was the dirty row."""
        removed = self._rows.pop(row_id, None)
        self._originals.pop(row_id, None)
        if self._slot.row_id == row_id:
            self._set_slot(DirtySlot())
        return removed

    def reset_draft(self, blank: L) -> None:
        self._rows[NEW_ROW_ID] = blank
        self._originals[NEW_ROW_ID] = blank
        if self._slot.row_id == NEW_ROW_ID:
            self._set_slot(DirtySlot())

    def clear(self) -> None:
        self._rows.clear()
        self._originals.clear()
        self._set_slot(DirtySlot())

    # -- Internals ---------------------------------------------------------

    def _settle(self, row: L, baseline: L) -> None:
        dirty_fields = self.compute_dirty_fields(row)
        if dirty_fields:
            self._set_slot(DirtySlot(row.stat_id, dirty_fields, baseline))
        elif self._slot.row_id == row.stat_id:
            self._set_slot(DirtySlot())

    def _ensure_editable(self, row_id: str) -> None:
        if self._slot.is_dirty and self._slot.row_id != row_id:
            raise DirtyRowConflictError(self._slot.row_id or "", row_id)

    def _set_slot(self, slot: DirtySlot[L]) -> None:
        was_dirty = self._slot.is_dirty
        self._slot = slot
        if was_dirty != slot.is_dirty and self._on_change is not None:
            self._on_change(slot.is_dirty)
