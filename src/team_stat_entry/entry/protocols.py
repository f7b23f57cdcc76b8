from typing import Protocol, runtime_checkable

from team_stat_entry.domain.errors import StatEntryError
from team_stat_entry.domain.prompt import DirtyRowInfo, StatTab, UnsavedChangesPrompt, UnsavedChangesReason
from team_stat_entry.domain.result import Result


@runtime_checkable
class EditableGridHandle(Protocol):
    """Imperative surface the arbitrator and session drive on an editor."""

    @property
    def tab(self) -> StatTab: ...

    def has_dirty_row(self) -> bool: ...

    def get_dirty_row_info(self) -> DirtyRowInfo | None: ...

    def unsaved_prompt(self, reason: UnsavedChangesReason) -> UnsavedChangesPrompt: ...

    async def save_dirty_row(self) -> Result[object, StatEntryError]: ...

    def discard_dirty_row(self) -> None: ...
