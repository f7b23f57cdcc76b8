from dataclasses import dataclass
from enum import StrEnum


class UnsavedChangesReason(StrEnum):
    SWITCH_ROW = "switch-row"
    TAB_CHANGE = "tab-change"
    EXIT_EDIT = "exit-edit"
    GAME_CHANGE = "game-change"


class UnsavedChangesDecision(StrEnum):
    SAVE = "save"
    DISCARD = "discard"
    CANCEL = "cancel"


class StatTab(StrEnum):
    BATTING = "batting"
    PITCHING = "pitching"
    RECAP = "recap"
    ATTENDANCE = "attendance"


@dataclass(frozen=True)
class UnsavedChangesPrompt:
    reason: UnsavedChangesReason
    subject_label: str
    tab_context: StatTab


@dataclass(frozen=True)
class DirtyRowInfo:
    row_id: str
    player_name: str
