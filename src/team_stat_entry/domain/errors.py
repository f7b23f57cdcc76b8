from team_stat_entry.exceptions import StatEntryException


class StatEntryError(StatEntryException):
    """An error reported to the user through a grid's ``on_process_error`` callback."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(StatEntryError):
    """Local validation failure; never reaches the network."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class ConflictOrNotFoundError(StatEntryError):
    """The targeted stat line no longer exists server-side, or conflicts with another line."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class TransientNetworkError(StatEntryError):
    """Any other failed collaborator call. Reads retry it a bounded number of times; writes never do."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class DirtyRowConflictError(StatEntryException):
    def __init__(self, dirty_row_id: str, attempted_row_id: str) -> None:
        self.dirty_row_id = dirty_row_id
        self.attempted_row_id = attempted_row_id
        super().__init__(
            f"Row {attempted_row_id!r} cannot be edited while row {dirty_row_id!r} has unsaved changes"
        )


class PromptAlreadyOpenError(StatEntryException):
    """Raised when a second unsaved-changes prompt is requested while one is open."""


class NoOpenPromptError(StatEntryException):
    """Raised when a decision is supplied but no prompt is waiting for one."""
