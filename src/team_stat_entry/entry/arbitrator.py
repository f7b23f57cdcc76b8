"""Unsaved-changes arbitration.

Any navigation that would abandon a dirty row (switching rows, tabs or games,
leaving edit mode) calls :meth:`UnsavedChangesArbitrator.arbitrate` and
waits. The arbitrator opens a prompt, suspends until something calls
:meth:`UnsavedChangesArbitrator.resolve`, then carries out the decision on the
editor's handle. A save that fails leaves the prompt open with the error
attached, so the caller keeps waiting for another decision.
"""

import asyncio
import logging
from collections.abc import Callable
from enum import StrEnum

from team_stat_entry.domain.errors import NoOpenPromptError, PromptAlreadyOpenError, StatEntryError
from team_stat_entry.domain.prompt import UnsavedChangesDecision, UnsavedChangesPrompt
from team_stat_entry.domain.result import Err
from team_stat_entry.entry.protocols import EditableGridHandle

logger = logging.getLogger(__name__)


class ArbitratorState(StrEnum):
    IDLE = "idle"
    PROMPT_OPEN = "prompt-open"
    RESOLVING_SAVE = "resolving-save"
    RESOLVING_DISCARD = "resolving-discard"
    CANCELLED = "cancelled"


type ArbitratorListener = Callable[["UnsavedChangesArbitrator"], None]


class UnsavedChangesArbitrator:
    def __init__(self) -> None:
        self._state = ArbitratorState.IDLE
        self._prompt: UnsavedChangesPrompt | None = None
        self._error: StatEntryError | None = None
        self._pending: asyncio.Future[UnsavedChangesDecision] | None = None
        self._lock = asyncio.Lock()
        self._listeners: list[ArbitratorListener] = []

    @property
    def state(self) -> ArbitratorState:
        return self._state

    @property
    def prompt(self) -> UnsavedChangesPrompt | None:
        return self._prompt

    @property
    def error(self) -> StatEntryError | None:
        """The error from the last failed save, shown on the still-open prompt."""
        return self._error

    @property
    def is_prompt_open(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def on_change(self, listener: ArbitratorListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def request_decision(self, prompt: UnsavedChangesPrompt) -> UnsavedChangesDecision:
        """Open *prompt* and wait for :meth:`resolve`."""
        if self.is_prompt_open:
            raise PromptAlreadyOpenError(f"A prompt for {self._prompt} is already open")
        future: asyncio.Future[UnsavedChangesDecision] = asyncio.get_running_loop().create_future()
        self._pending = future
        self._prompt = prompt
        self._transition(ArbitratorState.PROMPT_OPEN)
        try:
            return await future
        finally:
            if self._pending is future:
                self._pending = None

    def resolve(self, decision: UnsavedChangesDecision) -> None:
        if self._pending is None or self._pending.done():
            raise NoOpenPromptError("No unsaved-changes prompt is waiting for a decision")
        logger.debug("Unsaved-changes prompt resolved with %s", decision)
        self._pending.set_result(UnsavedChangesDecision(decision))

    async def arbitrate(self, handle: EditableGridHandle, prompt: UnsavedChangesPrompt) -> bool:
        """Run the prompt protocol for *handle*; ``True`` lets the navigation proceed."""
        async with self._lock:
            if not handle.has_dirty_row():
                return True
            self._error = None
            try:
                while True:
                    decision = await self.request_decision(prompt)
                    match decision:
                        case UnsavedChangesDecision.CANCEL:
                            self._transition(ArbitratorState.CANCELLED)
                            logger.debug("Navigation (%s) cancelled", prompt.reason)
                            return False
                        case UnsavedChangesDecision.DISCARD:
                            self._transition(ArbitratorState.RESOLVING_DISCARD)
                            handle.discard_dirty_row()
                            return True
                        case UnsavedChangesDecision.SAVE:
                            self._transition(ArbitratorState.RESOLVING_SAVE)
                            result = await handle.save_dirty_row()
                            if isinstance(result, Err):
                                self._error = result.error
                                logger.warning("Save from prompt failed: %s", result.error.message)
                                continue
                            if handle.has_dirty_row():
                                # edits landed while the save was in flight
                                continue
                            self._error = None
                            return True
            finally:
                if self._pending is not None and not self._pending.done():
                    self._pending.cancel()
                self._pending = None
                self._prompt = None
                self._transition(ArbitratorState.IDLE)

    def _transition(self, state: ArbitratorState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(self)
