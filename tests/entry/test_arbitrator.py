import asyncio

import pytest

from team_stat_entry.domain.errors import NoOpenPromptError, PromptAlreadyOpenError, StatEntryError, TransientNetworkError
from team_stat_entry.domain.prompt import (
    DirtyRowInfo,
    StatTab,
    UnsavedChangesDecision,
    UnsavedChangesPrompt,
    UnsavedChangesReason,
)
from team_stat_entry.domain.result import Err, Ok, Result
from team_stat_entry.entry.arbitrator import ArbitratorState, UnsavedChangesArbitrator
from team_stat_entry.entry.protocols import EditableGridHandle
from tests.helpers import ScriptedResolver, settle

SAVE = UnsavedChangesDecision.SAVE
DISCARD = UnsavedChangesDecision.DISCARD
CANCEL = UnsavedChangesDecision.CANCEL


class FakeHandle:
    def __init__(self, *, dirty: bool = True, save_results: list[Result[object, StatEntryError]] | None = None) -> None:
        self.dirty = dirty
        self.save_results = list(save_results or [])
        self.saves = 0
        self.discards = 0

    @property
    def tab(self) -> StatTab:
        return StatTab.BATTING

    def has_dirty_row(self) -> bool:
        return self.dirty

    def get_dirty_row_info(self) -> DirtyRowInfo | None:
        return DirtyRowInfo(row_id="10", player_name="Ava Diaz") if self.dirty else None

    def unsaved_prompt(self, reason: UnsavedChangesReason) -> UnsavedChangesPrompt:
        return UnsavedChangesPrompt(reason=reason, subject_label="Ava Diaz", tab_context=self.tab)

    async def save_dirty_row(self) -> Result[object, StatEntryError]:
        self.saves += 1
        result = self.save_results.pop(0) if self.save_results else Ok(None)
        if isinstance(result, Ok):
            self.dirty = False
        return result

    def discard_dirty_row(self) -> None:
        self.discards += 1
        self.dirty = False


def _prompt(handle: FakeHandle) -> UnsavedChangesPrompt:
    return handle.unsaved_prompt(UnsavedChangesReason.SWITCH_ROW)


class TestArbitrate:
    def test_handle_satisfies_protocol(self) -> None:
        assert isinstance(FakeHandle(), EditableGridHandle)

    def test_clean_handle_proceeds_without_prompt(self) -> None:
        arbitrator = UnsavedChangesArbitrator()
        resolver = ScriptedResolver(arbitrator)
        handle = FakeHandle(dirty=False)
        assert asyncio.run(arbitrator.arbitrate(handle, _prompt(handle))) is True
        assert resolver.prompts == []

    def test_cancel_blocks_navigation(self) -> None:
        arbitrator = UnsavedChangesArbitrator()
        ScriptedResolver(arbitrator, CANCEL)
        handle = FakeHandle()
        assert asyncio.run(arbitrator.arbitrate(handle, _prompt(handle))) is False
        assert handle.saves == 0
        assert handle.discards == 0
        assert handle.dirty
        assert arbitrator.state == ArbitratorState.IDLE

    def test_discard_delegates_to_handle(self) -> None:
        arbitrator = UnsavedChangesArbitrator()
        ScriptedResolver(arbitrator, DISCARD)
        handle = FakeHandle()
        assert asyncio.run(arbitrator.arbitrate(handle, _prompt(handle))) is True
        assert handle.discards == 1

    def test_save_delegates_to_handle(self) -> None:
        arbitrator = UnsavedChangesArbitrator()
        states: list[ArbitratorState] = []
        ScriptedResolver(arbitrator, SAVE)
        arbitrator.on_change(lambda a: states.append(a.state))
        handle = FakeHandle()
        assert asyncio.run(arbitrator.arbitrate(handle, _prompt(handle))) is True
        assert handle.saves == 1
        assert states == [ArbitratorState.PROMPT_OPEN, ArbitratorState.RESOLVING_SAVE, ArbitratorState.IDLE]

    def test_failed_save_reopens_prompt_with_error(self) -> None:
        arbitrator = UnsavedChangesArbitrator()
        resolver = ScriptedResolver(arbitrator, SAVE, DISCARD)
        error = TransientNetworkError("Network unavailable")
        handle = FakeHandle(save_results=[Err(error)])
        assert asyncio.run(arbitrator.arbitrate(handle, _prompt(handle))) is True
        assert len(resolver.prompts) == 2
        assert resolver.prompts[0] == resolver.prompts[1]
        assert resolver.errors == [None, error]
        assert handle.saves == 1
        assert handle.discards == 1

    def test_prompt_carries_reason_and_context(self) -> None:
        arbitrator = UnsavedChangesArbitrator()
        resolver = ScriptedResolver(arbitrator, CANCEL)
        handle = FakeHandle()
        prompt = handle.unsaved_prompt(UnsavedChangesReason.EXIT_EDIT)
        asyncio.run(arbitrator.arbitrate(handle, prompt))
        assert resolver.prompts == [
            UnsavedChangesPrompt(UnsavedChangesReason.EXIT_EDIT, "Ava Diaz", StatTab.BATTING)
        ]

    def test_callers_are_serialized(self) -> None:
        arbitrator = UnsavedChangesArbitrator()
        resolver = ScriptedResolver(arbitrator, DISCARD, SAVE)
        first, second = FakeHandle(), FakeHandle()

        async def run() -> list[bool]:
            return list(
                await asyncio.gather(
                    arbitrator.arbitrate(first, _prompt(first)),
                    arbitrator.arbitrate(second, _prompt(second)),
                )
            )

        assert asyncio.run(run()) == [True, True]
        assert len(resolver.prompts) == 2
        assert first.discards == 1
        assert second.saves == 1


class TestRequestDecision:
    def test_second_prompt_rejected_while_open(self) -> None:
        arbitrator = UnsavedChangesArbitrator()
        prompt = UnsavedChangesPrompt(UnsavedChangesReason.TAB_CHANGE, "Ava Diaz", StatTab.PITCHING)

        async def run() -> UnsavedChangesDecision:
            pending = asyncio.ensure_future(arbitrator.request_decision(prompt))
            await settle()
            assert arbitrator.is_prompt_open
            with pytest.raises(PromptAlreadyOpenError):
                await arbitrator.request_decision(prompt)
            arbitrator.resolve(CANCEL)
            return await pending

        assert asyncio.run(run()) == CANCEL

    def test_resolve_without_prompt(self) -> None:
        with pytest.raises(NoOpenPromptError):
            UnsavedChangesArbitrator().resolve(SAVE)

    def test_unsubscribe(self) -> None:
        arbitrator = UnsavedChangesArbitrator()
        seen: list[ArbitratorState] = []
        unsubscribe = arbitrator.on_change(lambda a: seen.append(a.state))
        unsubscribe()
        ScriptedResolver(arbitrator, CANCEL)
        handle = FakeHandle()
        asyncio.run(arbitrator.arbitrate(handle, _prompt(handle)))
        assert seen == []
