"""
Unit tests for tools/outcome_dispatcher.py.
"""

import pytest

from meeting_approval.protocol.message_types import (
    CalendarEventPayload,
    OutcomeStatus,
    ResolvedOutcome,
)
from meeting_approval.result import Error, Ok, Result
from meeting_approval.tools.outcome_dispatcher import (
    OutcomeDispatcher,
    build_approved_instruction,
    build_rejected_instruction,
    format_event_time,
)
from tests.utils.fakes import RecordingEngine, make_approval_request


class RecordingForwarder:
    def __init__(self, result: Result[None, str] | None = None) -> None:
        self.result = result if result is not None else Ok(None)
        self.forwarded: list[tuple[str, CalendarEventPayload]] = []

    async def forward(self, request, payload: CalendarEventPayload) -> Result[None, str]:
        self.forwarded.append((request.request_id, payload))
        return self.result


def _approved(**kwargs) -> ResolvedOutcome:
    return ResolvedOutcome(
        approved=True,
        status=OutcomeStatus.APPROVED,
        resolved_target_identity="user_alice",
        resolved_target_name="alice smith",
        **kwargs,
    )


# ============================================================
# Time Formatting
# ============================================================


def test_format_event_time_is_human_friendly() -> None:
    assert format_event_time("2026-10-20T10:30:00+00:00") == "Tue, Oct 20 at 10:30 AM"


def test_format_event_time_drops_leading_zeros() -> None:
    assert format_event_time("2026-10-05T09:05:00") == "Mon, Oct 5 at 9:05 AM"


def test_format_event_time_falls_back_to_raw_text() -> None:
    assert format_event_time("next Tuesday") == "next Tuesday"
    assert format_event_time("") == "an unspecified time"


# ============================================================
# Instruction Text
# ============================================================


def test_approved_instruction_names_request_and_approver() -> None:
    # given
    request = make_approval_request(request_id="call-42")
    outcome = _approved()

    # when
    text = build_approved_instruction(request, outcome, request.payload)

    # then
    assert text.startswith("[Request call-42] ")
    assert "alice smith approved the calendar event" in text
    assert '"Design review"' in text
    assert "Tue, Oct 20 at 10:30 AM" in text


def test_rejected_instruction_includes_reason() -> None:
    # given
    request = make_approval_request(request_id="call-7")
    outcome = ResolvedOutcome.rejected("User did not respond in time", OutcomeStatus.TIMED_OUT)

    # when
    text = build_rejected_instruction(request, outcome)

    # then - falls back to the spoken descriptor when unresolved
    assert text.startswith("[Request call-7] ")
    assert "was not approved by Alice" in text
    assert "(reason: User did not respond in time)" in text


def test_rejected_instruction_without_reason() -> None:
    request = make_approval_request()
    outcome = ResolvedOutcome.rejected("", OutcomeStatus.REJECTED, "user_alice", "alice smith")

    text = build_rejected_instruction(request, outcome)

    assert "reason:" not in text
    assert "not approved by alice smith" in text


# ============================================================
# Dispatch
# ============================================================


@pytest.mark.asyncio
async def test_dispatch_injects_exactly_one_instruction() -> None:
    # given
    engine = RecordingEngine()
    dispatcher = OutcomeDispatcher(engine)

    # when
    await dispatcher.dispatch(_approved(), make_approval_request())

    # then
    assert len(engine.instructions) == 1


@pytest.mark.asyncio
async def test_modified_payload_is_announced_and_forwarded() -> None:
    # given
    engine = RecordingEngine()
    forwarder = RecordingForwarder()
    dispatcher = OutcomeDispatcher(engine, forwarder=forwarder)
    request = make_approval_request()
    edited = CalendarEventPayload(
        title="Design review v2",
        start_iso="2026-10-21T14:00:00+00:00",
        end_iso="2026-10-21T15:00:00+00:00",
    )

    # when
    await dispatcher.dispatch(_approved(modified_payload=edited), request)

    # then
    assert forwarder.forwarded == [(request.request_id, edited)]
    assert "approved with their edits" in engine.instructions[0]
    assert '"Design review v2"' in engine.instructions[0]
    assert "Wed, Oct 21 at 2:00 PM" in engine.instructions[0]


@pytest.mark.asyncio
async def test_rejection_is_not_forwarded() -> None:
    # given
    engine = RecordingEngine()
    forwarder = RecordingForwarder()
    dispatcher = OutcomeDispatcher(engine, forwarder=forwarder)

    # when
    await dispatcher.dispatch(ResolvedOutcome.rejected("No"), make_approval_request())

    # then
    assert forwarder.forwarded == []
    assert len(engine.instructions) == 1


@pytest.mark.asyncio
async def test_forwarding_error_still_announces() -> None:
    # given
    engine = RecordingEngine()
    dispatcher = OutcomeDispatcher(engine, forwarder=RecordingForwarder(Error("status 500")))

    # when
    await dispatcher.dispatch(_approved(), make_approval_request())

    # then
    assert len(engine.instructions) == 1


@pytest.mark.asyncio
async def test_engine_failure_is_swallowed() -> None:
    # given
    engine = RecordingEngine()
    engine.fail_with = RuntimeError("live session closed")
    dispatcher = OutcomeDispatcher(engine)

    # when / then - does not raise
    await dispatcher.dispatch(_approved(), make_approval_request())
    assert engine.instructions == []


@pytest.mark.asyncio
async def test_async_engine_is_awaited() -> None:
    # given
    received: list[str] = []

    class AsyncEngine:
        async def inject_instruction(self, text: str) -> None:
            received.append(text)

    dispatcher = OutcomeDispatcher(AsyncEngine())

    # when
    await dispatcher.dispatch(ResolvedOutcome.rejected("No"), make_approval_request())

    # then
    assert len(received) == 1
