"""
Unit tests for ags/tools.py and ags/agent.py.
"""

import json
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from meeting_approval.ags.agent import build_meeting_agent, build_meeting_instruction
from meeting_approval.ags.tools import create_calendar_event
from meeting_approval.config import ApprovalSettings
from meeting_approval.tools.calendar_tool import CalendarApprovalTool, build_calendar_tool
from meeting_approval.tools.registry import register_calendar_tool, unregister_calendar_tool
from tests.utils.fakes import AGENT_ID, MEETING_ID, FakeRpcTransport, RecordingEngine, StaticDirectory
from tests.utils.mocks import create_mock_tool_context


SESSION_ID = "session-tools-1"


@pytest_asyncio.fixture
async def registered_tool(
    settings: ApprovalSettings,
    transport: FakeRpcTransport,
    directory: StaticDirectory,
    engine: RecordingEngine,
) -> AsyncIterator[CalendarApprovalTool]:
    tool = build_calendar_tool(
        settings,
        transport=transport,
        directory=directory,
        engine=engine,
        meeting_id=MEETING_ID,
        agent_id=AGENT_ID,
    )
    register_calendar_tool(SESSION_ID, tool)
    yield tool
    await unregister_calendar_tool(SESSION_ID)


# ============================================================
# create_calendar_event
# ============================================================


@pytest.mark.asyncio
async def test_tool_returns_pending_ack(
    registered_tool: CalendarApprovalTool, transport: FakeRpcTransport
) -> None:
    # when
    raw = await create_calendar_event(
        target_participant="Alice",
        title="Design review",
        description="",
        start_iso="2026-10-20T10:30:00Z",
        end_iso="2026-10-20T11:00:00Z",
        attendees=[],
        tool_context=create_mock_tool_context(SESSION_ID),
    )

    # then
    ack = json.loads(raw)
    assert ack["status"] == "pending"
    assert ack["target"] == "Alice"
    call = await transport.next_call()
    assert call.payload["payload"]["startISO"] == "2026-10-20T10:30:00Z"
    call.reply({"approved": True})
    await registered_tool.coordinator.drain(timeout=1.0)


@pytest.mark.asyncio
async def test_tool_without_registered_session_is_unavailable() -> None:
    raw = await create_calendar_event(
        target_participant="Alice",
        title="Design review",
        description="",
        start_iso="2026-10-20T10:30:00Z",
        end_iso="2026-10-20T11:00:00Z",
        attendees=[],
        tool_context=create_mock_tool_context("no-such-session"),
    )

    assert json.loads(raw)["status"] == "unavailable"


@pytest.mark.asyncio
async def test_tool_without_context_is_unavailable() -> None:
    raw = await create_calendar_event(
        target_participant="Alice",
        title="Design review",
        description="",
        start_iso="",
        end_iso="",
        attendees=[],
    )

    assert json.loads(raw)["status"] == "unavailable"


# ============================================================
# Agent
# ============================================================


def test_instruction_mentions_agent_and_request_convention() -> None:
    text = build_meeting_instruction("Scribe", "Weekly sync", "Take notes.")

    assert '"Scribe"' in text
    assert '"Weekly sync"' in text
    assert "Take notes." in text
    assert "[Request <id>]" in text


def test_agent_exposes_calendar_tool() -> None:
    agent = build_meeting_agent(agent_name="Scribe", model="gemini-2.5-flash")

    assert agent.name == "meeting_assistant"
    assert agent.model == "gemini-2.5-flash"
    assert create_calendar_event in agent.tools
