"""Pytest configuration and shared fixtures for tests.

Provides participants, scriptable collaborators and a fully wired
CalendarApprovalTool shared by unit and integration tests.
"""

from collections.abc import AsyncIterator
from typing import Any

import pytest
import pytest_asyncio

from meeting_approval.config import ApprovalSettings
from meeting_approval.tools.calendar_tool import CalendarApprovalTool, build_calendar_tool
from meeting_approval.transport.interfaces import Participant
from tests.utils.fakes import (
    AGENT_ID,
    MEETING_ID,
    FakeRpcTransport,
    RecordingEngine,
    StaticDirectory,
)


# ============================================================
# Participant Fixtures
# ============================================================


@pytest.fixture
def alice() -> Participant:
    return Participant(identity="user_alice", name="alice smith")


@pytest.fixture
def bob() -> Participant:
    return Participant(identity="user_bob", name="Bob Jones")


@pytest.fixture
def agent_participant() -> Participant:
    return Participant(identity="agent-assistant", name="Alice Bot")


@pytest.fixture
def directory(alice: Participant, bob: Participant, agent_participant: Participant) -> StaticDirectory:
    return StaticDirectory([alice, bob, agent_participant])


# ============================================================
# Collaborator Fixtures
# ============================================================


@pytest.fixture
def settings() -> ApprovalSettings:
    """Short timeouts so timeout paths finish quickly."""
    return ApprovalSettings(approval_timeout_ms=1_000, rpc_grace_ms=200)


@pytest_asyncio.fixture
async def transport() -> FakeRpcTransport:
    return FakeRpcTransport()


@pytest.fixture
def engine() -> RecordingEngine:
    return RecordingEngine()


@pytest_asyncio.fixture
async def calendar_tool(
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
    yield tool
    await tool.coordinator.aclose()


# ============================================================
# Tool Argument Fixtures
# ============================================================


@pytest.fixture
def review_args() -> dict[str, Any]:
    """Tool call arguments as the live model sends them."""
    return {
        "targetDescriptor": "Alice",
        "title": "Design review",
        "description": "Walk through the approval dialog",
        "startTime": "2026-10-20T10:30:00+00:00",
        "endTime": "2026-10-20T11:00:00+00:00",
        "attendees": ["alice@example.com"],
    }
