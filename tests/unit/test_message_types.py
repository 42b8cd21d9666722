"""
Unit tests for protocol/message_types.py.
"""

import json

import pytest
from pydantic import ValidationError

from meeting_approval.protocol.message_types import (
    ApprovalReply,
    CalendarEventPayload,
    CalendarToolArgs,
    OutcomeStatus,
    RequestState,
    ResolvedOutcome,
    ToolAcknowledgement,
)
from tests.utils.fakes import make_approval_request


# ============================================================
# Tool Arguments
# ============================================================


def test_tool_args_accept_camel_case_and_nulls() -> None:
    # when
    args = CalendarToolArgs.model_validate(
        {
            "targetDescriptor": " Alice ",
            "title": "Design review",
            "description": None,
            "startTime": "2026-10-20T10:30:00Z",
            "endTime": None,
            "attendees": None,
        }
    )

    # then
    assert args.target_descriptor == "Alice"
    assert args.description == ""
    assert args.end_time == ""
    assert args.attendees == []


def test_tool_args_split_comma_separated_attendees() -> None:
    args = CalendarToolArgs(attendees="a@example.com, b@example.com,")

    assert args.attendees == ["a@example.com", "b@example.com"]


def test_tool_args_to_payload() -> None:
    args = CalendarToolArgs(title="Retro", start_time="s", end_time="e", attendees=["x@example.com"])

    payload = args.to_payload()

    assert payload == CalendarEventPayload(
        title="Retro", start_iso="s", end_iso="e", attendees=("x@example.com",)
    )


# ============================================================
# Payload
# ============================================================


def test_payload_serialises_with_camel_case_keys() -> None:
    payload = make_approval_request().payload

    data = json.loads(payload.model_dump_json(by_alias=True))

    assert set(data) == {"title", "description", "startISO", "endISO", "attendees"}


def test_payload_is_frozen() -> None:
    payload = make_approval_request().payload

    with pytest.raises(ValidationError):
        payload.title = "changed"  # type: ignore[misc]


# ============================================================
# Outcome
# ============================================================


def test_outcome_status_maps_to_request_state() -> None:
    assert OutcomeStatus.APPROVED.request_state is RequestState.APPROVED
    assert OutcomeStatus.TIMED_OUT.request_state is RequestState.TIMED_OUT
    assert OutcomeStatus.FAILED.request_state is RequestState.FAILED


def test_outcome_rejects_contradictory_flags() -> None:
    with pytest.raises(ValidationError):
        ResolvedOutcome(approved=True, status=OutcomeStatus.REJECTED)
    with pytest.raises(ValidationError):
        ResolvedOutcome(approved=False, status=OutcomeStatus.APPROVED)


def test_effective_payload_prefers_modified_copy() -> None:
    request = make_approval_request()
    edited = request.payload.model_copy(update={"title": "Edited"})

    approved_as_is = ResolvedOutcome(approved=True, status=OutcomeStatus.APPROVED)
    approved_edited = ResolvedOutcome(
        approved=True, status=OutcomeStatus.APPROVED, modified_payload=edited
    )

    assert approved_as_is.effective_payload(request) is request.payload
    assert approved_edited.effective_payload(request).title == "Edited"
    assert request.payload.title == "Design review"


# ============================================================
# Wire Models
# ============================================================


def test_reply_parses_modified_payload() -> None:
    reply = ApprovalReply.model_validate_json(
        '{"approved": true, "modifiedPayload": {"title": "T", "startISO": "s", "endISO": "e"}}'
    )

    assert reply.approved is True
    assert reply.modified_payload is not None
    assert reply.modified_payload.title == "T"
    assert reply.reason is None


def test_reply_requires_approved_flag() -> None:
    with pytest.raises(ValidationError):
        ApprovalReply.model_validate_json('{"reason": "?"}')


def test_reply_approved_flag_must_be_a_real_boolean() -> None:
    with pytest.raises(ValidationError):
        ApprovalReply.model_validate_json('{"approved": "true"}')
    with pytest.raises(ValidationError):
        ApprovalReply.model_validate({"approved": 1})


def test_acknowledgement_defaults() -> None:
    ack = ToolAcknowledgement(call_id="c1", target="Alice", message="Sent")

    data = json.loads(ack.model_dump_json(by_alias=True))

    assert data == {
        "callId": "c1",
        "status": "pending",
        "target": "Alice",
        "message": "Sent",
        "duplicate": False,
    }
