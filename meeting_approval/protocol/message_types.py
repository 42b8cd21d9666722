"""
Approval Protocol Message Types

Pydantic models for everything that crosses a boundary of the approval engine:

- Tool inbound:   CalendarToolArgs (what the model passes to the tool)
- Tool outbound:  ToolAcknowledgement (the immediate "pending" answer)
- Domain:         CalendarEventPayload, ApprovalRequest, ResolvedOutcome
- Approver wire:  ApprovalRpcRequest (agent → approver client), ApprovalReply (client → agent)
- Websocket RPC:  RpcRequestFrame, RpcResponseFrame

Wire models use camelCase aliases (the approver client is a browser app) and
accept snake_case names too (``populate_by_name``). Always serialise with
``by_alias=True``.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    field_validator,
    model_validator,
)


CREATE_CALENDAR_EVENT = "create_calendar_event"


class RequestState(str, Enum):
    """Lifecycle of one approval request inside the engine."""

    CREATED = "created"
    QUEUED = "queued"
    IN_FLIGHT = "in_flight"
    APPROVED = "approved"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    DISPATCHED = "dispatched"


class OutcomeStatus(str, Enum):
    """Terminal states; each one maps onto exactly one RequestState."""

    APPROVED = "approved"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"
    FAILED = "failed"

    @property
    def request_state(self) -> RequestState:
        return RequestState(self.value)


# ============================================================
# Domain Models
# ============================================================


class CalendarEventPayload(BaseModel):
    """
    Calendar event proposed by the agent.

    Frozen: approvers send back an edited copy as ``modifiedPayload``,
    the original instance is never mutated.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    description: str = ""
    start_iso: str = Field(alias="startISO")
    end_iso: str = Field(alias="endISO")
    attendees: tuple[str, ...] = ()


class CalendarToolArgs(BaseModel):
    """Arguments of the ``create_calendar_event`` tool call.

    Lenient: the live model sometimes sends ``null`` for optional
    fields or a bare string for ``attendees``.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    target_descriptor: str = Field(default="", alias="targetDescriptor")
    title: str = ""
    description: str = ""
    start_time: str = Field(default="", alias="startTime")
    end_time: str = Field(default="", alias="endTime")
    attendees: list[str] = Field(default_factory=list)

    @field_validator(
        "target_descriptor", "title", "description", "start_time", "end_time", mode="before"
    )
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("attendees", mode="before")
    @classmethod
    def _coerce_attendees(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    def to_payload(self) -> CalendarEventPayload:
        return CalendarEventPayload(
            title=self.title,
            description=self.description,
            start_iso=self.start_time,
            end_iso=self.end_time,
            attendees=tuple(self.attendees),
        )


class ApprovalRequest(BaseModel):
    """One proposed action awaiting human sign-off.

    ``request_id`` is fresh per invocation; ``fingerprint`` is shared by
    semantically identical invocations and drives deduplication.
    """

    model_config = ConfigDict(frozen=True)

    request_id: str
    fingerprint: str
    meeting_id: str
    agent_id: str
    target_descriptor: str
    payload: CalendarEventPayload
    action_type: Literal["create_calendar_event"] = CREATE_CALENDAR_EVENT


class ResolvedOutcome(BaseModel):
    """Terminal result of one ApprovalRequest."""

    model_config = ConfigDict(frozen=True)

    approved: bool
    status: OutcomeStatus
    modified_payload: CalendarEventPayload | None = None
    reason: str | None = None
    resolved_target_identity: str | None = None
    resolved_target_name: str | None = None

    @model_validator(mode="after")
    def _approved_matches_status(self) -> "ResolvedOutcome":
        if self.approved != (self.status is OutcomeStatus.APPROVED):
            raise ValueError(f"approved={self.approved} contradicts status={self.status.value}")
        return self

    @classmethod
    def rejected(
        cls,
        reason: str,
        status: OutcomeStatus = OutcomeStatus.REJECTED,
        identity: str | None = None,
        name: str | None = None,
    ) -> "ResolvedOutcome":
        return cls(
            approved=False,
            status=status,
            reason=reason,
            resolved_target_identity=identity,
            resolved_target_name=name,
        )

    def effective_payload(self, request: ApprovalRequest) -> CalendarEventPayload:
        """The payload that should actually be scheduled."""
        return self.modified_payload or request.payload


# ============================================================
# Approver Wire Format
# ============================================================


class ApprovalRpcRequest(BaseModel):
    """Payload delivered to the approving participant's client."""

    model_config = ConfigDict(populate_by_name=True)

    meeting_id: str = Field(alias="meetingId")
    agent_id: str = Field(alias="agentId")
    type: Literal["create_calendar_event"] = CREATE_CALENDAR_EVENT
    target_participant: str = Field(alias="targetParticipant")
    payload: CalendarEventPayload
    # epoch ms stamped right before dispatch; the client seeds its countdown from it
    invoked_at: int = Field(alias="invokedAt")
    timeout_ms: int = Field(alias="timeoutMs")


class ApprovalReply(BaseModel):
    """Structured reply returned by the approver client."""

    model_config = ConfigDict(populate_by_name=True)

    approved: StrictBool  # "yes" or 1 must not read as consent
    modified_payload: CalendarEventPayload | None = Field(default=None, alias="modifiedPayload")
    reason: str | None = None


class ToolAcknowledgement(BaseModel):
    """Immediate answer of the tool entry point. Never waits on a human."""

    model_config = ConfigDict(populate_by_name=True)

    call_id: str = Field(alias="callId")
    status: Literal["pending"] = "pending"
    target: str
    message: str
    duplicate: bool = False


# ============================================================
# Websocket RPC Frames
# ============================================================


class RpcRequestFrame(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["rpc_request"] = "rpc_request"
    request_id: str = Field(alias="requestId")
    method: str
    caller_identity: str = Field(alias="callerIdentity")
    payload: str
    response_timeout_ms: int = Field(alias="responseTimeoutMs")


class RpcResponseFrame(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["rpc_response"] = "rpc_response"
    request_id: str = Field(alias="requestId")
    payload: str | None = None
    error: str | None = None
