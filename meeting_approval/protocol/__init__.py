"""
Protocol Layer

Wire and domain models for approval requests plus the dedup fingerprint.
"""

from .fingerprint import compute_fingerprint
from .message_types import (
    CREATE_CALENDAR_EVENT,
    ApprovalReply,
    ApprovalRequest,
    ApprovalRpcRequest,
    CalendarEventPayload,
    CalendarToolArgs,
    OutcomeStatus,
    RequestState,
    ResolvedOutcome,
    RpcRequestFrame,
    RpcResponseFrame,
    ToolAcknowledgement,
)


__all__ = [
    "CREATE_CALENDAR_EVENT",
    "ApprovalReply",
    "ApprovalRequest",
    "ApprovalRpcRequest",
    "CalendarEventPayload",
    "CalendarToolArgs",
    "OutcomeStatus",
    "RequestState",
    "ResolvedOutcome",
    "RpcRequestFrame",
    "RpcResponseFrame",
    "ToolAcknowledgement",
    "compute_fingerprint",
]
