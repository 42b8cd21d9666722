"""
Meeting Approval Engine

Lets a live meeting agent propose consequential actions (calendar events) and
collect asynchronous human approval over websockets without blocking the
model's turn-taking.

Layers:
    - protocol: wire/domain models and the dedup fingerprint
    - tools: resolver, invoker, dedup registry, approval queue, dispatcher, tool entry point
    - transport: collaborator interfaces and adapters (websocket RPC, ADK live queue, backend)
    - ags: ADK agent and tool functions
"""

from .config import ApprovalSettings, load_settings
from .protocol import (
    ApprovalReply,
    ApprovalRequest,
    ApprovalRpcRequest,
    CalendarEventPayload,
    CalendarToolArgs,
    OutcomeStatus,
    RequestState,
    ResolvedOutcome,
    ToolAcknowledgement,
    compute_fingerprint,
)
from .result import Error, Ok, Result
from .tools import (
    ApprovalCoordinator,
    CalendarApprovalTool,
    DedupRegistry,
    IdentityResolver,
    OutcomeDispatcher,
    RemoteApprovalInvoker,
    SequentialApprovalQueue,
    build_calendar_tool,
    get_calendar_tool,
    register_calendar_tool,
    unregister_calendar_tool,
)
from .transport import (
    HttpActionForwarder,
    LiveRequestQueueEngine,
    Participant,
    WebSocketRpcTransport,
)


__all__ = [
    "ApprovalCoordinator",
    "ApprovalReply",
    "ApprovalRequest",
    "ApprovalRpcRequest",
    "ApprovalSettings",
    "CalendarApprovalTool",
    "CalendarEventPayload",
    "CalendarToolArgs",
    "DedupRegistry",
    "Error",
    "HttpActionForwarder",
    "IdentityResolver",
    "LiveRequestQueueEngine",
    "Ok",
    "OutcomeDispatcher",
    "OutcomeStatus",
    "Participant",
    "RemoteApprovalInvoker",
    "RequestState",
    "ResolvedOutcome",
    "Result",
    "SequentialApprovalQueue",
    "ToolAcknowledgement",
    "WebSocketRpcTransport",
    "build_calendar_tool",
    "compute_fingerprint",
    "get_calendar_tool",
    "load_settings",
    "register_calendar_tool",
    "unregister_calendar_tool",
]
