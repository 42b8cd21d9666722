"""
Tools Layer - the approval concurrency engine.

Components:
- IdentityResolver: tiered name → participant matching
- RemoteApprovalInvoker: one bounded RPC exchange, always a ResolvedOutcome
- DedupRegistry: fingerprint → in-flight outcome Future
- SequentialApprovalQueue: one visible approval dialog at a time, FIFO
- OutcomeDispatcher: outcome → injected conversation turn
- ApprovalCoordinator: owns the registry, the queue and background tasks
- CalendarApprovalTool: the non-blocking tool entry point
"""

from .approval_invoker import RemoteApprovalInvoker
from .approval_queue import QueueToken, SequentialApprovalQueue
from .calendar_tool import CalendarApprovalTool, build_calendar_tool
from .coordinator import ApprovalCoordinator
from .dedup_registry import DedupRegistry, JoinedEntry, NewEntry, Registration
from .identity_resolver import IdentityResolver, match_participant
from .outcome_dispatcher import OutcomeDispatcher
from .registry import get_calendar_tool, register_calendar_tool, unregister_calendar_tool


__all__ = [
    "ApprovalCoordinator",
    "CalendarApprovalTool",
    "DedupRegistry",
    "IdentityResolver",
    "JoinedEntry",
    "NewEntry",
    "OutcomeDispatcher",
    "QueueToken",
    "Registration",
    "RemoteApprovalInvoker",
    "SequentialApprovalQueue",
    "build_calendar_tool",
    "get_calendar_tool",
    "match_participant",
    "register_calendar_tool",
    "unregister_calendar_tool",
]
