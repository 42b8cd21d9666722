"""
Outcome Dispatcher

Turns a ResolvedOutcome into a one-sentence instruction and injects it into
the conversation as a new turn, so the agent announces the result on its own.

Every instruction starts with the request id, which keeps the model's history
unambiguous when several proposals are in flight. Failures of the
conversational engine or of the backend forwarder are logged and swallowed
here: the outcome is already settled and the queue must still advance.
"""

import inspect
from datetime import datetime

from loguru import logger

from meeting_approval.protocol.message_types import (
    ApprovalRequest,
    CalendarEventPayload,
    ResolvedOutcome,
)
from meeting_approval.result import Error, Ok
from meeting_approval.transport.interfaces import ActionForwarder, ConversationEngine


def format_event_time(start_iso: str) -> str:
    """Human-friendly start time, e.g. ``Tue, Oct 20 at 10:30 AM``."""
    try:
        start = datetime.fromisoformat(start_iso.strip())
    except ValueError:
        return start_iso or "an unspecified time"
    return start.strftime("%a, %b %d at %I:%M %p").replace(" 0", " ")


def build_approved_instruction(
    request: ApprovalRequest, outcome: ResolvedOutcome, payload: CalendarEventPayload
) -> str:
    approver = outcome.resolved_target_name or request.target_descriptor
    edited = " with their edits" if outcome.modified_payload is not None else ""
    return (
        f"[Request {request.request_id}] {approver} approved{edited} the calendar event "
        f'"{payload.title}" for {format_event_time(payload.start_iso)}, so briefly tell '
        f"the participants it has been added to the calendar."
    )


def build_rejected_instruction(request: ApprovalRequest, outcome: ResolvedOutcome) -> str:
    approver = outcome.resolved_target_name or request.target_descriptor or "the approver"
    reason = f" (reason: {outcome.reason})" if outcome.reason else ""
    return (
        f'[Request {request.request_id}] The calendar event "{request.payload.title}" '
        f"was not approved by {approver}{reason}, so briefly acknowledge this and ask "
        f"whether they would like to change anything."
    )


class OutcomeDispatcher:
    def __init__(
        self,
        engine: ConversationEngine,
        forwarder: ActionForwarder | None = None,
    ) -> None:
        self._engine = engine
        self._forwarder = forwarder

    async def dispatch(self, outcome: ResolvedOutcome, request: ApprovalRequest) -> None:
        """Deliver ``outcome`` to the conversation. Never raises."""
        if outcome.approved:
            payload = outcome.effective_payload(request)
            await self._forward(request, payload)
            instruction = build_approved_instruction(request, outcome, payload)
        else:
            instruction = build_rejected_instruction(request, outcome)

        logger.info(
            f"[OutcomeDispatcher] request_id={request.request_id} "
            f"status={outcome.status.value} → injecting instruction"
        )
        try:
            result = self._engine.inject_instruction(instruction)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(
                f"[OutcomeDispatcher] Conversation engine rejected instruction for "
                f"request_id={request.request_id}: {e!s}"
            )

    async def _forward(self, request: ApprovalRequest, payload: CalendarEventPayload) -> None:
        if self._forwarder is None:
            return
        try:
            result = await self._forwarder.forward(request, payload)
        except Exception as e:
            logger.error(f"[OutcomeDispatcher] Forwarder raised for {request.request_id}: {e!s}")
            return
        match result:
            case Ok(_):
                logger.info(f"[OutcomeDispatcher] Forwarded approved action {request.request_id}")
            case Error(reason):
                logger.error(
                    f"[OutcomeDispatcher] Could not forward approved action "
                    f"{request.request_id}: {reason}"
                )
