"""
Calendar Tool Entry Point

The only synchronous boundary the model sees. ``execute()`` returns a
"pending" acknowledgement immediately and never waits on a human; the real
outcome arrives later as an injected instruction.

Background sequence per new fingerprint:

    queue turn → resolve identity → remote approval → settle outcome
      → dispatch instruction → release queue token → remove dedup entry

State machine per request:

    CREATED → QUEUED → IN_FLIGHT → {APPROVED | REJECTED | TIMED_OUT | FAILED} → DISPATCHED
"""

import uuid
from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError

from meeting_approval.config import ApprovalSettings
from meeting_approval.protocol.fingerprint import compute_fingerprint
from meeting_approval.protocol.message_types import (
    ApprovalRequest,
    CalendarToolArgs,
    OutcomeStatus,
    RequestState,
    ResolvedOutcome,
    ToolAcknowledgement,
)
from meeting_approval.result import Error, Ok
from meeting_approval.tools.approval_invoker import RemoteApprovalInvoker
from meeting_approval.tools.approval_queue import QueueToken
from meeting_approval.tools.coordinator import ApprovalCoordinator
from meeting_approval.tools.dedup_registry import JoinedEntry, NewEntry
from meeting_approval.tools.identity_resolver import IdentityResolver
from meeting_approval.tools.outcome_dispatcher import OutcomeDispatcher
from meeting_approval.transport.action_forwarder import HttpActionForwarder
from meeting_approval.transport.interfaces import (
    ActionForwarder,
    ConversationEngine,
    ParticipantDirectory,
    RpcTransport,
)


UNEXPECTED_ERROR_REASON = "Something went wrong while requesting approval"
CANCELLED_REASON = "The approval request was cancelled"
_ARG_ALIASES = (
    ("target_descriptor", "targetDescriptor"),
    ("title", "title"),
    ("description", "description"),
    ("start_time", "startTime"),
    ("end_time", "endTime"),
)


def _coerce_args(raw: CalendarToolArgs | Mapping[str, Any]) -> CalendarToolArgs:
    if isinstance(raw, CalendarToolArgs):
        return raw
    try:
        return CalendarToolArgs.model_validate(dict(raw))
    except ValidationError as e:
        logger.warning(f"[CalendarTool] Coercing malformed tool arguments: {e.errors()}")
        fields: dict[str, Any] = {}
        for name, alias in _ARG_ALIASES:
            value = raw.get(alias, raw.get(name))
            fields[name] = "" if value is None else str(value)
        try:
            fields["attendees"] = CalendarToolArgs.model_validate(
                {"attendees": raw.get("attendees")}
            ).attendees
        except ValidationError:
            fields["attendees"] = []
        return CalendarToolArgs(**fields)


class CalendarApprovalTool:
    """Non-blocking ``create_calendar_event`` tool bound to one meeting."""

    def __init__(
        self,
        coordinator: ApprovalCoordinator,
        resolver: IdentityResolver,
        invoker: RemoteApprovalInvoker,
        dispatcher: OutcomeDispatcher,
        meeting_id: str,
        agent_id: str,
    ) -> None:
        self._coordinator = coordinator
        self._resolver = resolver
        self._invoker = invoker
        self._dispatcher = dispatcher
        self._meeting_id = meeting_id
        self._agent_id = agent_id
        # request_id → state, for requests not yet dispatched
        self._states: dict[str, RequestState] = {}

    @property
    def meeting_id(self) -> str:
        return self._meeting_id

    @property
    def agent_id(self) -> str:
        return self._agent_id

    @property
    def coordinator(self) -> ApprovalCoordinator:
        return self._coordinator

    def request_state(self, request_id: str) -> RequestState | None:
        return self._states.get(request_id)

    @property
    def active_requests(self) -> dict[str, RequestState]:
        return dict(self._states)

    def execute(self, args: CalendarToolArgs | Mapping[str, Any]) -> str:
        """
        Propose a calendar event for human approval.

        Args:
            args: Tool arguments (targetDescriptor, title, description,
                startTime, endTime, attendees)

        Returns:
            JSON acknowledgement ``{callId, status: "pending", target, message, duplicate}``
        """
        tool_args = _coerce_args(args)
        call_id = str(uuid.uuid4())
        request = ApprovalRequest(
            request_id=call_id,
            fingerprint=compute_fingerprint(
                self._meeting_id, tool_args.target_descriptor, tool_args.title, tool_args.start_time
            ),
            meeting_id=self._meeting_id,
            agent_id=self._agent_id,
            target_descriptor=tool_args.target_descriptor,
            payload=tool_args.to_payload(),
        )
        self._transition(request, RequestState.CREATED)
        target = tool_args.target_descriptor

        registration = self._coordinator.registry.register_or_join(request.fingerprint)
        match registration:
            case JoinedEntry():
                self._states.pop(call_id, None)
                logger.info(
                    f"[CalendarTool] call_id={call_id} duplicates in-flight "
                    f"fingerprint={request.fingerprint}, no new approval started"
                )
                ack = ToolAcknowledgement(
                    call_id=call_id,
                    target=target,
                    message=(
                        f'An identical request for "{tool_args.title}" is already waiting for '
                        f"{target}'s approval. Do not call the tool again; the result will be "
                        f"shared as soon as they respond."
                    ),
                    duplicate=True,
                )
            case NewEntry():
                token = self._coordinator.queue.enqueue()
                self._transition(request, RequestState.QUEUED)
                try:
                    self._coordinator.spawn(
                        self._run_approval(request, registration, token),
                        name=f"approval-{call_id}",
                    )
                except RuntimeError as e:
                    # Coordinator already closed (session ending)
                    logger.error(f"[CalendarTool] Could not start approval {call_id}: {e!s}")
                    registration.settle(
                        ResolvedOutcome.rejected(CANCELLED_REASON, OutcomeStatus.FAILED)
                    )
                    self._coordinator.queue.release(token)
                    registration.release()
                    self._states.pop(call_id, None)
                ack = ToolAcknowledgement(
                    call_id=call_id,
                    target=target,
                    message=(
                        f'Sent "{tool_args.title}" to {target} for approval. Tell the '
                        f"participants you are waiting for their confirmation; the result will "
                        f"arrive as a separate instruction."
                    ),
                )

        return ack.model_dump_json(by_alias=True)

    async def _run_approval(
        self, request: ApprovalRequest, entry: NewEntry, token: QueueToken
    ) -> None:
        queue = self._coordinator.queue
        try:
            try:
                await queue.wait_for_turn(token)
                self._transition(request, RequestState.IN_FLIGHT)
                outcome = await self._obtain_outcome(request)
            except Exception as e:
                logger.exception(
                    f"[CalendarTool] Approval sequence for {request.request_id} failed: {e!s}"
                )
                outcome = ResolvedOutcome.rejected(UNEXPECTED_ERROR_REASON, OutcomeStatus.FAILED)

            entry.settle(outcome)
            self._transition(request, outcome.status.request_state)
            await self._dispatcher.dispatch(outcome, request)
            self._transition(request, RequestState.DISPATCHED)
        finally:
            # Runs on cancellation too: never leave the queue or the registry stuck
            queue.release(token)
            if not entry.future.done():
                entry.settle(ResolvedOutcome.rejected(CANCELLED_REASON, OutcomeStatus.FAILED))
            entry.release()
            self._states.pop(request.request_id, None)

    async def _obtain_outcome(self, request: ApprovalRequest) -> ResolvedOutcome:
        # Re-resolved on every cycle against a fresh participant snapshot
        match self._resolver.resolve(request.target_descriptor):
            case Ok(participant):
                return await self._invoker.invoke(participant, request)
            case Error(reason):
                return ResolvedOutcome.rejected(reason, OutcomeStatus.FAILED)

    def _transition(self, request: ApprovalRequest, state: RequestState) -> None:
        self._states[request.request_id] = state
        logger.info(f"[CalendarTool] {request.request_id} → {state.value}")


def build_calendar_tool(
    settings: ApprovalSettings,
    transport: RpcTransport,
    directory: ParticipantDirectory,
    engine: ConversationEngine,
    meeting_id: str,
    agent_id: str,
    forwarder: ActionForwarder | None = None,
    coordinator: ApprovalCoordinator | None = None,
) -> CalendarApprovalTool:
    """
    Wire the approval engine for one meeting session.

    Approved actions are forwarded to ``settings.backend_url`` unless an
    explicit ``forwarder`` is given; without either nothing is forwarded.
    """
    coordinator = coordinator or ApprovalCoordinator()
    if forwarder is None and settings.backend_url:
        forwarder = HttpActionForwarder(settings.backend_url)
    return CalendarApprovalTool(
        coordinator=coordinator,
        resolver=IdentityResolver(directory, reserved_prefix=settings.agent_identity_prefix),
        invoker=RemoteApprovalInvoker(
            transport,
            timeout_ms=settings.approval_timeout_ms,
            method=settings.rpc_method,
            grace_ms=settings.rpc_grace_ms,
        ),
        dispatcher=OutcomeDispatcher(engine, forwarder=forwarder),
        meeting_id=meeting_id,
        agent_id=agent_id,
    )
