"""
Remote Approval Invoker

Performs exactly one bounded-time request/response exchange with the
approving participant's client and turns every possible exit into a
ResolvedOutcome. ``invoke()`` never raises.

Exit paths:
    - local identity missing      → FAILED  (reconnect needed, no call attempted)
    - reply within timeout        → reply verbatim (APPROVED / REJECTED)
    - no reply within timeout     → TIMED_OUT "User did not respond in time"
    - delivery error / bad reply  → FAILED    "Failed to reach user for approval"

The same ``timeout_ms`` is sent to the client (``timeoutMs``) and used as the
RPC response timeout, so the dialog countdown and the agent agree. A local
guard of ``timeout + grace`` covers transports that never return.
"""

import asyncio
import time

from loguru import logger
from pydantic import ValidationError

from meeting_approval.config import DEFAULT_RPC_GRACE_MS, DEFAULT_RPC_METHOD
from meeting_approval.protocol.message_types import (
    ApprovalReply,
    ApprovalRequest,
    ApprovalRpcRequest,
    OutcomeStatus,
    ResolvedOutcome,
)
from meeting_approval.transport.interfaces import (
    Participant,
    RpcError,
    RpcNotConnectedError,
    RpcTimeoutError,
    RpcTransport,
)


TIMEOUT_REASON = "User did not respond in time"
UNREACHABLE_REASON = "Failed to reach user for approval"
NOT_CONNECTED_REASON = (
    "The assistant is not fully connected to the meeting yet and needs to reconnect "
    "before it can ask for approval"
)


def _now_ms() -> int:
    return int(time.time() * 1000)


class RemoteApprovalInvoker:
    def __init__(
        self,
        transport: RpcTransport,
        timeout_ms: int,
        method: str = DEFAULT_RPC_METHOD,
        grace_ms: int = DEFAULT_RPC_GRACE_MS,
    ) -> None:
        self._transport = transport
        self._timeout_ms = timeout_ms
        self._method = method
        self._grace_ms = grace_ms

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    async def invoke(
        self,
        participant: Participant,
        request: ApprovalRequest,
        timeout_ms: int | None = None,
    ) -> ResolvedOutcome:
        """
        Ask ``participant`` to approve ``request``.

        Args:
            participant: Resolved approver
            request: The proposal; its payload is sent unchanged
            timeout_ms: Override of the configured timeout (fixed at call time)

        Returns:
            ResolvedOutcome for every exit path
        """
        timeout_ms = timeout_ms or self._timeout_ms
        identity = participant.identity
        name = participant.display_name

        if not self._transport.local_identity:
            logger.error(
                f"[ApprovalInvoker] Local identity not established, skipping RPC "
                f"(request_id={request.request_id})"
            )
            return ResolvedOutcome.rejected(NOT_CONNECTED_REASON, OutcomeStatus.FAILED, identity, name)

        invoked_at = _now_ms()
        message = ApprovalRpcRequest(
            meeting_id=request.meeting_id,
            agent_id=request.agent_id,
            target_participant=identity,
            payload=request.payload,
            invoked_at=invoked_at,
            timeout_ms=timeout_ms,
        )
        logger.info(
            f"[ApprovalInvoker] → {identity} request_id={request.request_id} "
            f"title={request.payload.title!r} timeout={timeout_ms}ms"
        )

        try:
            raw_reply = await asyncio.wait_for(
                self._transport.perform_rpc(
                    destination_identity=identity,
                    method=self._method,
                    payload=message.model_dump_json(by_alias=True),
                    response_timeout=timeout_ms / 1000,
                ),
                timeout=(timeout_ms + self._grace_ms) / 1000,
            )
        except (RpcTimeoutError, TimeoutError):
            logger.warning(
                f"[ApprovalInvoker] ⏰ {identity} did not answer within {timeout_ms}ms "
                f"(request_id={request.request_id})"
            )
            return ResolvedOutcome.rejected(TIMEOUT_REASON, OutcomeStatus.TIMED_OUT, identity, name)
        except RpcNotConnectedError as e:
            logger.error(f"[ApprovalInvoker] Transport not connected: {e}")
            return ResolvedOutcome.rejected(NOT_CONNECTED_REASON, OutcomeStatus.FAILED, identity, name)
        except RpcError as e:
            logger.error(f"[ApprovalInvoker] Delivery to {identity} failed: {e}")
            return ResolvedOutcome.rejected(UNREACHABLE_REASON, OutcomeStatus.FAILED, identity, name)
        except Exception as e:
            logger.exception(f"[ApprovalInvoker] Unexpected transport error for {identity}: {e!s}")
            return ResolvedOutcome.rejected(UNREACHABLE_REASON, OutcomeStatus.FAILED, identity, name)

        elapsed = _now_ms() - invoked_at
        try:
            reply = ApprovalReply.model_validate_json(raw_reply)
        except ValidationError as e:
            logger.error(f"[ApprovalInvoker] Malformed reply from {identity}: {e.errors()}")
            return ResolvedOutcome.rejected(UNREACHABLE_REASON, OutcomeStatus.FAILED, identity, name)

        logger.info(
            f"[ApprovalInvoker] ← {identity} approved={reply.approved} "
            f"modified={reply.modified_payload is not None} after {elapsed}ms"
        )
        return ResolvedOutcome(
            approved=reply.approved,
            status=OutcomeStatus.APPROVED if reply.approved else OutcomeStatus.REJECTED,
            modified_payload=reply.modified_payload if reply.approved else None,
            reason=reply.reason,
            resolved_target_identity=identity,
            resolved_target_name=name,
        )
