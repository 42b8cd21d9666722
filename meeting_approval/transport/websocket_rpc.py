"""
WebSocket RPC Transport

Request/response RPC between the agent and approver clients connected over
websockets (one socket per participant identity). Also serves as the
participant directory: whoever is connected is in the room.

Pattern:
    1. ``perform_rpc()`` sends an ``rpc_request`` frame and parks a Future
       keyed by requestId
    2. The websocket endpoint feeds every inbound text frame to
       ``handle_message()``
    3. An ``rpc_response`` frame resolves (or fails) the Future
    4. ``perform_rpc()`` returns the raw reply or raises an RpcError
       (timeout, delivery failure, local identity not set)

Disconnecting a participant fails their pending RPCs immediately instead of
letting them run into the timeout.
"""

import asyncio
import uuid
from dataclasses import dataclass
from typing import Protocol

from loguru import logger
from pydantic import ValidationError

from meeting_approval.protocol.message_types import RpcRequestFrame, RpcResponseFrame
from meeting_approval.result import Error, Ok, Result
from meeting_approval.transport.interfaces import (
    Participant,
    RpcDeliveryError,
    RpcNotConnectedError,
    RpcTimeoutError,
)


class TextSocket(Protocol):
    async def send_text(self, data: str) -> None: ...


@dataclass
class _PendingCall:
    destination_identity: str
    future: asyncio.Future[str]


class WebSocketRpcTransport:
    def __init__(self, local_identity: str | None = None) -> None:
        self._local_identity = local_identity
        self._connections: dict[str, tuple[Participant, TextSocket]] = {}
        self._pending: dict[str, _PendingCall] = {}

    # ========== Identity / directory ==========

    @property
    def local_identity(self) -> str | None:
        return self._local_identity

    def set_local_identity(self, identity: str | None) -> None:
        self._local_identity = identity
        logger.info(f"[WebSocketRpc] Local identity set to {identity!r}")

    def connect(self, identity: str, name: str, websocket: TextSocket) -> None:
        if identity in self._connections:
            logger.warning(f"[WebSocketRpc] Replacing existing connection for {identity}")
        self._connections[identity] = (Participant(identity=identity, name=name), websocket)
        logger.info(f"[WebSocketRpc] Participant connected: {identity} ({name})")

    def disconnect(self, identity: str, websocket: TextSocket | None = None) -> None:
        current = self._connections.get(identity)
        if websocket is not None and current is not None and current[1] is not websocket:
            # A newer socket replaced this one; keep it and its pending calls
            logger.debug(f"[WebSocketRpc] Stale socket for {identity} closed")
            return
        self._connections.pop(identity, None)
        failed = 0
        for request_id, call in list(self._pending.items()):
            if call.destination_identity == identity and not call.future.done():
                call.future.set_exception(RpcDeliveryError(f"{identity} disconnected"))
                self._pending.pop(request_id, None)
                failed += 1
        logger.info(f"[WebSocketRpc] Participant left: {identity} ({failed} pending call(s) failed)")

    def list_participants(self) -> list[Participant]:
        return [participant for participant, _ in self._connections.values()]

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # ========== RPC ==========

    async def perform_rpc(
        self,
        destination_identity: str,
        method: str,
        payload: str,
        response_timeout: float,
    ) -> str:
        if not self._local_identity:
            raise RpcNotConnectedError("Local identity is not established")

        connection = self._connections.get(destination_identity)
        if connection is None:
            raise RpcDeliveryError(f"{destination_identity} is not connected")
        _, websocket = connection

        request_id = str(uuid.uuid4())
        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = _PendingCall(destination_identity, future)

        frame = RpcRequestFrame(
            request_id=request_id,
            method=method,
            caller_identity=self._local_identity,
            payload=payload,
            response_timeout_ms=int(response_timeout * 1000),
        )
        try:
            try:
                await websocket.send_text(frame.model_dump_json(by_alias=True))
            except Exception as e:
                raise RpcDeliveryError(f"Could not send to {destination_identity}: {e!s}") from e
            logger.debug(f"[WebSocketRpc] → {destination_identity} {method} request_id={request_id}")

            try:
                return await asyncio.wait_for(future, timeout=response_timeout)
            except TimeoutError:
                raise RpcTimeoutError(
                    f"{destination_identity} did not answer {method} within {response_timeout}s"
                ) from None
        finally:
            self._pending.pop(request_id, None)

    def handle_message(self, identity: str, raw: str) -> Result[str, str]:
        """
        Route one inbound frame from ``identity``.

        Returns:
            Ok(request_id) if a pending call was resolved, Error(str) otherwise
        """
        try:
            frame = RpcResponseFrame.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"[WebSocketRpc] Ignoring unparseable frame from {identity}: {e.errors()}")
            return Error("Frame is not an rpc_response")

        call = self._pending.get(frame.request_id)
        if call is None:
            logger.warning(
                f"[WebSocketRpc] No pending call for request_id={frame.request_id} "
                f"(late reply from {identity}?)"
            )
            return Error(f"Unknown request_id {frame.request_id}")
        if call.destination_identity != identity:
            logger.warning(
                f"[WebSocketRpc] {identity} answered request_id={frame.request_id} "
                f"addressed to {call.destination_identity}, ignoring"
            )
            return Error("Reply came from the wrong participant")

        self._pending.pop(frame.request_id, None)
        if call.future.done():
            return Error(f"request_id {frame.request_id} already settled")
        if frame.error is not None:
            call.future.set_exception(RpcDeliveryError(frame.error))
        elif frame.payload is None:
            call.future.set_exception(RpcDeliveryError("Empty rpc_response"))
        else:
            call.future.set_result(frame.payload)
        logger.debug(f"[WebSocketRpc] ← {identity} request_id={frame.request_id}")
        return Ok(frame.request_id)
