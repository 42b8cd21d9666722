"""
Collaborator interfaces of the approval engine.

The engine never talks to a concrete room SDK, language model or database.
It depends on these protocols only; ``transport/`` ships adapters for the
ones this repository runs against (approver websockets, ADK live queue,
dashboard backend over HTTP).
"""

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol


if TYPE_CHECKING:
    from meeting_approval.protocol.message_types import ApprovalRequest, CalendarEventPayload
    from meeting_approval.result import Result


@dataclass(frozen=True)
class Participant:
    """A remote participant as seen in the room directory."""

    identity: str
    name: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.identity


# ============================================================
# RPC Error Taxonomy
# ============================================================


class RpcError(Exception):
    """Base class for request/response failures with a remote participant."""


class RpcTimeoutError(RpcError):
    """The remote side did not answer within the response timeout."""


class RpcDeliveryError(RpcError):
    """The request could not be delivered, or the remote side reported an error."""


class RpcNotConnectedError(RpcError):
    """The local identity is not established yet (handshake incomplete)."""


# ============================================================
# Protocols
# ============================================================


class RpcTransport(Protocol):
    @property
    def local_identity(self) -> str | None:
        """Identity the agent sends as; ``None`` until the connection is established."""
        ...

    async def perform_rpc(
        self,
        destination_identity: str,
        method: str,
        payload: str,
        response_timeout: float,
    ) -> str:
        """Send ``payload`` and return the raw reply, or raise an ``RpcError``."""
        ...


class ParticipantDirectory(Protocol):
    def list_participants(self) -> list[Participant]:
        """Fresh snapshot of the remote participants currently in the room."""
        ...


class ConversationEngine(Protocol):
    def inject_instruction(self, text: str) -> None | Awaitable[None]:
        """Ask the model to produce a new turn following ``text``."""
        ...


class ActionForwarder(Protocol):
    async def forward(
        self, request: "ApprovalRequest", payload: "CalendarEventPayload"
    ) -> "Result[None, str]":
        """Persist an approved action downstream."""
        ...
