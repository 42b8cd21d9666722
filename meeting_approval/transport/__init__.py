"""
Transport Layer

Collaborator interfaces plus the adapters this repository runs against.

Components:
    - WebSocketRpcTransport: approver RPC over websockets (also the participant directory)
    - LiveRequestQueueEngine: turn injection into an ADK live session
    - HttpActionForwarder: approved actions → dashboard backend
"""

from .action_forwarder import HttpActionForwarder
from .interfaces import (
    ActionForwarder,
    ConversationEngine,
    Participant,
    ParticipantDirectory,
    RpcDeliveryError,
    RpcError,
    RpcNotConnectedError,
    RpcTimeoutError,
    RpcTransport,
)
from .live_engine import LiveRequestQueueEngine
from .websocket_rpc import WebSocketRpcTransport


__all__ = [
    "ActionForwarder",
    "ConversationEngine",
    "HttpActionForwarder",
    "LiveRequestQueueEngine",
    "Participant",
    "ParticipantDirectory",
    "RpcDeliveryError",
    "RpcError",
    "RpcNotConnectedError",
    "RpcTimeoutError",
    "RpcTransport",
    "WebSocketRpcTransport",
]
