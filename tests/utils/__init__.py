"""Shared test utilities for unit and integration tests."""

from tests.utils.fakes import (
    FakeRpcTransport,
    RecordedCall,
    RecordingEngine,
    StaticDirectory,
    make_approval_request,
)

__all__ = [
    "FakeRpcTransport",
    "RecordedCall",
    "RecordingEngine",
    "StaticDirectory",
    "make_approval_request",
]
