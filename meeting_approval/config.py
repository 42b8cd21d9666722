"""
Approval engine settings.

All values come from environment variables (``server.py`` loads ``.env.local``
with python-dotenv before calling :func:`load_settings`). Invalid values fall
back to their defaults with a warning, the same policy LOG_LEVEL follows.
"""

import os
from dataclasses import dataclass

from loguru import logger


DEFAULT_APPROVAL_TIMEOUT_MS = 60_000
DEFAULT_RPC_GRACE_MS = 2_000
DEFAULT_AGENT_IDENTITY_PREFIX = "agent-"
DEFAULT_RPC_METHOD = "tool_approval"
DEFAULT_BIDI_MODEL = "gemini-2.5-flash-native-audio-preview-12-2025"


@dataclass(frozen=True)
class ApprovalSettings:
    """Runtime knobs for one agent process."""

    # Sent to the approver as timeoutMs AND used as the RPC response timeout
    approval_timeout_ms: int = DEFAULT_APPROVAL_TIMEOUT_MS
    rpc_grace_ms: int = DEFAULT_RPC_GRACE_MS
    agent_identity_prefix: str = DEFAULT_AGENT_IDENTITY_PREFIX
    rpc_method: str = DEFAULT_RPC_METHOD
    backend_url: str | None = None
    # Identity the agent joins the room with; RPCs fail fast while unset
    agent_identity: str | None = None
    bidi_model: str = DEFAULT_BIDI_MODEL


def _positive_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"[Config] {name}={raw!r} is not an integer, using {default}")
        return default
    if value <= 0:
        logger.warning(f"[Config] {name}={value} must be positive, using {default}")
        return default
    return value


def load_settings() -> ApprovalSettings:
    """Build settings from the current environment."""
    backend_url = os.getenv("AGENT_BACKEND_URL") or None
    settings = ApprovalSettings(
        approval_timeout_ms=_positive_int_env("APPROVAL_TIMEOUT_MS", DEFAULT_APPROVAL_TIMEOUT_MS),
        rpc_grace_ms=_positive_int_env("APPROVAL_RPC_GRACE_MS", DEFAULT_RPC_GRACE_MS),
        agent_identity_prefix=os.getenv("AGENT_IDENTITY_PREFIX", DEFAULT_AGENT_IDENTITY_PREFIX),
        rpc_method=os.getenv("APPROVAL_RPC_METHOD", DEFAULT_RPC_METHOD),
        backend_url=backend_url.rstrip("/") if backend_url else None,
        agent_identity=os.getenv("AGENT_IDENTITY") or None,
        bidi_model=os.getenv("ADK_BIDI_MODEL", DEFAULT_BIDI_MODEL),
    )
    logger.debug(f"[Config] Loaded settings: {settings}")
    return settings
