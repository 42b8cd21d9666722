"""
Calendar Tool Registry

CalendarApprovalTool instances hold asyncio state and cannot live in ADK
``session.state`` (only serializable data), so ADK tool functions look them
up here by session id.

Lifecycle:
    - Register: when the live session for a meeting starts
    - Lookup:   each time the model calls ``create_calendar_event``
    - Cleanup:  when the session ends (also closes the coordinator)
"""

from typing import TYPE_CHECKING

from loguru import logger


if TYPE_CHECKING:
    from .calendar_tool import CalendarApprovalTool


_REGISTRY: dict[str, "CalendarApprovalTool"] = {}


def register_calendar_tool(session_id: str, tool: "CalendarApprovalTool") -> None:
    _REGISTRY[session_id] = tool
    logger.info(f"[CalendarToolRegistry] Registered tool for session_id={session_id}")


def get_calendar_tool(session_id: str) -> "CalendarApprovalTool | None":
    tool = _REGISTRY.get(session_id)
    if tool is None:
        logger.warning(
            f"[CalendarToolRegistry] No tool for session_id={session_id}. "
            f"Available sessions: {list(_REGISTRY.keys())}"
        )
    return tool


async def unregister_calendar_tool(session_id: str) -> None:
    """Drop the session's tool and cancel its outstanding approvals."""
    tool = _REGISTRY.pop(session_id, None)
    if tool is None:
        logger.warning(f"[CalendarToolRegistry] Nothing to unregister for session_id={session_id}")
        return
    await tool.coordinator.aclose()
    logger.info(f"[CalendarToolRegistry] Unregistered tool for session_id={session_id}")
