"""
ADK Agent Tools

``create_calendar_event`` is what the live model calls. It looks up the
session's CalendarApprovalTool and returns its acknowledgement right away;
the approval itself happens in the background and the result is injected
into the conversation later.
"""

import json

from google.adk.tools.tool_context import ToolContext
from loguru import logger

from meeting_approval.protocol.message_types import CalendarToolArgs
from meeting_approval.tools.registry import get_calendar_tool


async def create_calendar_event(
    target_participant: str,
    title: str,
    description: str,
    start_iso: str,
    end_iso: str,
    attendees: list[str],
    tool_context: ToolContext | None = None,
) -> str:
    """
    Create a calendar event once participants settle on a meeting date or deadline.
    A participant must approve it first; this returns immediately with a pending status.

    Args:
        target_participant: Name of the participant who must approve the event
        title: Short event title
        description: Event description. Pass an empty string if none.
        start_iso: Event start time in ISO 8601 format
        end_iso: Event end time in ISO 8601 format
        attendees: Attendee email addresses. Pass an empty list if none.

    Returns:
        JSON acknowledgement with callId, status "pending", target and message
    """
    logger.info(f"[create_calendar_event] 🤖 title={title!r} target={target_participant!r}")

    tool = get_calendar_tool(tool_context.session.id) if tool_context else None
    if tool is None:
        error_msg = "Calendar approvals are not available in this session"
        logger.error(f"[create_calendar_event] {error_msg}")
        return json.dumps({"status": "unavailable", "message": error_msg})

    return tool.execute(
        CalendarToolArgs(
            target_descriptor=target_participant,
            title=title,
            description=description,
            start_time=start_iso,
            end_time=end_iso,
            attendees=attendees or [],
        )
    )
