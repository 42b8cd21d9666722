"""
ADK Agent(ag) Package

Meeting assistant agent and the tool functions it exposes to the live model.
"""

from .agent import build_meeting_agent, build_meeting_instruction
from .tools import create_calendar_event


__all__ = [
    "build_meeting_agent",
    "build_meeting_instruction",
    "create_calendar_event",
]
