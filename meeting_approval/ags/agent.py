"""
Meeting Assistant Agent

ADK agent that joins a meeting as a participant and can propose calendar
events. Instructions are built per meeting from the agent's configured name
and custom instructions.
"""

from google.adk.agents import Agent
from google.genai import types

from meeting_approval.config import DEFAULT_BIDI_MODEL

from .tools import create_calendar_event


AGENT_DESCRIPTION = "An AI participant in a live meeting that can schedule calendar events"

DEFAULT_AGENT_NAME = "AI Assistant"
DEFAULT_MEETING_NAME = "Meeting"
DEFAULT_CUSTOM_INSTRUCTIONS = "You are a helpful assistant."


def build_meeting_instruction(
    agent_name: str = DEFAULT_AGENT_NAME,
    meeting_name: str = DEFAULT_MEETING_NAME,
    custom_instructions: str = DEFAULT_CUSTOM_INSTRUCTIONS,
) -> str:
    return (
        f'You are "{agent_name}", an AI participant in this meeting.\n'
        f'Meeting name: "{meeting_name}".\n'
        "\n"
        "Your Core Instructions:\n"
        f"{custom_instructions}\n"
        "\n"
        "Behavioral Guidelines:\n"
        "- You behave exactly like another human participant in the meeting.\n"
        "- Speak naturally and conversationally. Be concise and professional.\n"
        "- Wait for the other person to finish speaking before you reply.\n"
        "- Default language is English unless the user speaks another language.\n"
        f'- Introduce yourself as "{agent_name}" if asked who you are.\n'
        "\n"
        "Calendar events:\n"
        "- When participants agree on a date or deadline, call create_calendar_event and name "
        "the participant who should approve it.\n"
        "- The tool only returns a pending status. Say you are waiting for approval and keep "
        "the conversation going; never call it again for the same event.\n"
        "- Instructions starting with [Request <id>] carry the approval result. Announce it "
        "briefly.\n"
    )


def build_meeting_agent(
    agent_name: str = DEFAULT_AGENT_NAME,
    meeting_name: str = DEFAULT_MEETING_NAME,
    custom_instructions: str = DEFAULT_CUSTOM_INSTRUCTIONS,
    model: str = DEFAULT_BIDI_MODEL,
) -> Agent:
    return Agent(
        name="meeting_assistant",
        model=model,
        description=AGENT_DESCRIPTION,
        instruction=build_meeting_instruction(agent_name, meeting_name, custom_instructions),
        tools=[create_calendar_event],
        generate_content_config=types.GenerateContentConfig(
            http_options=types.HttpOptions(timeout=300_000),
        ),
    )
