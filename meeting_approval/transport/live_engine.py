"""
Conversation engine adapter for ADK live sessions.

Injects an instruction as a user turn on the session's LiveRequestQueue; the
live model answers it like any other turn and speaks the result.
"""

from google.adk.agents import LiveRequestQueue
from google.genai import types
from loguru import logger


class LiveRequestQueueEngine:
    def __init__(self, live_request_queue: LiveRequestQueue) -> None:
        self._live_request_queue = live_request_queue

    def inject_instruction(self, text: str) -> None:
        content = types.Content(role="user", parts=[types.Part(text=text)])
        self._live_request_queue.send_content(content)
        logger.info(f"[LiveEngine] Injected instruction: {text[:80]}")
