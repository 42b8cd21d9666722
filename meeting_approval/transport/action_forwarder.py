"""
Forwards approved actions to the dashboard backend.

POST ``{backend}/api/agent-actions`` with
``{meetingId, agentId, type, payload}``; the backend persists the event and
fires its webhooks. Failures come back as ``Error`` and never raise.
"""

from typing import Any

import aiohttp
from loguru import logger

from meeting_approval.protocol.message_types import ApprovalRequest, CalendarEventPayload
from meeting_approval.result import Error, Ok, Result


AGENT_ACTIONS_PATH = "/api/agent-actions"
DEFAULT_FORWARD_TIMEOUT_SECONDS = 10.0


class HttpActionForwarder:
    def __init__(
        self, backend_url: str, timeout_seconds: float = DEFAULT_FORWARD_TIMEOUT_SECONDS
    ) -> None:
        self._url = backend_url.rstrip("/") + AGENT_ACTIONS_PATH
        self._timeout_seconds = timeout_seconds

    @property
    def url(self) -> str:
        return self._url

    async def forward(
        self, request: ApprovalRequest, payload: CalendarEventPayload
    ) -> Result[None, str]:
        body: dict[str, Any] = {
            "meetingId": request.meeting_id,
            "agentId": request.agent_id,
            "type": request.action_type,
            "payload": payload.model_dump(mode="json", by_alias=True),
        }
        try:
            timeout = aiohttp.ClientTimeout(total=self._timeout_seconds)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self._url, json=body) as response:
                    if 200 <= response.status < 300:  # noqa: PLR2004
                        logger.info(
                            f"[ActionForwarder] 📅 Forwarded {request.action_type} "
                            f"request_id={request.request_id}"
                        )
                        return Ok(None)
                    error_msg = f"Backend returned status {response.status}"
                    logger.error(f"[ActionForwarder] {error_msg} for {request.request_id}")
                    return Error(error_msg)
        except Exception as e:
            logger.error(f"[ActionForwarder] Backend forwarding error: {e!s}")
            return Error(str(e))
