"""
Approval Server with FastAPI

Approver clients (the meeting call UI) connect here over a websocket, one per
participant identity. The agent's approval RPCs travel over these sockets and
the clients answer with ``rpc_response`` frames.

The meeting agent itself runs as an ADK live session per meeting. Each live
session gets its own calendar approval tool, wired to the approver channels
and to the session's LiveRequestQueue for injecting outcomes.

Endpoints:
    GET  /health                    liveness + connected participants
    WS   /approvals/{identity}      approver channel (``?name=`` display name)
    WS   /meetings/{meeting_id}/live  live agent session for one meeting
"""

import asyncio
import json
from collections.abc import Callable

from dotenv import load_dotenv


# Load .env.local BEFORE local imports so settings see it
load_dotenv(".env.local")

from fastapi import FastAPI, WebSocket, WebSocketDisconnect  # noqa: E402
from google.adk.agents import Agent, LiveRequestQueue  # noqa: E402
from google.adk.agents.run_config import RunConfig, StreamingMode  # noqa: E402
from google.adk.runners import InMemoryRunner, Runner  # noqa: E402
from google.genai import types  # noqa: E402
from loguru import logger  # noqa: E402

from meeting_approval import (  # noqa: E402
    ApprovalSettings,
    Error,
    LiveRequestQueueEngine,
    Ok,
    WebSocketRpcTransport,
    build_calendar_tool,
    load_settings,
    register_calendar_tool,
    unregister_calendar_tool,
)
from meeting_approval.ags import build_meeting_agent  # noqa: E402
from meeting_approval.ags.agent import (  # noqa: E402
    DEFAULT_AGENT_NAME,
    DEFAULT_CUSTOM_INSTRUCTIONS,
    DEFAULT_MEETING_NAME,
)
from meeting_approval.logging_config import configure_logging  # noqa: E402
from meeting_approval.utils import parse_json_safely  # noqa: E402


APP_NAME = "meeting_approval"

RunnerFactory = Callable[[Agent], Runner]


def _default_runner_factory(agent: Agent) -> Runner:
    return InMemoryRunner(agent=agent, app_name=APP_NAME)


def build_run_config(model: str) -> RunConfig:
    """Native audio models speak; everything else streams text."""
    if "native-audio" in model:
        logger.info(f"[Live] Detected native-audio model: {model}, using AUDIO modality")
        return RunConfig(
            streaming_mode=StreamingMode.BIDI,
            response_modalities=["AUDIO"],
            input_audio_transcription=types.AudioTranscriptionConfig(),
            output_audio_transcription=types.AudioTranscriptionConfig(),
        )
    logger.info(f"[Live] Using TEXT modality for model: {model}")
    return RunConfig(
        streaming_mode=StreamingMode.BIDI,
        response_modalities=["TEXT"],
    )


def create_app(
    transport: WebSocketRpcTransport | None = None,
    settings: ApprovalSettings | None = None,
    runner_factory: RunnerFactory | None = None,
) -> FastAPI:
    """Build the app around ``transport`` (a fresh one from settings by default)."""
    settings = settings or load_settings()
    if transport is None:
        transport = WebSocketRpcTransport(local_identity=settings.agent_identity)
    runner_factory = runner_factory or _default_runner_factory

    app = FastAPI(
        title="Meeting Approval Server",
        description="Websocket channel between the meeting agent and approving participants",
        version="0.1.0",
    )
    app.state.transport = transport
    app.state.settings = settings

    @app.get("/health")
    async def health() -> dict[str, object]:
        return {
            "status": "ok",
            "agentIdentity": transport.local_identity,
            "participants": [p.identity for p in transport.list_participants()],
            "pendingRpcs": transport.pending_count,
        }

    @app.websocket("/approvals/{identity}")
    async def approver_channel(websocket: WebSocket, identity: str, name: str = "") -> None:
        await websocket.accept()
        transport.connect(identity, name or identity, websocket)
        logger.info(f"[Server] Approver channel open for {identity}")

        try:
            while True:
                data = await websocket.receive_text()
                match parse_json_safely(data):
                    case Ok(event) if event.get("type") == "ping":
                        await websocket.send_text(
                            json.dumps({"type": "pong", "timestamp": event.get("timestamp")})
                        )
                    case Ok(_):
                        transport.handle_message(identity, data)
                    case Error(error_msg):
                        logger.warning(f"[Server] Bad frame from {identity}: {error_msg}")
        except WebSocketDisconnect:
            logger.info(f"[Server] Approver channel closed for {identity}")
        finally:
            transport.disconnect(identity, websocket)

    @app.websocket("/meetings/{meeting_id}/live")
    async def live_session(  # noqa: PLR0913
        websocket: WebSocket,
        meeting_id: str,
        agent_id: str = "",
        agent_name: str = DEFAULT_AGENT_NAME,
        meeting_name: str = DEFAULT_MEETING_NAME,
        instructions: str = DEFAULT_CUSTOM_INSTRUCTIONS,
    ) -> None:
        """
        Run the meeting agent for one meeting.

        Upstream frames: ``ping`` and ``{"type": "text", "text": ...}`` user turns.
        Downstream frames: a ``session`` hello, then ADK events as JSON.
        """
        await websocket.accept()

        agent = build_meeting_agent(
            agent_name=agent_name,
            meeting_name=meeting_name,
            custom_instructions=instructions,
            model=settings.bidi_model,
        )
        runner = runner_factory(agent)
        # One session per connection: concurrent run_live() calls must not share one
        session = await runner.session_service.create_session(
            app_name=runner.app_name, user_id=meeting_id
        )
        live_request_queue = LiveRequestQueue()
        register_calendar_tool(
            session.id,
            build_calendar_tool(
                settings,
                transport=transport,
                directory=transport,
                engine=LiveRequestQueueEngine(live_request_queue),
                meeting_id=meeting_id,
                agent_id=agent_id or meeting_id,
            ),
        )
        logger.info(f"[Live] Session {session.id} started for meeting {meeting_id}")
        await websocket.send_text(json.dumps({"type": "session", "sessionId": session.id}))

        async def downstream_task() -> None:
            """Receives Events from run_live() and sends them to the websocket."""
            live_events = runner.run_live(
                user_id=meeting_id,
                session_id=session.id,
                live_request_queue=live_request_queue,
                run_config=build_run_config(settings.bidi_model),
            )
            async for event in live_events:
                await websocket.send_text(event.model_dump_json(exclude_none=True, by_alias=True))
            logger.info(f"[Live] run_live() completed for session {session.id}")

        async def upstream_task() -> None:
            """Receives websocket frames and turns them into live requests."""
            while True:
                data = await websocket.receive_text()
                match parse_json_safely(data):
                    case Ok(event) if event.get("type") == "ping":
                        await websocket.send_text(
                            json.dumps({"type": "pong", "timestamp": event.get("timestamp")})
                        )
                    case Ok(event) if event.get("type") == "text" and event.get("text"):
                        live_request_queue.send_content(
                            types.Content(role="user", parts=[types.Part(text=str(event["text"]))])
                        )
                    case Ok(event):
                        logger.warning(f"[Live] Ignoring frame type: {event.get('type')}")
                    case Error(error_msg):
                        logger.warning(f"[Live] Bad frame for meeting {meeting_id}: {error_msg}")

        try:
            await asyncio.gather(upstream_task(), downstream_task())
        except WebSocketDisconnect:
            logger.info(f"[Live] Websocket closed for meeting {meeting_id}")
        except Exception as e:
            logger.error(f"[Live] Session {session.id} failed: {e!s}")
        finally:
            live_request_queue.close()
            await unregister_calendar_tool(session.id)

    return app


configure_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")  # noqa: S104
