"""Streaming chat route consumed by the website widget."""

import logging
from typing import Annotated

from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse, StreamingResponse

from widget_relay.api.deps import Relay
from widget_relay.models.chat import ChatRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # disable nginx response buffering
}


@router.post("/chat", response_model=None)
async def chat(
    request: ChatRequest,
    relay: Relay,
    x_thread_id: Annotated[str | None, Header(alias="X-Thread-Id")] = None,
) -> StreamingResponse | JSONResponse:
    """Relay a chat turn to the assistant and stream the answer as Server-Sent Events.

    Emits SSE frames:
    - {"info": {"id": "<thread id>"}} when a new thread was created
    - {"content": "..."} for each text fragment
    - {"sources": [{"file_id": "...", "filename": "..."}]} for cited files
    - {"error": "..."} when the turn failed before any content
    - [DONE]
    """
    if not request.message or not request.message.strip():
        return JSONResponse(status_code=400, content={"error": "No message"})

    thread_id = x_thread_id or request.thread_id
    logger.info("Chat turn received", extra={"resumed": bool(thread_id)})

    return StreamingResponse(
        relay.stream(request.message, thread_id),
        media_type="text/event-stream; charset=utf-8",
        headers=SSE_HEADERS,
    )
