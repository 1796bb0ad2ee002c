"""Widget feedback route."""

import logging
from typing import Any

from fastapi import APIRouter, Body

logger = logging.getLogger(__name__)

router = APIRouter(tags=["feedback"])


@router.post("/feedback")
async def submit_feedback(payload: dict[str, Any] | None = Body(None)) -> dict[str, str]:
    """Accept thumbs-up/down feedback from the widget.

    Feedback is only logged; nothing is stored.
    """
    logger.info("Feedback received", extra={"fields": sorted((payload or {}).keys())})
    return {"message": "Feedback received"}
