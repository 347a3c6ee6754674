# controllers/chatbot_controller.py
"""
Chatbot endpoint: POST {"query": "..."} -> answer, matching tasks, filters.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from auth.dependencies import get_current_user, get_database
from services.chatbot_service import ChatbotService
from services.errors import TrackerError

logger = logging.getLogger(__name__)

chatbot_router = APIRouter(tags=["Chatbot"])


@chatbot_router.post("", response_model=None)
async def ask(
    request: Request,
    user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_database),
):
    try:
        data = await request.json()
    except ValueError:
        return JSONResponse({"error": "Query is required"}, status_code=400)

    query = data.get("query") if isinstance(data, dict) else None

    try:
        return ChatbotService(db).answer(query)
    except TrackerError:
        raise
    except Exception:
        logger.exception("Chatbot failed for query %r", query)
        return JSONResponse({"error": "Failed to process query"}, status_code=500)
