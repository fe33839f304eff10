"""
Text chat endpoint.

Sandi Metz Principles:
- Single Responsibility: HTTP request handling
- Small functions: Minimal logic in endpoints
- Dependency Injection: Service injected
"""

from fastapi import APIRouter, Depends, HTTPException

from voicegate.api.deps import get_chat_service
from voicegate.exceptions import AgentError, SessionError
from voicegate.models.chat import ChatRequest, ChatResponse
from voicegate.services.chat_service import ChatService
from voicegate.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("/chat", response_model=ChatResponse, response_model_by_alias=True)
async def chat(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service),  # noqa: B008
) -> ChatResponse:
    """
    Answer a text message.

    Args:
        request: Chat request
        service: Chat service (injected)

    Returns:
        Chat response

    Raises:
        HTTPException: If processing fails
    """
    try:
        return await service.process(request.message, request.session_id)
    except AgentError as e:
        logger.error("Agent error", error=str(e))
        raise HTTPException(status_code=502, detail="Failed to process message")
    except SessionError as e:
        logger.error("Session store error", error=str(e))
        raise HTTPException(status_code=503, detail="Session store unavailable")
