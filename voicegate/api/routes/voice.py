"""
Voice chat endpoints.

Sandi Metz Principles:
- Single Responsibility: Upload validation and HTTP mapping
- Small functions: Validation kept out of the handlers
- Dependency Injection: Service injected
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from voicegate.api.deps import get_app_state, get_voice_service
from voicegate.exceptions import AgentError, SessionError, TranscriptionError
from voicegate.models.chat import VoiceResponse
from voicegate.models.speech import LanguageDetection
from voicegate.services.voice_service import VoiceService
from voicegate.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


async def read_audio(request: Request, audio: UploadFile) -> bytes:
    """
    Read and validate an uploaded audio file.

    Args:
        request: FastAPI request
        audio: Uploaded file

    Returns:
        Audio bytes

    Raises:
        HTTPException: 415 for non-audio uploads, 413 when too large
    """
    content_type = audio.content_type or ""
    if not content_type.startswith("audio/"):
        raise HTTPException(status_code=415, detail="Only audio files are allowed")

    limit = get_app_state(request).settings.max_upload_bytes
    data = await audio.read(limit + 1)
    if len(data) > limit:
        raise HTTPException(status_code=413, detail="Audio file too large")
    return data


@router.post("/voice", response_model=VoiceResponse, response_model_by_alias=True)
async def voice(
    request: Request,
    audio: UploadFile = File(...),  # noqa: B008
    session_id: Optional[str] = Form(None, alias="sessionId"),  # noqa: B008
    return_audio: bool = Form(True, alias="returnAudio"),  # noqa: B008
    service: VoiceService = Depends(get_voice_service),  # noqa: B008
) -> VoiceResponse:
    """
    Answer a spoken message.

    Args:
        request: FastAPI request
        audio: Uploaded audio
        session_id: Session id (generated when omitted)
        return_audio: Include synthesized reply audio
        service: Voice service (injected)

    Returns:
        Voice response
    """
    data = await read_audio(request, audio)
    try:
        return await service.process(data, session_id or None, return_audio)
    except TranscriptionError as e:
        logger.warning("Transcription rejected", error=str(e))
        raise HTTPException(status_code=400, detail=str(e))
    except AgentError as e:
        logger.error("Agent error", error=str(e))
        raise HTTPException(status_code=502, detail="Failed to process voice message")
    except SessionError as e:
        logger.error("Session store error", error=str(e))
        raise HTTPException(status_code=503, detail="Session store unavailable")


@router.post("/voice/language", response_model=LanguageDetection)
async def detect_language(
    request: Request,
    audio: UploadFile = File(...),  # noqa: B008
    service: VoiceService = Depends(get_voice_service),  # noqa: B008
) -> LanguageDetection:
    """
    Detect the spoken language of an upload.

    Args:
        request: FastAPI request
        audio: Uploaded audio
        service: Voice service (injected)

    Returns:
        Language detection
    """
    data = await read_audio(request, audio)
    try:
        return await service.detect_language(data)
    except TranscriptionError as e:
        logger.warning("Language detection rejected", error=str(e))
        raise HTTPException(status_code=400, detail=str(e))
