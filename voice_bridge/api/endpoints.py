"""API endpoints for the voice bridge."""

from datetime import UTC, datetime

from fastapi import APIRouter, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse

from voice_bridge import __version__
from voice_bridge.clients.anthropic import get_anthropic_client
from voice_bridge.models.health import HealthResponse
from voice_bridge.models.openai import ChatCompletionRequest, ErrorDetail, ErrorResponse
from voice_bridge.services.completions import CompletionsService
from voice_bridge.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

CHAT_COMPLETIONS_PATH = "/api/chat/completions"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    """OpenAI-style error body."""
    body = ErrorResponse(error=ErrorDetail(message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def describe_validation_error(exc: RequestValidationError) -> str:
    """One-line summary of what was wrong with the request body."""
    problems = [
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body') or 'body'}: {error['msg']}"
        for error in exc.errors()
    ]
    return f"Invalid request: {'; '.join(problems)}"


def get_completions_service() -> CompletionsService:
    """Build the completions service; raises ValueError without an API key."""
    return CompletionsService(get_anthropic_client())


@router.options(CHAT_COMPLETIONS_PATH, tags=["Chat"])
async def chat_completions_preflight() -> Response:
    """CORS pre-flight; answered without touching Claude."""
    return Response(status_code=200)


@router.post(CHAT_COMPLETIONS_PATH, tags=["Chat"])
async def chat_completions(request: ChatCompletionRequest) -> Response:
    """OpenAI-compatible chat completions backed by Claude.

    The voice provider's custom-LLM configuration points here. Replies are
    streamed as server-sent events when the request asks for it.
    """
    try:
        service = get_completions_service()
    except ValueError:
        logger.error("ANTHROPIC_API_KEY not configured")
        return error_response("Anthropic API key not configured")

    logger.info(f"Received chat completion request: {len(request.messages)} messages, stream={request.stream}")

    try:
        if request.stream:
            frames = await service.stream_completion(request)
            return StreamingResponse(frames, media_type="text/event-stream", headers=SSE_HEADERS)

        completion = await service.create_completion(request)
        logger.debug(f"Sending completion {completion.id}: {completion.choices[0].finish_reason}")
        return JSONResponse(content=completion.model_dump(exclude_none=True))

    except Exception as e:
        logger.error(f"Chat completion failed: {e}", exc_info=True)
        return error_response(str(e) or "Internal server error")


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=__version__,
    )
