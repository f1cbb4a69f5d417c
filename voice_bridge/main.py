"""Main FastAPI application."""

from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError

from voice_bridge import __version__
from voice_bridge.api.endpoints import (
    CHAT_COMPLETIONS_PATH,
    CORS_HEADERS,
    describe_validation_error,
    error_response,
    router,
)
from voice_bridge.utils.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Voice Bridge",
    description=(
        "Bridges a voice conversation session to Anthropic Claude through an "
        "OpenAI-compatible chat completions endpoint."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Chat",
            "description": "OpenAI-compatible chat completions served by Claude, JSON or server-sent events.",
        },
        {
            "name": "Health",
            "description": "Service health monitoring and status checks.",
        },
    ],
)


@app.middleware("http")
async def add_cors_headers(request: Request, call_next) -> Response:
    """Allow any origin on every response, error responses included."""
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    """Report unusable chat completion bodies in the OpenAI error shape."""
    if request.url.path != CHAT_COMPLETIONS_PATH:
        return await request_validation_exception_handler(request, exc)

    message = describe_validation_error(exc)
    logger.error(f"Rejected chat completion request: {message}")
    return error_response(message)


# Include routers
app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("voice_bridge.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
