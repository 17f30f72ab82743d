"""Main FastAPI application."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from colleague import __version__
from colleague.api.endpoints import router
from colleague.config import get_settings
from colleague.errors import AppError
from colleague.utils.logging import LogConfig, get_logger, setup_logging

settings = get_settings()
setup_logging(LogConfig.from_settings(settings))

logger = get_logger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Colleague",
    description=(
        "A conversational AI colleague that streams replies over Server-Sent Events "
        "and asks for confirmation before running risky tools."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Chat",
            "description": (
                "Stream assistant turns. A turn that reaches a risky tool call ends with a "
                "tool_approval event and continues through the approval endpoint."
            ),
        },
        {
            "name": "Conversations",
            "description": "Create and end conversations.",
        },
        {
            "name": "Health",
            "description": "Service health monitoring and status checks.",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": {"code": exc.code, "message": exc.message}},
    )


# Include routers
app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("colleague.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
