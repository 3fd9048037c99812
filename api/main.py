"""FastAPI app for the card listing export.

Run with: uvicorn api.main:app --reload --port 8000

Endpoints:
- /api/health - Health check
- /api/export/csv - Download one card as CSV
- /api/export/sheets - Write one card to a Google Sheets tab
"""
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from api.routes import exports, health
from core.config import get_config
from core.logging_config import current_request_id, setup_logging


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds a unique request ID to each request.

    - Uses the client's X-Request-ID when present, otherwise generates one
    - Sets it in the logging context for the request lifecycle
    - Adds X-Request-ID header to responses
    """
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        token = current_request_id.set(request_id)
        request.state.request_id = request_id
        try:
            response = await call_next(request)
        finally:
            current_request_id.reset(token)

        response.headers["X-Request-ID"] = request_id
        return response


def create_app() -> FastAPI:
    config = get_config()
    config.validate()
    setup_logging(level=config.log_level, format_type=config.log_format)

    app = FastAPI(
        title="Card Listing Export",
        description="Exports reviewed trading card records to CSV and Google Sheets",
        version=health.APP_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict to specific origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.include_router(health.router, prefix="/api", tags=["Health"])
    app.include_router(exports.router, prefix="/api")
    # Unprefixed aliases (legacy - kept for backwards compatibility)
    app.include_router(exports.router, include_in_schema=False)

    return app


app = create_app()
