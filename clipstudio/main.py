"""
ClipStudio API - FastAPI application entry point.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import get_settings
from .database import engine, Base
from .limiter import limiter
from .logging_config import api_logger, log_request
from .middleware import SecurityHeadersMiddleware
from .responses import ApiException, api_exception_handler
from .routes import auth_router, clips_router, media_router

settings = get_settings()

# Create tables (in production, use Alembic migrations instead)
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.app_name,
    description="Clip generation service: long-form media in, short vertical clips out",
    version="1.0.0",
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(ApiException, api_exception_handler)

app.add_middleware(SecurityHeadersMiddleware)

if settings.debug:
    app.add_middleware(log_request(api_logger))

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Authorization",
        "Content-Type",
        "Accept",
        "Origin",
        "X-Requested-With",
    ],
    max_age=3600,
)

app.include_router(auth_router)
app.include_router(media_router)
app.include_router(clips_router)


@app.get("/api/health")
def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "version": "1.0.0",
        "ai_gateway_configured": bool(settings.ai_gateway_api_key),
        "stream_render_configured": bool(
            settings.cloudflare_account_id and settings.cloudflare_stream_api_token
        ),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
