"""
Continued Education Blog API - FastAPI Application

Main entry point for the FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from blog.api import router as api_router
from blog.backend.client import BackendClient
from blog.core.config import get_settings
from blog.core.exceptions import BlogError, EmbedParseError

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting Continued Education Blog API...")

    app.state.backend = BackendClient(settings)
    logger.info(f"Backend client ready: {settings.backend_url}")

    yield

    # Shutdown
    logger.info("Shutting down Continued Education Blog API...")
    await app.state.backend.aclose()
    logger.info("Continued Education Blog API stopped")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Continued Education Blog API - posts, images and photo attribution",
    lifespan=lifespan,
    docs_url="/swagger" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# Exception handlers
@app.exception_handler(BlogError)
async def blog_exception_handler(request: Request, exc: BlogError) -> JSONResponse:
    """Map service errors to their HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")

    content = {"Code": exc.status_code, "Message": exc.message}
    if isinstance(exc, EmbedParseError):
        content["Snippet"] = exc.snippet
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"Code": 500, "Message": str(exc)},
    )


# Include API router
app.include_router(api_router)


@app.get("/health")
async def health() -> dict:
    """Liveness probe."""
    return {"status": "ok", "version": settings.app_version}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "blog.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=settings.workers,
    )
