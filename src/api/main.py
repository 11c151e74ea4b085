"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models.responses import ErrorCodes, ErrorResponse
from api.routes import health_router, projects_router, queries_router, timer_router
from core.config import API_DEBUG, API_VERSION, POLLING_INTERVAL_MINUTES, VAULT_DIR
from core.harvest_client import get_harvest_client
from services.documents import VaultDocumentRewriter
from services.session import HarvestSession, TimerPoller


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup: resolve the user and start polling the running timer
    client = get_harvest_client()
    session = HarvestSession(client=client)
    app.state.session = session
    app.state.rewriter = VaultDocumentRewriter(VAULT_DIR)

    poller = TimerPoller(session, POLLING_INTERVAL_MINUTES)
    if client.has_credentials:
        await session.refresh_user()
        poller.start()
    else:
        print("Warning: Harvest API credentials are not set.")

    yield

    # Shutdown
    await poller.stop()
    await client.aclose()


app = FastAPI(
    title="Harvest HQL API",
    description="Harvest timer control and HQL time reports for note documents",
    version=API_VERSION,
    debug=API_DEBUG,
    lifespan=lifespan,
)

# CORS middleware (for development)
if API_DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with standard error format."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            code=ErrorCodes.INTERNAL_ERROR,
            details=[],
        ).model_dump(),
    )


# Include routers
app.include_router(health_router)
app.include_router(queries_router)
app.include_router(timer_router)
app.include_router(projects_router)


# Entry point for uvicorn
if __name__ == "__main__":
    import uvicorn

    from core.config import API_HOST, API_PORT

    uvicorn.run(
        "api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_DEBUG,
    )
