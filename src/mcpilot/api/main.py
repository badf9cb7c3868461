"""FastAPI application for mcpilot."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mcpilot import __version__
from mcpilot.core.config import get_settings
from mcpilot.core.logging import configure_logging

from .errors import setup_exception_handlers
from .routes import ask_router, capabilities_router, execute_router

configure_logging()

app = FastAPI(
    title="mcpilot API",
    description="Natural-language front door for source-control and container backends",
    version=__version__,
)

# Configure CORS for the frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# Include routers
app.include_router(ask_router)
app.include_router(execute_router)
app.include_router(capabilities_router)


@app.get("/")
def root() -> dict:
    """Root endpoint."""
    return {"message": "mcpilot API", "version": __version__}


@app.get("/health")
def health() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}
