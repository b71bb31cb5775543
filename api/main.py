"""
Token Sale Platform API - Main Application.

FastAPI application with CORS enabled for frontend communication.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from repositories.client import LOG_LEVEL, STORE_BACKEND

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create FastAPI application
app = FastAPI(
    title="Token Sale Platform API",
    description="REST API for token sales and transfer-policy checks",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS - Allow all origins for development
# TODO: Restrict origins once the production frontend domain is fixed
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for demo
    allow_credentials=True,
    allow_methods=["*"],  # Allow all HTTP methods
    allow_headers=["*"],  # Allow all headers
)


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status, version and configured storage backend.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "token-sale-platform-api",
        "store_backend": STORE_BACKEND,
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Token Sale Platform API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import sales, policies, ledger

app.include_router(sales.router, prefix="/api/v1", tags=["Sales"])
app.include_router(policies.router, prefix="/api/v1", tags=["Policies"])
app.include_router(ledger.router, prefix="/api/v1", tags=["Ledger"])
