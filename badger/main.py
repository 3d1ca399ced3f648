from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from badger import __version__
from badger.api.v1.badges import router as badges_router
from badger.api.v1.claims import router as claims_router
from badger.api.v1.health import router as health_router
from badger.api.v1.users import router as users_router
from badger.config import settings
from badger.core.badges.exceptions import GeneratorExhausted, InvalidArgument

# Configure basic logging
logging.basicConfig(level=logging.INFO)
log = logging.getLogger(__name__)

description = """
Issue Open Badges, hand out claim codes and award category capstones.
"""
tags_metadata = [
    {"name": "Badges", "description": "Badge catalogue, metadata and awarding."},
    {"name": "Claim codes", "description": "Claim-code management and redemption."},
    {"name": "Users", "description": "Earned badges and recommendations per user."},
    {"name": "Health", "description": "Liveness and readiness checks."},
]

app = FastAPI(
    title="Badger API",
    description=description,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=tags_metadata,
)

app.include_router(badges_router)
app.include_router(claims_router)
app.include_router(users_router)
app.include_router(health_router)

log.info("\U0001F331 FastAPI application configured. Environment: %s", settings.ENVIRONMENT)


@app.exception_handler(InvalidArgument)
async def invalid_argument_handler(request: Request, exc: InvalidArgument) -> JSONResponse:
    log.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(GeneratorExhausted)
async def generator_exhausted_handler(request: Request, exc: GeneratorExhausted) -> JSONResponse:
    log.error("Claim-code generation gave up on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    log.warning("Conflict on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": "conflicts with existing data"})


@app.get("/healthz", tags=["Health"], status_code=status.HTTP_200_OK)
async def health_check():
    """Basic health check endpoint."""
    return {"status": "ok", "environment": settings.ENVIRONMENT}
