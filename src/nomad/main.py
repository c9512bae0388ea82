"""
Nomad Trail API - Main FastAPI application.

Entry point for the scenario generation server.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from nomad import __version__
from nomad.config import configure_logging, get_settings
from nomad.core.models import SchemaVariant
from nomad.engine import ScenarioGenerationError, ScenarioGenerator
from nomad.providers import GeminiAdapter

logger = logging.getLogger(__name__)

# Global instances
generator: ScenarioGenerator | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - setup and teardown."""
    global generator

    settings = get_settings()
    configure_logging(settings)

    provider = GeminiAdapter(
        api_key=settings.gemini_api_key,
        base_url=settings.gemini_base_url,
        timeout=settings.gemini_timeout_seconds,
    )
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; generation requests will fail")

    generator = ScenarioGenerator(provider, settings=settings)

    yield

    # Cleanup
    await provider.close()
    generator = None


app = FastAPI(
    title="Nomad Trail API",
    description="Scenario generation for text-based survival games",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


# =============================================================================
# Request Models
# =============================================================================


class TrailRequest(BaseModel):
    """Request body for /api/generate."""
    profession: str | None = None


# =============================================================================
# Error Handling
# =============================================================================


def error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    """Render a failure as {error, details?}."""
    content: dict[str, Any] = {"error": error}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(ScenarioGenerationError)
async def generation_error_handler(request: Request, exc: ScenarioGenerationError) -> JSONResponse:
    return error_response(500, exc.message, exc.details)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, "Invalid request body", str(exc.errors()))


def get_generator() -> ScenarioGenerator:
    """Get the shared generator, or 503 before startup."""
    if not generator:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return generator


# =============================================================================
# Health & Status Endpoints
# =============================================================================


@app.get("/health")
async def health() -> dict[str, str]:
    """Basic health check."""
    return {"status": "healthy", "version": __version__}


@app.get("/api/status")
async def status(gen: ScenarioGenerator = Depends(get_generator)) -> dict[str, Any]:
    """Detailed status including the generation service."""
    settings = get_settings()
    provider_health = await gen.provider.health_check()

    return {
        "version": __version__,
        "provider": {
            "name": gen.provider.name,
            "status": provider_health.status.value,
            "latency_ms": provider_health.latency_ms,
            "error": provider_health.error,
            "models_available": provider_health.models_available,
        },
        "models": {
            SchemaVariant.SURVIVAL.value: settings.survival_model,
            SchemaVariant.NOMAD_TRAIL.value: settings.trail_model,
        },
    }


# =============================================================================
# Scenario Endpoints
# =============================================================================


@app.options("/api/generate-scenario")
@app.options("/api/generate")
async def preflight() -> Response:
    """Answer bare OPTIONS requests; CORS preflights are handled by the middleware."""
    return Response(status_code=200)


@app.post("/api/generate-scenario")
async def generate_scenario(gen: ScenarioGenerator = Depends(get_generator)) -> dict[str, Any]:
    """
    Generate a news-grounded survival scenario.

    Returns the scenario with both naming conventions populated
    (scenario_text/description and options/choices).
    """
    scenario = await gen.generate(SchemaVariant.SURVIVAL)
    return scenario.to_payload()


@app.post("/api/generate")
async def generate_trail_event(
    body: TrailRequest | None = None,
    gen: ScenarioGenerator = Depends(get_generator),
) -> dict[str, Any]:
    """
    Generate a nomad trail event for the player's profession.

    Response is wrapped as {"scenario": {...}} for the trail client.
    """
    profession = (body.profession or "").strip() if body else ""
    if not profession:
        raise HTTPException(status_code=400, detail="Missing profession in request body.")

    scenario = await gen.generate(SchemaVariant.NOMAD_TRAIL, profession=profession)
    return {"scenario": scenario.to_payload()}


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("nomad.main:app", host=settings.api_host, port=settings.api_port)
