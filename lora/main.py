from dataclasses import asdict
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lora.config import (
    CACHE_CONFIG,
    ESCALATION_CONFIG,
    TIER_TIMEOUTS,
    check_api_keys_on_startup,
    logger,
)
from lora.exceptions import ValidationException
from lora.middleware import RequestContextMiddleware, get_request_id
from lora.models.claims import CheckRequest
from lora.models.results import PipelineResult
from lora.services.pipeline import VerificationPipeline, build_pipeline


def create_app(pipeline: Optional[VerificationPipeline] = None) -> FastAPI:
    """
    Build the HTTP app around one pipeline. The pipeline's cache is started
    on startup and stopped (and emptied) on shutdown.
    """
    app = FastAPI(title="Lora verification backend")
    app.state.pipeline = pipeline or build_pipeline()

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        check_api_keys_on_startup()
        await app.state.pipeline.cache.start()

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.pipeline.cache.stop()
        await app.state.pipeline.clear_caches()

    @app.exception_handler(ValidationException)
    async def validation_exception_handler(request: Request, exc: ValidationException):
        logger.warning(f"Rejected request: {exc.message}", extra={"request_id": get_request_id()})
        return JSONResponse(status_code=400, content=exc.to_dict())

    @app.get("/health")
    async def health_check():
        return {
            "status": "ok",
            "service": "lora-backend",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.post("/api/check", response_model=PipelineResult)
    async def check_claim(request: CheckRequest):
        return await app.state.pipeline.check(request.text)

    @app.get("/api/cache-stats")
    async def cache_stats():
        return {
            "cache": app.state.pipeline.cache_stats(),
            "config": {
                "cache": asdict(CACHE_CONFIG),
                "escalation": asdict(ESCALATION_CONFIG),
                "tier_timeouts": asdict(TIER_TIMEOUTS),
            },
        }

    @app.post("/api/clear-cache")
    async def clear_cache():
        cleared = await app.state.pipeline.clear_caches()
        return {"status": "cleared", "cleared": cleared}

    return app
