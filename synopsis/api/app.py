from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, Request, Response
from pydantic import BaseModel, Field
from starlette.middleware.cors import CORSMiddleware

from synopsis.config import Settings, load_settings
from synopsis.core.controller import SummarizationRequest, WordCountRange
from synopsis.errors import SummarizationError
from synopsis.service import SynopsisService
from synopsis.utils.logging import setup_logging


ROOT_DIR = Path(__file__).resolve().parents[2]
load_dotenv(ROOT_DIR / ".env")

settings = load_settings(os.environ.get("SYNOPSIS_CONFIG"))
setup_logging(Path(settings.logging.log_dir), settings.logging.level)
logger = logging.getLogger("synopsis.api")
access_logger = logging.getLogger("synopsis.access")


class RangeModel(BaseModel):
    min: int = Field(ge=0)
    max: int = Field(ge=0)


class SummarizeRequest(BaseModel):
    text: str
    range: RangeModel

    def to_core(self) -> SummarizationRequest:
        return SummarizationRequest(
            text=self.text,
            target_range=WordCountRange(min=self.range.min, max=self.range.max),
        )


class SummarizeResponse(BaseModel):
    summary: str


class HealthResponse(BaseModel):
    status: str
    model_ready: bool
    model_state: str
    pending: int


api_router = APIRouter(prefix="/api")


@api_router.post("/summarize", response_model=SummarizeResponse)
async def summarize(req: SummarizeRequest, request: Request):
    service: SynopsisService = request.app.state.service
    try:
        res = await service.summarize(req.to_core())
    except SummarizationError as e:
        logger.error("Summarization failed kind=%s: %s", e.kind, e.message)
        return Response(status_code=500)
    except Exception:
        logger.exception("Summarization failed")
        return Response(status_code=500)

    logger.info(
        "summarize elapsed_ms=%.1f passes=%d words=%d stop=%s",
        res.elapsed_ms,
        res.iterations,
        res.word_count,
        res.stop_reason,
    )
    return SummarizeResponse(summary=res.summary)


@api_router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    service: SynopsisService = request.app.state.service
    return HealthResponse(
        status="ok",
        model_ready=service.gateway.is_ready,
        model_state=service.gateway.state,
        pending=service.pending,
    )


@asynccontextmanager
async def _lifespan(app: FastAPI):
    # Tokenizer loads here; the model keeps loading in the background.
    service: SynopsisService = app.state.service
    service.start()
    try:
        yield
    finally:
        service.shutdown()


def create_app(service: Optional[SynopsisService] = None, app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings
    app = FastAPI(title="synopsis", lifespan=_lifespan)
    app.state.service = service or SynopsisService(app_settings)
    app.include_router(api_router)

    app.add_middleware(
        CORSMiddleware,
        allow_credentials=True,
        allow_origins=app_settings.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        access_logger.info(
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000.0,
        )
        return response

    return app


app = create_app()
