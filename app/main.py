"""
Clinical Waste Risk Engine — FastAPI Application Entry Point

POST /v1/waste             → score + persist a waste event
GET  /v1/waste/alerts      → anomalous events
POST /v1/baselines         → department baseline upsert
GET  /v1/waste/health      → health check
GET  /docs                 → OpenAPI / Swagger UI
"""
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from app.api.baseline_endpoint import router as baseline_router
from app.api.waste_endpoint import router as waste_router
from app.core.config import get_settings
from app.services.event_publisher import close_producer

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.ConsoleRenderer() if get_settings().app_env == "development"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(get_settings().log_level),
)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        "waste_engine_starting",
        engine_version=settings.engine_version,
        narrative_model=settings.openai_model if settings.openai_api_key else None,
        anomaly_policy=settings.anomaly_threshold_policy,
    )
    yield
    logger.info("waste_engine_shutting_down")
    await close_producer()


app = FastAPI(
    title="Clinical Waste Risk Engine",
    description="Per-event risk scoring and anomaly detection for hospital waste disposal",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (dashboard + internal tools) ──
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # tighten in production
    allow_methods=["POST", "GET", "DELETE"],
    allow_headers=["*"],
)

# ── Prometheus metrics ──
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# ── Routes ──
app.include_router(waste_router)
app.include_router(baseline_router)


@app.get("/", include_in_schema=False)
async def root():
    return {
        "service": "waste-risk-engine",
        "version": "1.0.0",
        "docs": "/docs",
        "log_event": "POST /v1/waste",
    }
