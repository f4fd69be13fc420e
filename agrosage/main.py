"""
AgroSage — FastAPI Application
─────────────────────────────────
Entry point. Run with:
    uvicorn agrosage.main:app --reload --port 8000
"""

import logging
import sys
from contextlib import asynccontextmanager
from http import HTTPStatus

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException

from agrosage import config
from agrosage.routers import (
    agent_router, auth_router, flows_router, government_router,
    health_router, market_router, pages_router,
)
from agrosage.services.genai_client import get_genai_client
from agrosage.templating import STATIC_DIR

# ── Logging setup ─────────────────────────────────────────────────────────────
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("agrosage")


# ── Lifespan (startup / shutdown) ─────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s starting up...", config.APP_NAME)
    if not get_genai_client().configured:
        logger.warning("GEMINI_API_KEY is not set, AI widgets will return 503 until it is.")
    yield
    logger.info("%s shutting down.", config.APP_NAME)


# ── App ────────────────────────────────────────────────────────────────────────
app = FastAPI(
    title=f"{config.APP_NAME} — Agricultural Intelligence Dashboard",
    description=(
        "Role-based dashboards for farmers, agents/traders and government officials. "
        "Forecasts, diagnoses and risk analyses come from schema-validated "
        "generative-AI flows; market charts run on synthetic mandi data."
    ),
    version=config.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ── CORS ───────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error bodies ──────────────────────────────────────────────────────────────
@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": HTTPStatus(exc.status_code).phrase, "detail": exc.detail, "code": exc.status_code},
        headers=exc.headers,
    )


# ── Global exception handler ──────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.exception("Unhandled exception on %s %s", request.method, request.url)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": str(exc), "code": 500},
    )


# ── Routers ───────────────────────────────────────────────────────────────────
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
app.include_router(health_router)
app.include_router(pages_router)
app.include_router(auth_router)
app.include_router(flows_router)
app.include_router(market_router)
app.include_router(agent_router)
app.include_router(government_router)


# ── Dev runner ────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("agrosage.main:app", host="0.0.0.0", port=8000, reload=True)
