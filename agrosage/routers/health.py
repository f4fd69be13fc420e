"""
AgroSage — Health & Info Router
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from agrosage import config
from agrosage.services.flows import FLOWS
from agrosage.services.genai_client import GenAIClient, describe, get_genai_client

router = APIRouter(tags=["Health"])


@router.get("/health", summary="Health check")
async def health(client: GenAIClient = Depends(get_genai_client)):
    return {
        "status": "ok",
        "service": f"{config.APP_NAME} API",
        "version": config.APP_VERSION,
        "genai": describe(client),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/api", summary="API info")
async def root():
    return {
        "name": f"{config.APP_NAME} — Role-based Agricultural Dashboard",
        "version": config.APP_VERSION,
        "docs": "/docs",
        "dashboards": {
            "farmer": "/dashboard/farmer",
            "agent": "/dashboard/agent",
            "government": "/dashboard/government",
        },
        "flows": sorted(FLOWS),
        "endpoints": {
            "POST /api/flows/*":        "Generative-AI flows (schema-validated JSON)",
            "GET  /api/market/*":       "Synthetic mandi prices, volumes, supply chain",
            "GET  /api/agent/*":        "Commissions, contract logs, alerts, farmer queries",
            "GET  /api/government/*":   "Yield index, MSP compliance, grievance heatmap",
            "GET  /health":             "Service health check",
        },
    }
