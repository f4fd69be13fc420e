"""
AgroSage — /api/agent Router
Agent/trader tools: commissions, contract logs, alerts, farmer queries, geomap.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status

from agrosage.models.schemas import (
    AlertFeed, AlertItem, CommissionSummary, FarmerLocation, FarmerQuery,
    ReplyRequest, SmartContractLog,
)
from agrosage.services.agent_service import (
    NotFoundError, alert_console, connected_farmers, filter_logs,
    generate_commissions, generate_contract_logs, query_desk, summarize_commissions,
)

logger = logging.getLogger("agrosage.router.agent")
router = APIRouter(prefix="/api/agent", tags=["Agent Tools"])


@router.get("/commissions", response_model=CommissionSummary, summary="Recent deals with paid/pending totals")
async def commissions():
    return summarize_commissions(generate_commissions())


@router.get("/contracts", response_model=List[SmartContractLog], summary="Smart contract deal log, newest first")
async def contracts(contract_status: Optional[str] = Query(None, alias="status")):
    return filter_logs(generate_contract_logs(), contract_status)


# ── Alerts ───────────────────────────────────────────────────────────────────

@router.get("/alerts", response_model=AlertFeed, summary="Live alert feed")
async def alerts():
    return alert_console.feed()


@router.post("/alerts/read-all", response_model=AlertFeed, summary="Mark every alert as read")
async def read_all_alerts():
    return alert_console.mark_all_read()


@router.post("/alerts/simulate", response_model=AlertItem, summary="Push a simulated market alert")
async def simulate_alert():
    return alert_console.simulate()


@router.post("/alerts/{alert_id}/read", response_model=AlertItem, summary="Mark one alert as read")
async def read_alert(alert_id: str):
    try:
        return alert_console.mark_read(alert_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Alert {alert_id} not found")


# ── Farmer queries ───────────────────────────────────────────────────────────

@router.get("/queries", response_model=List[FarmerQuery], summary="Farmer query inbox")
async def queries():
    return query_desk.list()


@router.post("/queries/{query_id}/open", response_model=FarmerQuery, summary="Open a query (marks it read)")
async def open_query(query_id: str):
    try:
        return query_desk.open(query_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Query {query_id} not found")


@router.post("/queries/{query_id}/reply", response_model=FarmerQuery, summary="Reply to a farmer")
async def reply_query(query_id: str, req: ReplyRequest):
    try:
        return query_desk.reply(query_id, req.text)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Query {query_id} not found")


# ── Geomap ───────────────────────────────────────────────────────────────────

@router.get("/farmers", response_model=List[FarmerLocation], summary="Connected farmers by status")
async def farmers(farmer_status: Optional[str] = Query(None, alias="status")):
    return connected_farmers(farmer_status)
