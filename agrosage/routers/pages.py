"""
AgroSage — Dashboard Pages
────────────────────────────
Server-rendered role dashboards. Each role sees only its own widget set;
AI-backed widgets call /api/flows/* from the browser.
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from agrosage.models.schemas import Role
from agrosage.services.agent_service import (
    connected_farmers, generate_commissions, generate_contract_logs, alert_console,
    query_desk, summarize_commissions, FARMER_STATUSES,
)
from agrosage.services.government_service import build_overview, policy_input
from agrosage.services.market_service import CROPS, SUPPLY_CHAIN
from agrosage.templating import templates

logger = logging.getLogger("agrosage.router.pages")
router = APIRouter(tags=["Pages"], include_in_schema=False)

FARMER_CROPS = ["Tomato", "Wheat", "Rice", "Onion", "Potato"]
FARMER_LOCATIONS = ["Pune", "Lucknow", "Nagpur", "Bangalore", "Delhi"]

ROLE_CARDS = [
    {"role": Role.FARMER, "name": "Farmer", "href": "/dashboard/farmer",
     "description": "Personalized crop health and market insights for your farm."},
    {"role": Role.AGENT, "name": "Agent/Trader", "href": "/dashboard/agent",
     "description": "Real-time market analytics and trade optimization tools."},
    {"role": Role.GOVERNMENT, "name": "Government", "href": "/dashboard/government",
     "description": "Policy-level data intelligence and monitoring for your region."},
]

# The widgets each role's dashboard renders (data-widget attributes in the templates)
ROLE_WIDGETS: Dict[Role, List[str]] = {
    Role.FARMER: ["crop-diagnosis", "price-forecast", "yield-forecast", "agrobot"],
    Role.AGENT: [
        "market-analytics", "price-board", "trade-volume", "supply-chain",
        "agent-price-predictor", "farmer-query-chat",
    ],
    Role.GOVERNMENT: ["yield-index", "msp-compliance", "complaint-heatmap", "policy-advisor"],
}

AGENT_TOOLS = [
    {"slug": "recommendations", "title": "AI Recommendations", "template": "dashboard/agent/recommendations.html"},
    {"slug": "risk-heatmap", "title": "Risk Heatmap", "template": "dashboard/agent/risk_heatmap.html"},
    {"slug": "regional-suitability", "title": "Regional Suitability", "template": "dashboard/agent/regional_suitability.html"},
    {"slug": "commission-tracker", "title": "Commission Tracker", "template": "dashboard/agent/commission_tracker.html"},
    {"slug": "alerts", "title": "Live Alerts", "template": "dashboard/agent/alerts.html"},
    {"slug": "geomap", "title": "Buyer-Seller GeoMap", "template": "dashboard/agent/geomap.html"},
    {"slug": "smart-contracts", "title": "Smart Contract Logs", "template": "dashboard/agent/smart_contracts.html"},
]
AGENT_TOOLS_BY_SLUG = {t["slug"]: t for t in AGENT_TOOLS}


def _context(role=None, active: str = "", **extra) -> dict:
    ctx = {
        "role": role.value if role else None,
        "active": active,
        "role_cards": ROLE_CARDS,
        "agent_tools": AGENT_TOOLS if role == Role.AGENT else [],
        "widgets": ROLE_WIDGETS.get(role, []),
    }
    ctx.update(extra)
    return ctx


@router.get("/", response_class=HTMLResponse)
async def landing(request: Request):
    return templates.TemplateResponse(request, "index.html", _context())


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_home(request: Request):
    return templates.TemplateResponse(request, "dashboard/index.html", _context(active="home"))


@router.get("/dashboard/farmer", response_class=HTMLResponse)
async def farmer_dashboard(request: Request):
    return templates.TemplateResponse(
        request, "dashboard/farmer.html",
        _context(Role.FARMER, active="farmer", crops=FARMER_CROPS, locations=FARMER_LOCATIONS),
    )


@router.get("/dashboard/agent", response_class=HTMLResponse)
async def agent_dashboard(request: Request):
    return templates.TemplateResponse(
        request, "dashboard/agent.html",
        _context(
            Role.AGENT, active="agent",
            crops=CROPS,
            supply_chain=SUPPLY_CHAIN.model_dump(),
            queries=query_desk.list(),
        ),
    )


@router.get("/dashboard/agent/{tool}", response_class=HTMLResponse)
async def agent_tool(request: Request, tool: str):
    spec = AGENT_TOOLS_BY_SLUG.get(tool)
    if spec is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown agent tool: {tool}")

    extra = {"tool": spec}
    if tool == "commission-tracker":
        extra["summary"] = summarize_commissions(generate_commissions())
    elif tool == "smart-contracts":
        extra["logs"] = generate_contract_logs()
    elif tool == "alerts":
        extra["feed"] = alert_console.feed()
    elif tool == "geomap":
        extra["farmers"] = connected_farmers()
        extra["statuses"] = FARMER_STATUSES

    return templates.TemplateResponse(request, spec["template"], _context(Role.AGENT, active=tool, **extra))


@router.get("/dashboard/government", response_class=HTMLResponse)
async def government_dashboard(request: Request):
    overview = build_overview()
    return templates.TemplateResponse(
        request, "dashboard/government.html",
        _context(Role.GOVERNMENT, active="government", overview=overview, policy=policy_input(overview)),
    )
