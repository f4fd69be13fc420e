"""Role dashboards, agent tool pages, simulated login, health."""

import re

import pytest

from agrosage.models.schemas import Role
from agrosage.routers.pages import AGENT_TOOLS, ROLE_WIDGETS
from agrosage.templating import inr

WIDGET_RE = re.compile(r'data-widget="([\w-]+)"')


def widgets_on(html: str) -> set:
    return set(WIDGET_RE.findall(html))


@pytest.mark.parametrize("role", list(Role))
def test_each_dashboard_renders_only_its_widgets(client, role):
    res = client.get(f"/dashboard/{role.value}")
    assert res.status_code == 200
    assert widgets_on(res.text) == set(ROLE_WIDGETS[role])


def test_role_widget_sets_do_not_overlap():
    farmer, agent, gov = (set(ROLE_WIDGETS[r]) for r in (Role.FARMER, Role.AGENT, Role.GOVERNMENT))
    assert not (farmer & agent or farmer & gov or agent & gov)


def test_landing_and_role_picker(client):
    assert client.get("/").status_code == 200
    res = client.get("/dashboard")
    assert res.status_code == 200
    for role in Role:
        assert f'href="/dashboard/{role.value}"' in res.text


@pytest.mark.parametrize("tool", [t["slug"] for t in AGENT_TOOLS])
def test_agent_tool_pages(client, tool):
    res = client.get(f"/dashboard/agent/{tool}")
    assert res.status_code == 200
    assert f'data-tool="{tool}"' in res.text
    assert widgets_on(res.text) == set()


def test_unknown_agent_tool_is_404(client):
    assert client.get("/dashboard/agent/teleporter").status_code == 404


def test_agent_tools_only_in_agent_nav(client):
    assert "/dashboard/agent/smart-contracts" in client.get("/dashboard/agent").text
    assert "/dashboard/agent/smart-contracts" not in client.get("/dashboard/farmer").text


# ── Simulated login ──────────────────────────────────────────────────────────

@pytest.mark.parametrize("email, password, target", [
    ("agent@agrosage.in", "Agent@123", "/dashboard/agent"),
    ("GOV@agrosage.in", "Gov@2025", "/dashboard/government"),
    ("someone@example.com", "whatever123", "/dashboard/farmer"),
])
def test_login_redirects_by_role(client, email, password, target):
    res = client.post("/auth/login", data={"email": email, "password": password}, follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == target


@pytest.mark.parametrize("email, password, message", [
    ("not-an-email", "longenough", "Invalid email address"),
    ("a@b.co", "short", "Password must be at least 8 characters"),
])
def test_login_validation_errors(client, email, password, message):
    res = client.post("/auth/login", data={"email": email, "password": password}, follow_redirects=False)
    assert res.status_code == 422
    assert message in res.text


def test_signup_redirects_to_login(client):
    assert client.get("/auth/signup").status_code == 200
    res = client.post("/auth/signup", follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/auth/login"


# ── Health / info ────────────────────────────────────────────────────────────

def test_health_reports_model(client):
    data = client.get("/health").json()
    assert data["status"] == "ok"
    assert data["genai"] == {"model": "fake-model", "configured": True}


def test_api_info_lists_flows(client):
    assert "riskHeatmap" in client.get("/api").json()["flows"]


@pytest.mark.parametrize("value, text", [
    (1234567, "₹12,34,567"),
    (999, "₹999"),
    (-4500, "-₹4,500"),
    (1234.5, "₹1,234.50"),
    (None, "—"),
])
def test_inr_grouping(value, text):
    digits = 2 if isinstance(value, float) else 0
    assert inr(value, digits) == text


# ── Error bodies ─────────────────────────────────────────────────────────────

def test_unknown_route_uses_error_body(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.json() == {"error": "Not Found", "detail": "Not Found", "code": 404}


def test_wrong_method_uses_error_body(client):
    res = client.get("/api/flows/agrobot")
    assert res.status_code == 405
    assert res.json()["error"] == "Method Not Allowed"
    assert res.json()["code"] == 405
    assert "POST" in res.headers["allow"]


def test_unknown_agent_tool_uses_error_body(client):
    body = client.get("/dashboard/agent/teleporter").json()
    assert body["code"] == 404
    assert body["detail"] == "Unknown agent tool: teleporter"
