"""
AgroSage — Simulated Login
No accounts exist. The demo credentials below pick the dashboard; any other
well-formed login lands on the farmer view.
"""

import logging

from fastapi import APIRouter, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError

from agrosage.models.schemas import LoginRequest, Role
from agrosage.templating import templates

logger = logging.getLogger("agrosage.router.auth")
router = APIRouter(prefix="/auth", tags=["Auth"], include_in_schema=False)

DEMO_ACCOUNTS = {
    ("agent@agrosage.in", "Agent@123"): Role.AGENT,
    ("gov@agrosage.in", "Gov@2025"): Role.GOVERNMENT,
}


def role_for(login: LoginRequest) -> Role:
    return DEMO_ACCOUNTS.get((login.email, login.password), Role.FARMER)


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request):
    return templates.TemplateResponse(request, "auth/login.html", {"errors": {}, "email": ""})


@router.post("/login")
async def login(request: Request, email: str = Form(""), password: str = Form("")):
    try:
        creds = LoginRequest(email=email, password=password)
    except ValidationError as e:
        errors = {str(err["loc"][0]): err["msg"].removeprefix("Value error, ") for err in e.errors()}
        return templates.TemplateResponse(
            request, "auth/login.html", {"errors": errors, "email": email},
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )
    role = role_for(creds)
    logger.info("Simulated login for %s as %s", creds.email, role.value)
    return RedirectResponse(url=f"/dashboard/{role.value}", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/signup", response_class=HTMLResponse)
async def signup_page(request: Request):
    return templates.TemplateResponse(request, "auth/signup.html", {})


@router.post("/signup")
async def signup():
    # Nothing is stored; point the user at the demo logins.
    return RedirectResponse(url="/auth/login", status_code=status.HTTP_303_SEE_OTHER)
