import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from navsite.core.auth import Principal
from navsite.core.config import Settings, get_settings
from navsite.core.security import get_principal, login_session, logout_session

router = APIRouter()
logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    password: str | None = None


class AuthMessageOut(BaseModel):
    success: bool = True
    message: str


class AuthStatusOut(BaseModel):
    success: bool = True
    authenticated: bool


@router.post("/login", response_model=AuthMessageOut)
async def login(
    payload: LoginRequest,
    request: Request,
    settings: Settings = Depends(get_settings),
) -> AuthMessageOut:
    login_session(request, payload.password, settings)
    logger.info("admin session opened")
    return AuthMessageOut(message="logged in")


@router.post("/logout", response_model=AuthMessageOut)
async def logout(request: Request) -> AuthMessageOut:
    logout_session(request)
    return AuthMessageOut(message="logged out")


@router.get("/status", response_model=AuthStatusOut)
async def auth_status(principal: Principal = Depends(get_principal)) -> AuthStatusOut:
    return AuthStatusOut(authenticated=principal.is_authorized)
