import hmac
import time

from fastapi import Depends, HTTPException, Request, status

from navsite.core.auth import Principal, principal_from_session
from navsite.core.config import Settings

UNAUTHORIZED_DETAIL = {"message": "authentication required, please log in", "requiresAuth": True}


def get_principal(request: Request) -> Principal:
    return principal_from_session(request.session)


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    try:
        principal.require_admin()
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED_DETAIL) from exc
    return principal


def verify_admin_password(candidate: str, settings: Settings) -> bool:
    return hmac.compare_digest(candidate.encode("utf-8"), settings.admin_password.encode("utf-8"))


def login_session(request: Request, password: str | None, settings: Settings) -> None:
    if not password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="password is required")
    if not verify_admin_password(password, settings):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="wrong password")
    request.session["authenticated"] = True
    request.session["login_time"] = time.time()


def logout_session(request: Request) -> None:
    request.session.clear()
