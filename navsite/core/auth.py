from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class PrincipalType(str, Enum):
    ADMIN = "admin"
    GUEST = "guest"


@dataclass(slots=True)
class Principal:
    principal_type: PrincipalType
    login_time: float | None = None

    @property
    def is_authorized(self) -> bool:
        return self.principal_type is PrincipalType.ADMIN

    def require_admin(self) -> None:
        if not self.is_authorized:
            raise PermissionError("authentication required, please log in")


def principal_from_session(session: Mapping[str, Any]) -> Principal:
    if session.get("authenticated") is True:
        login_time = session.get("login_time")
        return Principal(
            principal_type=PrincipalType.ADMIN,
            login_time=float(login_time) if isinstance(login_time, (int, float)) else None,
        )
    return Principal(principal_type=PrincipalType.GUEST)
