import uuid
from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import Settings, get_settings
from core.auth import user_id_from_claims, verify_jwt
from core.exceptions import AuthenticationError, ForbiddenError

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: uuid.UUID
    role: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    if credentials is None:
        raise AuthenticationError("User not authenticated")
    payload = verify_jwt(credentials.credentials, settings.jwt_secret)
    return CurrentUser(id=user_id_from_claims(payload), role=payload.get("role"))


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise ForbiddenError("Admin access required")
    return user
