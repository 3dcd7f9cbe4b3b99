from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from shared.auth.config import AuthSettings
from shared.models.user import CurrentUser

http_bearer = HTTPBearer(auto_error=False)


def get_auth_settings() -> AuthSettings:
    return AuthSettings()


def _decode_token(token: str, settings: AuthSettings) -> dict:
    return jwt.decode(
        token,
        settings.secret,
        algorithms=[settings.algorithm],
        issuer=settings.issuer,
        audience=settings.audience,
        options={"leeway": settings.leeway_seconds},
    )


def _payload_to_caller(payload: dict) -> CurrentUser:
    subject = payload.get("sub")
    if not subject:
        raise ValueError("Missing sub in token")
    return CurrentUser(id=UUID(subject), username=payload.get("username") or "")


def issue_token(user: CurrentUser, settings: AuthSettings) -> str:
    """Mint an access token for ``user``. Used by tooling and tests."""
    payload = {
        "sub": str(user.id),
        "username": user.username,
        "iss": settings.issuer,
        "aud": settings.audience,
    }
    return jwt.encode(payload, settings.secret, algorithm=settings.algorithm)


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    settings: AuthSettings = Depends(get_auth_settings),
) -> CurrentUser | None:
    """Resolve the caller from a bearer token; an invalid token counts as anonymous."""
    if not credentials or not credentials.credentials:
        return None
    try:
        return _payload_to_caller(_decode_token(credentials.credentials, settings))
    except (JWTError, ValueError):
        return None
