"""FastAPI dependencies for request credentials.

The GitHub credential travels as a bearer token and the caller identity as an
opaque ``X-User-Id`` header. Neither is verified here.
"""

from fastapi import Header

from redeploy.errors import RequestError


def _extract_bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_github_token(authorization: str | None = Header(default=None)) -> str:
    token = _extract_bearer(authorization)
    if not token:
        raise RequestError("Authorization required", code="AUTH_REQUIRED", status=401)
    return token


def require_user_id(x_user_id: str | None = Header(default=None)) -> str:
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise RequestError("User identification required", code="USER_REQUIRED", status=401)
    return user_id
