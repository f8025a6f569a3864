"""Placeholders for the OAuth and email sign-in flows.

Identity is out of scope for the service; these endpoints only describe what a
deployment would need to configure.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

router = APIRouter(prefix="/auth", tags=["api-auth"])

GITHUB_SCOPES = ["repo", "read:user", "user:email"]
GOOGLE_SCOPES = ["openid", "email", "profile"]


def _not_implemented(message: str, config: dict[str, object]) -> JSONResponse:
    return JSONResponse(
        status_code=501,
        content={"error": "not_implemented", "message": message, "config": config},
    )


@router.get("/github")
def github_login() -> JSONResponse:
    return _not_implemented("GitHub OAuth is not configured", {"scopes": GITHUB_SCOPES})


@router.get("/google")
def google_login() -> JSONResponse:
    return _not_implemented("Google OAuth is not configured", {"scopes": GOOGLE_SCOPES})


@router.get("/callback/github")
def github_callback() -> JSONResponse:
    return _not_implemented("GitHub OAuth callback is not configured", {"scopes": GITHUB_SCOPES})


@router.get("/callback/google")
def google_callback() -> JSONResponse:
    return _not_implemented("Google OAuth callback is not configured", {"scopes": GOOGLE_SCOPES})


@router.post("/email")
def email_login() -> JSONResponse:
    return _not_implemented("Email sign-in is not configured", {"methods": ["magic_link"]})
