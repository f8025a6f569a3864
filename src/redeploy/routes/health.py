"""Health routes."""

from fastapi import APIRouter

from redeploy import __version__

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, object]:
    return {"ok": True, "version": __version__}
