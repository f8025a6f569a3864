"""API router aggregation."""

from fastapi import APIRouter

from redeploy.routes.api import auth, deploy, groups, history, repos, saved_repos, webhooks

router = APIRouter(prefix="/api", tags=["api"])
router.include_router(auth.router)
router.include_router(deploy.router)
router.include_router(repos.router)
router.include_router(saved_repos.router)
router.include_router(groups.router)
router.include_router(history.router)
router.include_router(webhooks.router)
