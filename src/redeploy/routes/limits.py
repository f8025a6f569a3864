"""Shared slowapi limiter for the mutating deploy endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from redeploy.config import get_settings

limiter = Limiter(key_func=get_remote_address)


def deploy_rate_limit() -> str:
    return f"{get_settings().rate_limit_deploys_per_minute}/minute"
