"""Application configuration contract."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from redeploy.errors import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(alias="APP_ENV", default="dev")
    log_level: str = Field(alias="LOG_LEVEL", default="INFO")

    github_api_base_url: str = Field(alias="GITHUB_API_BASE_URL", default="https://api.github.com")
    github_api_version: str = Field(alias="GITHUB_API_VERSION", default="2022-11-28")
    github_user_agent: str = Field(alias="GITHUB_USER_AGENT", default="reDeploy-App")
    github_timeout_seconds: float = Field(alias="GITHUB_TIMEOUT_SECONDS", default=15.0)

    deploy_concurrency: int = Field(alias="DEPLOY_CONCURRENCY", default=3)
    deploy_rate_limit: int = Field(alias="DEPLOY_RATE_LIMIT", default=30)
    deploy_rate_limit_window_ms: int = Field(alias="DEPLOY_RATE_LIMIT_WINDOW_MS", default=60000)
    deploy_use_queue: int = Field(alias="DEPLOY_USE_QUEUE", default=0)

    repo_cache_ttl_seconds: int = Field(alias="REPO_CACHE_TTL_SECONDS", default=300)
    repo_list_max_pages: int = Field(alias="REPO_LIST_MAX_PAGES", default=10)

    web_cors_origins: str = Field(alias="WEB_CORS_ORIGINS", default="http://localhost:1313")

    # Security: bind host defaults to loopback
    bind_host: str = Field(alias="BIND_HOST", default="127.0.0.1")
    bind_port: int = Field(alias="BIND_PORT", default=8000)

    # Rate limiting
    rate_limit_deploys_per_minute: int = Field(alias="RATE_LIMIT_DEPLOYS_PER_MINUTE", default=10)


def validate_settings_for_env(settings: Settings) -> None:
    import logging as _logging
    import warnings

    _logger = _logging.getLogger(__name__)

    invalid: list[str] = []
    positive = {
        "GITHUB_TIMEOUT_SECONDS": settings.github_timeout_seconds,
        "DEPLOY_CONCURRENCY": settings.deploy_concurrency,
        "DEPLOY_RATE_LIMIT": settings.deploy_rate_limit,
        "DEPLOY_RATE_LIMIT_WINDOW_MS": settings.deploy_rate_limit_window_ms,
        "REPO_LIST_MAX_PAGES": settings.repo_list_max_pages,
        "RATE_LIMIT_DEPLOYS_PER_MINUTE": settings.rate_limit_deploys_per_minute,
    }
    for key, value in positive.items():
        if value <= 0:
            invalid.append(f"{key}(must be > 0)")
    if settings.repo_cache_ttl_seconds < 0:
        invalid.append("REPO_CACHE_TTL_SECONDS(must be >= 0)")

    if settings.app_env != "prod":
        if invalid:
            raise ConfigError(f"invalid configuration: {', '.join(sorted(set(invalid)))}")
        return

    # Warn if binding to 0.0.0.0 in production
    if settings.bind_host == "0.0.0.0":
        msg = (
            "SECURITY WARNING: BIND_HOST=0.0.0.0 in production. "
            "This exposes the API to all network interfaces. "
            "Set BIND_HOST=127.0.0.1 and use a reverse proxy."
        )
        _logger.warning(msg)
        warnings.warn(msg, stacklevel=2)

    if not settings.github_api_base_url.startswith("https://"):
        invalid.append("GITHUB_API_BASE_URL(https required)")
    origins = [item.strip() for item in settings.web_cors_origins.split(",") if item.strip()]
    if "*" in origins:
        invalid.append("WEB_CORS_ORIGINS(wildcard not allowed)")

    if invalid:
        keys = ", ".join(sorted(set(invalid)))
        raise ConfigError(f"invalid production configuration: {keys}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
