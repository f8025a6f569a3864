import pytest

from redeploy.config import get_settings, validate_settings_for_env
from redeploy.errors import ConfigError


def test_defaults() -> None:
    settings = get_settings()

    assert settings.github_api_version == "2022-11-28"
    assert settings.github_user_agent == "reDeploy-App"
    assert settings.deploy_concurrency == 3
    assert settings.deploy_rate_limit == 30
    assert settings.deploy_rate_limit_window_ms == 60000
    validate_settings_for_env(settings)


def test_non_positive_concurrency_is_invalid(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEPLOY_CONCURRENCY", "0")
    get_settings.cache_clear()

    with pytest.raises(ConfigError, match="DEPLOY_CONCURRENCY"):
        validate_settings_for_env(get_settings())


def test_prod_requires_https_api(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("GITHUB_API_BASE_URL", "http://github.internal")
    get_settings.cache_clear()

    with pytest.raises(ConfigError, match="GITHUB_API_BASE_URL"):
        validate_settings_for_env(get_settings())


def test_prod_rejects_wildcard_cors(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("WEB_CORS_ORIGINS", "*")
    get_settings.cache_clear()

    with pytest.raises(ConfigError, match="WEB_CORS_ORIGINS"):
        validate_settings_for_env(get_settings())


def test_prod_warns_on_wildcard_bind(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("BIND_HOST", "0.0.0.0")
    get_settings.cache_clear()

    with pytest.warns(UserWarning, match="BIND_HOST"):
        validate_settings_for_env(get_settings())
