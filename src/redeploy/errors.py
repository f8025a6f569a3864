"""redeploy exception hierarchy.

All redeploy-specific exceptions inherit from RedeployError. Each error carries a
machine-readable ``code`` and the HTTP ``status`` the API surface reports for it,
so the application-level handler can render any of them without a lookup table.
"""


class RedeployError(Exception):
    """Base exception for all redeploy errors."""

    default_code = "REDEPLOY_ERROR"
    default_status = 500

    def __init__(
        self,
        message: str = "",
        *,
        code: str | None = None,
        status: int | None = None,
        extra: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status = status if status is not None else self.default_status
        self.extra = extra or {}

    def to_payload(self) -> dict[str, object]:
        return {"error": self.message, "code": self.code, **self.extra}


class DeploymentError(RedeployError):
    """A step of the empty-commit sequence failed."""

    default_code = "DEPLOY_ERROR"


class GitHubApiError(RedeployError):
    """Error listing repositories or branches from GitHub."""

    default_code = "GITHUB_API_ERROR"

    def __init__(
        self,
        message: str = "",
        *,
        status: int | None = None,
        details: dict[str, object] | None = None,
    ) -> None:
        self.details = details or {}
        super().__init__(
            message, status=status, extra={"details": self.details} if self.details else None
        )


class RepoConfigError(RedeployError):
    """Invalid saved repository configuration operation."""

    default_code = "CONFIG_ERROR"
    default_status = 400
    _status_by_code = {"DUPLICATE_REPO": 409, "NOT_FOUND": 404}

    def __init__(self, message: str = "", code: str = "CONFIG_ERROR") -> None:
        super().__init__(message, code=code, status=self._status_by_code.get(code, 400))


class GroupError(RedeployError):
    """Invalid deployment group operation."""

    default_code = "GROUP_ERROR"
    default_status = 400
    _status_by_code = {"DUPLICATE_NAME": 409, "NOT_FOUND": 404}

    def __init__(self, message: str = "", code: str = "GROUP_ERROR") -> None:
        super().__init__(message, code=code, status=self._status_by_code.get(code, 400))


class WebhookError(RedeployError):
    """Invalid webhook operation."""

    default_code = "WEBHOOK_ERROR"
    default_status = 400

    def __init__(self, message: str = "", code: str = "WEBHOOK_ERROR") -> None:
        super().__init__(message, code=code, status=404 if code == "NOT_FOUND" else 400)


class RequestError(RedeployError):
    """Caller-side request problem rejected before any deployment work."""

    default_code = "INVALID_REQUEST"
    default_status = 400


class ConfigError(RedeployError):
    """Invalid or missing configuration."""

    default_code = "CONFIG_INVALID"
