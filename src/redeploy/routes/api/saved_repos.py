"""Saved repository configuration routes."""

from fastapi import APIRouter, Depends, Response
from pydantic import AliasChoices, BaseModel, Field

from redeploy.auth.dependencies import require_user_id
from redeploy.repo_configs.service import RepoConfigService
from redeploy.services import get_repo_config_service

router = APIRouter(prefix="/saved-repos", tags=["api-saved-repos"])


class CreateConfigBody(BaseModel):
    repo_id: str | int | None = Field(
        default=None, validation_alias=AliasChoices("repoId", "repo_id")
    )
    full_name: str | None = Field(
        default=None, validation_alias=AliasChoices("fullName", "full_name")
    )
    selected_branches: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("selectedBranches", "selected_branches")
    )
    default_branch: str | None = Field(
        default=None, validation_alias=AliasChoices("defaultBranch", "default_branch")
    )
    is_active: bool = Field(default=True, validation_alias=AliasChoices("isActive", "is_active"))


class UpdateConfigBody(BaseModel):
    selected_branches: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("selectedBranches", "selected_branches")
    )
    is_active: bool | None = Field(
        default=None, validation_alias=AliasChoices("isActive", "is_active")
    )


@router.get("")
def list_configs(
    active: bool | None = None,
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: RepoConfigService = Depends(get_repo_config_service),  # noqa: B008
) -> dict[str, object]:
    configs = service.list(user_id, is_active=active)
    return {"configs": [config.to_dict() for config in configs], "total": len(configs)}


@router.post("", status_code=201)
def create_config(
    body: CreateConfigBody,
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: RepoConfigService = Depends(get_repo_config_service),  # noqa: B008
) -> dict[str, object]:
    config = service.save(
        user_id,
        {
            "repo_id": str(body.repo_id) if body.repo_id is not None else None,
            "full_name": body.full_name,
            "selected_branches": body.selected_branches or [body.default_branch or "main"],
            "is_active": body.is_active,
        },
    )
    return config.to_dict()


@router.put("/{config_id}")
def update_config(
    config_id: str,
    body: UpdateConfigBody,
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: RepoConfigService = Depends(get_repo_config_service),  # noqa: B008
) -> dict[str, object]:
    return service.update(user_id, config_id, body.model_dump(exclude_none=True)).to_dict()


@router.delete("/{config_id}", status_code=204)
def delete_config(
    config_id: str,
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: RepoConfigService = Depends(get_repo_config_service),  # noqa: B008
) -> Response:
    service.delete(user_id, config_id)
    return Response(status_code=204)
