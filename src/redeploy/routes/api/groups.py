"""Deployment group routes."""

from fastapi import APIRouter, Depends, Response
from pydantic import AliasChoices, BaseModel, Field

from redeploy.auth.dependencies import require_user_id
from redeploy.groups.service import GroupService
from redeploy.services import get_group_service

router = APIRouter(prefix="/groups", tags=["api-groups"])


class GroupBody(BaseModel):
    name: str | None = None
    description: str | None = None
    color: str | None = None
    repo_ids: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("repoIds", "repo_ids")
    )


class GroupRepoBody(BaseModel):
    repo_id: str = Field(validation_alias=AliasChoices("repoId", "repo_id"))


@router.get("")
def list_groups(
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: GroupService = Depends(get_group_service),  # noqa: B008
) -> dict[str, object]:
    groups = service.list(user_id)
    return {"groups": [group.to_dict() for group in groups], "total": len(groups)}


@router.post("", status_code=201)
def create_group(
    body: GroupBody,
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: GroupService = Depends(get_group_service),  # noqa: B008
) -> dict[str, object]:
    return service.create(user_id, body.model_dump()).to_dict()


@router.get("/{group_id}")
def get_group(
    group_id: str,
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: GroupService = Depends(get_group_service),  # noqa: B008
) -> dict[str, object]:
    return service.get(user_id, group_id).to_dict()


@router.put("/{group_id}")
def update_group(
    group_id: str,
    body: GroupBody,
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: GroupService = Depends(get_group_service),  # noqa: B008
) -> dict[str, object]:
    return service.update(user_id, group_id, body.model_dump(exclude_none=True)).to_dict()


@router.delete("/{group_id}", status_code=204)
def delete_group(
    group_id: str,
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: GroupService = Depends(get_group_service),  # noqa: B008
) -> Response:
    service.delete(user_id, group_id)
    return Response(status_code=204)


@router.post("/{group_id}/repos")
def add_group_repo(
    group_id: str,
    body: GroupRepoBody,
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: GroupService = Depends(get_group_service),  # noqa: B008
) -> dict[str, object]:
    return service.add_repo(user_id, group_id, body.repo_id).to_dict()


@router.delete("/{group_id}/repos/{repo_id}")
def remove_group_repo(
    group_id: str,
    repo_id: str,
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: GroupService = Depends(get_group_service),  # noqa: B008
) -> dict[str, object]:
    return service.remove_repo(user_id, group_id, repo_id).to_dict()
