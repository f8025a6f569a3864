"""Deployment history routes."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from redeploy.auth.dependencies import require_user_id
from redeploy.errors import RequestError
from redeploy.history.service import HistoryFilters, HistoryService
from redeploy.services import get_history_service
from redeploy.timeutil import parse_iso

router = APIRouter(prefix="/history", tags=["api-history"])


def _filters(
    status: str | None = None,
    repo: str | None = None,
    from_date: str | None = Query(default=None, alias="from"),
    to_date: str | None = Query(default=None, alias="to"),
) -> HistoryFilters:
    for value in (from_date, to_date):
        if value is None:
            continue
        try:
            parse_iso(value)
        except ValueError as exc:
            raise RequestError(f"Invalid date: {value}", code="INVALID_DATE") from exc
    return HistoryFilters(status=status, repo=repo, from_date=from_date, to_date=to_date)


@router.get("")
def list_history(
    limit: int = Query(default=50, ge=1, le=500),
    filters: HistoryFilters = Depends(_filters),  # noqa: B008
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: HistoryService = Depends(get_history_service),  # noqa: B008
) -> dict[str, object]:
    filters.limit = limit
    records = service.list(user_id, filters)
    return {"deployments": [record.to_dict() for record in records], "total": len(records)}


@router.get("/stats")
def history_stats(
    filters: HistoryFilters = Depends(_filters),  # noqa: B008
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: HistoryService = Depends(get_history_service),  # noqa: B008
) -> dict[str, object]:
    window = HistoryFilters(from_date=filters.from_date, to_date=filters.to_date)
    return service.stats(user_id, window)


@router.get("/export")
def export_history(
    filters: HistoryFilters = Depends(_filters),  # noqa: B008
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: HistoryService = Depends(get_history_service),  # noqa: B008
) -> PlainTextResponse:
    day = datetime.now(UTC).date().isoformat()
    return PlainTextResponse(
        service.export_csv(user_id, filters),
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="deployment-history-{day}.csv"'
        },
    )


@router.get("/{deployment_id}")
def get_deployment(
    deployment_id: str,
    user_id: str = Depends(require_user_id),  # noqa: B008
    service: HistoryService = Depends(get_history_service),  # noqa: B008
) -> dict[str, object]:
    record = service.get(user_id, deployment_id)
    if record is None:
        raise RequestError("Deployment not found", code="NOT_FOUND", status=404)
    return record.to_dict()
