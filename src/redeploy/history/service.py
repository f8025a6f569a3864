"""Deployment history: one record per branch deployment attempt."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from dataclasses import dataclass

from redeploy.deploy.models import RepositoryDeploymentResult
from redeploy.ids import new_id
from redeploy.store.interfaces import HistoryStore
from redeploy.store.records import DeploymentRecord, DeploymentStatus
from redeploy.timeutil import now_iso, parse_iso

CSV_HEADERS = (
    "ID",
    "Repository",
    "Branch",
    "Status",
    "SHA",
    "Triggered At",
    "Completed At",
    "Error",
)


@dataclass(slots=True)
class HistoryFilters:
    status: str | None = None
    repo: str | None = None
    from_date: str | None = None
    to_date: str | None = None
    limit: int | None = None


class HistoryService:
    def __init__(self, store: HistoryStore) -> None:
        self._store = store

    def log(
        self,
        user_id: str,
        *,
        repo: str,
        branch: str,
        status: DeploymentStatus | str,
        sha: str | None = None,
        commit_message: str | None = None,
        error_message: str | None = None,
    ) -> DeploymentRecord:
        resolved = DeploymentStatus(status)
        now = now_iso()
        record = DeploymentRecord(
            id=new_id("dep"),
            user_id=user_id,
            repo=repo,
            branch=branch,
            status=resolved,
            sha=sha,
            commit_message=commit_message,
            error_message=error_message,
            triggered_at=now,
            completed_at=None if resolved is DeploymentStatus.PENDING else now,
        )
        self._store.append(record)
        return record

    def list(self, user_id: str, filters: HistoryFilters | None = None) -> list[DeploymentRecord]:
        active = filters or HistoryFilters()
        records = list(self._store.list(user_id))
        if active.status:
            records = [record for record in records if record.status == active.status]
        if active.repo:
            records = [record for record in records if record.repo == active.repo]
        if active.from_date:
            lower = parse_iso(active.from_date)
            records = [r for r in records if parse_iso(r.triggered_at) >= lower]
        if active.to_date:
            upper = parse_iso(active.to_date)
            records = [r for r in records if parse_iso(r.triggered_at) <= upper]
        records.sort(key=lambda record: parse_iso(record.triggered_at), reverse=True)
        if active.limit and active.limit > 0:
            records = records[: active.limit]
        return records

    def get(self, user_id: str, deployment_id: str) -> DeploymentRecord | None:
        for record in self._store.list(user_id):
            if record.id == deployment_id:
                return record
        return None

    def stats(self, user_id: str, filters: HistoryFilters | None = None) -> dict[str, object]:
        records = self.list(user_id, filters)
        total = len(records)
        success = sum(1 for r in records if r.status is DeploymentStatus.SUCCESS)
        return {
            "total": total,
            "success": success,
            "failed": sum(1 for r in records if r.status is DeploymentStatus.FAILED),
            "partial": sum(1 for r in records if r.status is DeploymentStatus.PARTIAL),
            "repos": list(dict.fromkeys(r.repo for r in records)),
            "success_rate": round(success / total * 100) if total else 0,
        }

    def export_csv(self, user_id: str, filters: HistoryFilters | None = None) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        buffer.write(",".join(CSV_HEADERS) + "\n")
        for r in self.list(user_id, filters):
            writer.writerow(
                [
                    r.id,
                    r.repo,
                    r.branch,
                    r.status.value,
                    r.sha or "",
                    r.triggered_at,
                    r.completed_at or "",
                    r.error_message or "",
                ]
            )
        return buffer.getvalue().rstrip("\n")


def log_deployment_results(
    history: HistoryService,
    user_id: str,
    results: Iterable[RepositoryDeploymentResult],
    *,
    commit_message: str | None = None,
) -> list[DeploymentRecord]:
    """Write one history record per branch outcome."""
    records: list[DeploymentRecord] = []
    for result in results:
        for outcome in result.branches:
            records.append(
                history.log(
                    user_id,
                    repo=result.repo,
                    branch=outcome.branch,
                    status=DeploymentStatus.SUCCESS if outcome.ok else DeploymentStatus.FAILED,
                    sha=outcome.sha,
                    commit_message=commit_message,
                    error_message=outcome.error,
                )
            )
    return records
