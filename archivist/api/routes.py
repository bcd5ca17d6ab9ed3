"""FastAPI API routes for archive requests.

Provides REST endpoints to request, inspect, process, retry and poll
archive records, plus read-only Wayback lookups and a health check.
Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                                   Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/archives                           POST    Request an archive (201)
# /api/v1/archives                           GET     List the caller's records
# /api/v1/archives/availability              GET     Existing Wayback capture?
# /api/v1/archives/snapshots                 GET     CDX capture listing
# /api/v1/archives/summary/{type}/{id}       GET     Per-subject status summary
# /api/v1/archives/poll                      POST    Reconcile outstanding jobs
# /api/v1/archives/{rid}                     GET     One record (owner only)
# /api/v1/archives/{rid}/process             POST    Process inline (owner only)
# /api/v1/archives/{rid}/retry               POST    Retry a failed record
# /api/v1/archives/{rid}/poll                POST    Poll one capture job
# /api/v1/health                             GET     Health check
#
# Identity: every /archives route needs the X-User-Id header set by the
# auth proxy; requests without it get 401.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Query, Request

from archivist import __version__
from archivist.api.schemas import (
    ArchiveListResponse,
    ArchiveRecordResponse,
    ArchiveUrlRequest,
    AvailabilityResponse,
    CreateArchiveRequest,
    HealthResponse,
    PollResultResponse,
    SnapshotListResponse,
    SnapshotResponse,
    StatusSummaryResponse,
)
from archivist.models.archive import ArchivableType, ArchiveListFilters, ArchiveRecord, ArchiveStatus
from archivist.services.archive_service import ArchiveService
from archivist.utils.archive_display import can_be_viewed_by
from archivist.utils.errors import NotAuthorizedError, NotFoundError
from archivist.utils.logging import get_logger
from archivist.utils.task_executor import BackgroundTasksExecutor

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_DEFAULT_POLL_BATCH = 50


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_archive_service(request: Request) -> ArchiveService:
    """Return the archive lifecycle service from application state."""
    return request.app.state.archive_service


def _get_config(request: Request) -> dict[str, Any]:
    return getattr(request.app.state, "config", {})


def _get_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Caller identity as forwarded by the auth proxy."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_user_id


ServiceDep = Annotated[ArchiveService, Depends(_get_archive_service)]
ConfigDep = Annotated[dict[str, Any], Depends(_get_config)]
UserIdDep = Annotated[str, Depends(_get_user_id)]


async def _get_owned_record(service: ArchiveService, record_id: str, user_id: str) -> ArchiveRecord:
    record = await service.get_record(record_id)
    if record is None:
        raise NotFoundError("Archive record not found")
    if not can_be_viewed_by(record, user_id):
        raise NotAuthorizedError("You can only access your own archive requests")
    return record


# ---------------------------------------------------------------------------
# Collection routes
# ---------------------------------------------------------------------------


@router.post(
    "/archives",
    response_model=ArchiveRecordResponse,
    status_code=201,
    summary="Request an archive of an article or source",
)
async def create_archive(
    body: CreateArchiveRequest,
    background_tasks: BackgroundTasks,
    service: ServiceDep,
    user_id: UserIdDep,
) -> ArchiveRecordResponse:
    """Create a pending archive record; with ``trigger_now`` the capture
    runs after the response has been sent."""
    record = await service.request_archive(
        {"archivable_type": body.archivable_type, "archivable_id": body.archivable_id},
        user_id,
        body.url,
        trigger_now=body.trigger_now,
        executor=BackgroundTasksExecutor(background_tasks),
    )
    return ArchiveRecordResponse.from_record(record)


@router.get(
    "/archives",
    response_model=ArchiveListResponse,
    summary="List the caller's archive records",
)
async def list_archives(
    service: ServiceDep,
    user_id: UserIdDep,
    config: ConfigDep,
    archivable_type: ArchivableType | None = None,
    archivable_id: str | None = None,
    status: ArchiveStatus | None = None,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> ArchiveListResponse:
    filters = ArchiveListFilters(
        archivable_type=archivable_type,
        archivable_id=archivable_id,
        status=status,
        user_id=user_id,
    )
    page_size = limit or config.get("archive", {}).get("list_page_size", 20)
    records, total = await service.list_records(filters, limit=page_size, offset=offset)
    return ArchiveListResponse(
        records=[ArchiveRecordResponse.from_record(r) for r in records],
        count=total,
    )


@router.get(
    "/archives/availability",
    response_model=AvailabilityResponse,
    summary="Check whether the Wayback Machine already holds a capture",
)
async def check_availability(
    service: ServiceDep,
    user_id: UserIdDep,
    url: Annotated[str, Query(min_length=1)],
) -> AvailabilityResponse:
    existing = await service.check_existing_archive(url)
    return AvailabilityResponse(
        url=url,
        exists=existing.exists,
        archive_url=existing.archive_url,
        timestamp=existing.timestamp,
    )


@router.get(
    "/archives/snapshots",
    response_model=SnapshotListResponse,
    summary="List historical captures of a URL",
)
async def list_snapshots(
    service: ServiceDep,
    user_id: UserIdDep,
    url: Annotated[str, Query(min_length=1)],
    from_: Annotated[str | None, Query(alias="from", pattern=r"^\d{1,14}$")] = None,
    to: Annotated[str | None, Query(pattern=r"^\d{1,14}$")] = None,
    limit: Annotated[int | None, Query(ge=1, le=1000)] = None,
) -> SnapshotListResponse:
    snapshots = await service.get_snapshots(url, from_=from_, to=to, limit=limit)
    return SnapshotListResponse(
        url=url,
        snapshots=[SnapshotResponse.from_snapshot(s) for s in snapshots],
    )


@router.get(
    "/archives/summary/{archivable_type}/{archivable_id}",
    response_model=StatusSummaryResponse,
    summary="Archive status summary for one article or source",
)
async def get_status_summary(
    archivable_type: ArchivableType,
    archivable_id: str,
    service: ServiceDep,
    user_id: UserIdDep,
) -> StatusSummaryResponse:
    summary = await service.get_status_summary(archivable_type, archivable_id)
    return StatusSummaryResponse(**summary.model_dump())


@router.post(
    "/archives/poll",
    response_model=PollResultResponse,
    summary="Reconcile every record still waiting on a capture job",
)
async def poll_outstanding(
    service: ServiceDep,
    user_id: UserIdDep,
    config: ConfigDep,
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
) -> PollResultResponse:
    batch = limit or config.get("archive", {}).get("poll_batch_size", _DEFAULT_POLL_BATCH)
    updated = await service.poll_outstanding(batch)
    _logger.info("archive_poll_run", requested_by=user_id, polled=len(updated))
    return PollResultResponse(
        polled=len(updated),
        records=[ArchiveRecordResponse.from_record(r) for r in updated],
    )


# ---------------------------------------------------------------------------
# Single-record routes
# ---------------------------------------------------------------------------


@router.get(
    "/archives/{record_id}",
    response_model=ArchiveRecordResponse,
    summary="Fetch one archive record",
)
async def get_archive(record_id: str, service: ServiceDep, user_id: UserIdDep) -> ArchiveRecordResponse:
    record = await _get_owned_record(service, record_id, user_id)
    return ArchiveRecordResponse.from_record(record)


@router.post(
    "/archives/{record_id}/process",
    response_model=ArchiveRecordResponse,
    summary="Run an archiving attempt now and wait for it",
)
async def process_archive(
    record_id: str,
    body: ArchiveUrlRequest,
    service: ServiceDep,
    user_id: UserIdDep,
) -> ArchiveRecordResponse:
    await _get_owned_record(service, record_id, user_id)
    await service.process_archive(record_id, body.url)
    record = await _get_owned_record(service, record_id, user_id)
    return ArchiveRecordResponse.from_record(record)


@router.post(
    "/archives/{record_id}/retry",
    response_model=ArchiveRecordResponse,
    summary="Retry a failed archive request",
)
async def retry_archive(
    record_id: str,
    body: ArchiveUrlRequest,
    service: ServiceDep,
    user_id: UserIdDep,
) -> ArchiveRecordResponse:
    await service.retry_archive(record_id, user_id, body.url)
    record = await _get_owned_record(service, record_id, user_id)
    return ArchiveRecordResponse.from_record(record)


@router.post(
    "/archives/{record_id}/poll",
    response_model=ArchiveRecordResponse,
    summary="Check the remote capture job of a processing record",
)
async def poll_archive(record_id: str, service: ServiceDep, user_id: UserIdDep) -> ArchiveRecordResponse:
    await _get_owned_record(service, record_id, user_id)
    await service.poll_archive(record_id)
    record = await _get_owned_record(service, record_id, user_id)
    return ArchiveRecordResponse.from_record(record)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider status."""
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    status = "healthy" if providers.get("archive_store") and providers.get("archiver") else "degraded"
    return HealthResponse(status=status, version=__version__, providers=providers)
