"""Archive-request lifecycle service.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services (business logic orchestration).
# Depends on: IArchiveStore, IArchiveServiceProvider, TaskExecutor.
#
# ArchiveService drives an ArchiveRecord through its state machine:
#
#   request  → inserts a PENDING record (one in flight per subject) and,
#              when asked, submits processing to an executor.
#   process  → PROCESSING, then:
#                a. already archived upstream   → COMPLETED
#                b. capture finished            → COMPLETED
#                c. capture accepted as a job   → stays PROCESSING (job_id)
#                d. anything else               → FAILED
#              Any exception along the way is recorded as FAILED, so this
#              call never leaves a record PROCESSING because of a crash.
#   poll     → resolves a PROCESSING record's job_id via the job-status API.
#   retry    → FAILED back to PENDING, then process inline.
#
# Nothing here polls on a timer: a record left PROCESSING with a job_id
# waits for someone to call poll (API or CLI).
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

import pydantic
import structlog

from archivist.interfaces.archive_provider import (
    CaptureOptions,
    IArchiveServiceProvider,
    Snapshot,
)
from archivist.interfaces.archive_store import IArchiveStore
from archivist.models.archive import (
    ArchivableType,
    ArchiveListFilters,
    ArchiveRecord,
    ArchiveStatus,
    ExistingArchive,
    RequestArchiveInput,
    StatusSummary,
    utc_now,
)
from archivist.utils.archive_display import can_be_viewed_by, can_retry, format_archive_date
from archivist.utils.errors import (
    ConfigurationError,
    ConflictError,
    NotAuthorizedError,
    NotFoundError,
    ValidationError,
)
from archivist.utils.task_executor import AsyncioTaskExecutor, TaskExecutor
from archivist.utils.wayback_timestamps import (
    extract_timestamp_from_url,
    parse_wayback_timestamp,
    to_iso_utc,
)

logger = structlog.get_logger(logger_name=__name__)

_UNKNOWN_ERROR = "Unknown error"


def _validate_request(payload: Any) -> RequestArchiveInput:
    """Coerce an untrusted payload into a subject reference or raise ValidationError."""
    if isinstance(payload, RequestArchiveInput):
        return payload
    try:
        return RequestArchiveInput.model_validate(payload)
    except pydantic.ValidationError as exc:
        issues = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
            }
            for err in exc.errors()
        ]
        raise ValidationError(issues) from exc


def _capture_time(timestamp: str | None) -> str:
    """ISO capture time for a Wayback timestamp, falling back to now."""
    parsed = parse_wayback_timestamp(timestamp)
    return to_iso_utc(parsed or utc_now())


class ArchiveService:
    """Owns every state transition of an archive request.

    All dependencies are constructor-injected; the Wayback credentials live
    inside the injected provider, not in module state.
    """

    def __init__(
        self,
        archive_store: IArchiveStore,
        archiver: IArchiveServiceProvider,
        executor: TaskExecutor | None = None,
        capture_options: CaptureOptions | None = None,
    ) -> None:
        self._store = archive_store
        self._archiver = archiver
        self._executor = executor or AsyncioTaskExecutor()
        self._capture_options = capture_options or CaptureOptions()

    # ── Reads ──────────────────────────────────────────────────────────

    async def get_record(self, record_id: str) -> ArchiveRecord | None:
        return await self._store.get(record_id)

    async def get_for_item(
        self,
        archivable_type: ArchivableType,
        archivable_id: str,
    ) -> list[ArchiveRecord]:
        return await self._store.list_for_item(archivable_type, archivable_id)

    async def get_latest_successful(
        self,
        archivable_type: ArchivableType,
        archivable_id: str,
    ) -> ArchiveRecord | None:
        return await self._store.get_latest_completed(archivable_type, archivable_id)

    async def list_records(
        self,
        filters: ArchiveListFilters | None = None,
        *,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[ArchiveRecord], int]:
        return await self._store.list_records(filters, limit=limit, offset=offset)

    async def get_status_summary(
        self,
        archivable_type: ArchivableType,
        archivable_id: str,
    ) -> StatusSummary:
        """Aggregate every record for a subject into a single summary."""
        records = await self._store.list_for_item(archivable_type, archivable_id)
        completed = [r for r in records if r.status == ArchiveStatus.COMPLETED]
        latest = completed[0] if completed else None

        return StatusSummary(
            has_archive=bool(completed),
            latest_archive_url=latest.archive_url if latest else None,
            latest_archive_date=format_archive_date(latest) if latest else None,
            pending_request=any(not r.status.is_terminal for r in records),
            total_archives=len(completed),
        )

    async def check_existing_archive(self, url: str) -> ExistingArchive:
        result = await self._archiver.check_availability(url)
        if result.available and result.url:
            return ExistingArchive(exists=True, archive_url=result.url, timestamp=result.timestamp)
        return ExistingArchive(exists=False)

    async def get_snapshots(
        self,
        url: str,
        *,
        from_: str | None = None,
        to: str | None = None,
        limit: int | None = None,
    ) -> list[Snapshot]:
        return await self._archiver.get_snapshots(url, from_=from_, to=to, limit=limit)

    # ── Transitions ────────────────────────────────────────────────────

    async def request_archive(
        self,
        payload: Any,
        user_id: str,
        url: str,
        *,
        trigger_now: bool = False,
        executor: TaskExecutor | None = None,
    ) -> ArchiveRecord:
        """Create a PENDING record for a subject and optionally queue processing.

        Raises
        ------
        ValidationError
            If *payload* is not a valid ``{archivable_type, archivable_id}``.
        ConflictError
            If the subject already has a pending or processing record.
        """
        subject = _validate_request(payload)
        record = await self._store.create_pending(
            user_id=user_id,
            archivable_type=subject.archivable_type,
            archivable_id=str(subject.archivable_id),
        )
        if record is None:
            raise ConflictError("An archive request is already in progress")

        logger.info(
            "archive_requested",
            record_id=record.id,
            archivable_type=record.archivable_type.value,
            archivable_id=record.archivable_id,
            trigger_now=trigger_now,
        )

        if trigger_now:
            record_id = record.id

            async def _process() -> None:
                await self.process_archive(record_id, url)

            (executor or self._executor).submit(_process, name=f"process_archive:{record_id}")

        return record

    async def process_archive(self, record_id: str, url: str) -> ArchiveRecord | None:
        """Run one archiving attempt for a record.  Never raises.

        Returns the record in its new state, or ``None`` if the record does
        not exist (or the store failed while recording a failure).  A
        terminal record is re-run from scratch, unless a newer request for
        the same subject is in flight; then it is returned untouched.
        """
        try:
            try:
                processing = await self._store.update(record_id, {
                    "status": ArchiveStatus.PROCESSING,
                    "archive_url": None,
                    "archive_timestamp": None,
                    "job_id": None,
                    "error_message": None,
                    "completed_at": None,
                })
            except ConflictError:
                logger.warning("archive_process_superseded", record_id=record_id)
                return await self._store.get(record_id)
            if processing is None:
                logger.warning("archive_process_unknown_record", record_id=record_id)
                return None

            existing = await self._archiver.check_availability(url)
            if existing.available and existing.url and existing.timestamp:
                parsed = parse_wayback_timestamp(existing.timestamp)
                logger.info("archive_already_available", record_id=record_id, archive_url=existing.url)
                return await self._store.update(record_id, {
                    "status": ArchiveStatus.COMPLETED,
                    "archive_url": existing.url,
                    "archive_timestamp": to_iso_utc(parsed) if parsed else existing.timestamp,
                    "completed_at": utc_now(),
                })

            saved = await self._archiver.save_page_v2(url, self._capture_options)

            if saved.success and saved.archive_url:
                logger.info("archive_completed", record_id=record_id, archive_url=saved.archive_url)
                return await self._store.update(record_id, {
                    "status": ArchiveStatus.COMPLETED,
                    "archive_url": saved.archive_url,
                    "archive_timestamp": _capture_time(saved.timestamp),
                    "job_id": saved.job_id,
                    "completed_at": utc_now(),
                })

            if saved.job_id:
                logger.info("archive_job_pending", record_id=record_id, job_id=saved.job_id)
                return await self._store.update(record_id, {
                    "status": ArchiveStatus.PROCESSING,
                    "job_id": saved.job_id,
                })

            return await self._mark_failed(record_id, saved.error or _UNKNOWN_ERROR)
        except Exception as exc:
            logger.exception("archive_process_crashed", record_id=record_id)
            return await self._record_crash(record_id, str(exc) or _UNKNOWN_ERROR)

    async def retry_archive(self, record_id: str, user_id: str, url: str) -> ArchiveRecord | None:
        """Re-arm a FAILED record owned by *user_id* and process it inline.

        Raises
        ------
        NotFoundError
            If no record has *record_id*.
        NotAuthorizedError
            If *user_id* does not own the record.
        ConflictError
            If the record is not FAILED (nothing is changed).
        """
        existing = await self._store.get(record_id)
        if existing is None:
            raise NotFoundError("Archive record not found")
        if not can_be_viewed_by(existing, user_id):
            raise NotAuthorizedError("You can only retry your own archive requests")
        if not can_retry(existing):
            raise ConflictError("This archive request cannot be retried")

        await self._store.update(record_id, {
            "status": ArchiveStatus.PENDING,
            "error_message": None,
            "completed_at": None,
        })
        logger.info("archive_retry", record_id=record_id)
        return await self.process_archive(record_id, url)

    async def poll_archive(self, record_id: str) -> ArchiveRecord | None:
        """Reconcile a PROCESSING record with the state of its remote job.

        Raises
        ------
        NotFoundError
            If no record has *record_id*.
        ConflictError
            If the record is not PROCESSING or has no job id.
        ConfigurationError
            If the archiver has no credentials to query job status with.
        """
        record = await self._store.get(record_id)
        if record is None:
            raise NotFoundError("Archive record not found")
        if record.status != ArchiveStatus.PROCESSING or not record.job_id:
            raise ConflictError("This archive request has no outstanding job")
        if not self._archiver.has_credentials():
            raise ConfigurationError(
                "Archive job polling requires archive.org credentials",
                provider_name=self._archiver.get_provider_name(),
            )

        job = await self._archiver.check_job_status(record.job_id)
        if job.status == "pending":
            logger.debug("archive_job_still_pending", record_id=record_id, job_id=record.job_id)
            return record

        if job.status == "success" and job.archive_url:
            logger.info("archive_job_completed", record_id=record_id, archive_url=job.archive_url)
            return await self._store.update(record_id, {
                "status": ArchiveStatus.COMPLETED,
                "archive_url": job.archive_url,
                "archive_timestamp": _capture_time(extract_timestamp_from_url(job.archive_url)),
                "completed_at": utc_now(),
            })

        return await self._mark_failed(record_id, job.error or "Archive failed")

    async def poll_outstanding(self, limit: int = 50) -> list[ArchiveRecord]:
        """Poll every PROCESSING record that carries a job id.

        A failure on one record is logged and does not stop the others.
        """
        results: list[ArchiveRecord] = []
        for record in await self._store.list_awaiting_job(limit):
            try:
                updated = await self.poll_archive(record.id)
            except ConflictError:
                # Resolved by someone else since the listing.
                continue
            except Exception as exc:
                logger.warning("archive_poll_failed", record_id=record.id, error=str(exc))
                continue
            if updated is not None:
                results.append(updated)
        return results

    # ── Private helpers ────────────────────────────────────────────────

    async def _mark_failed(self, record_id: str, message: str) -> ArchiveRecord | None:
        logger.warning("archive_failed", record_id=record_id, error=message)
        return await self._store.update(record_id, {
            "status": ArchiveStatus.FAILED,
            "error_message": message,
            "completed_at": utc_now(),
        })

    async def _record_crash(self, record_id: str, message: str) -> ArchiveRecord | None:
        try:
            return await self._mark_failed(record_id, message)
        except Exception:
            logger.exception("archive_failure_not_recorded", record_id=record_id)
            return None
