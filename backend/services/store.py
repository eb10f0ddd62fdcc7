"""Job store: the single source of truth for generation job records."""

from __future__ import annotations

import json
import logging
import secrets
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Protocol

from models import GenerationJob, JobStatus, SequencePlanEntry
from services.database import Database
from services.errors import InvalidTransitionError, JobNotFoundError

logger = logging.getLogger(__name__)

# Avoid 0/O, 1/I/l so job ids survive being read aloud or retyped.
_JOB_ID_ALPHABET = "23456789abcdefghjkmnpqrstuvwxyz"
_JOB_ID_LENGTH = 12


def generate_job_id() -> str:
    return "".join(secrets.choice(_JOB_ID_ALPHABET) for _ in range(_JOB_ID_LENGTH))


def check_transition(job: GenerationJob, status: JobStatus, output_reference: str | None) -> None:
    """Allow only processing -> completed (with output) or processing -> failed (without)."""
    if not status.is_terminal:
        raise InvalidTransitionError(f"Job {job.id!r} cannot move back to {status}")
    if job.status.is_terminal:
        raise InvalidTransitionError(f"Job {job.id!r} is already {job.status}")
    if status is JobStatus.COMPLETED and not output_reference:
        raise ValueError("A completed job needs an output reference")
    if status is JobStatus.FAILED and output_reference:
        raise ValueError("A failed job cannot carry an output reference")


class JobStore(Protocol):
    def create(self, parameters: dict[str, Any], plan: list[SequencePlanEntry]) -> str: ...

    def get(self, job_id: str) -> GenerationJob: ...

    def update(self, job_id: str, status: JobStatus, output_reference: str | None = None) -> None: ...


class InMemoryJobStore:
    """Dict-backed store. Returned jobs are copies; mutate only through ``update``."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._jobs: dict[str, GenerationJob] = {}

    def create(self, parameters: dict[str, Any], plan: list[SequencePlanEntry]) -> str:
        with self._lock:
            job_id = generate_job_id()
            while job_id in self._jobs:
                job_id = generate_job_id()
            self._jobs[job_id] = GenerationJob(
                id=job_id,
                user_parameters=dict(parameters),
                clip_sequence=list(plan),
            )
        logger.info("[store] Job created: job_id=%s entries=%d", job_id, len(plan))
        return job_id

    def get(self, job_id: str) -> GenerationJob:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise JobNotFoundError(job_id)
            return replace(job, user_parameters=dict(job.user_parameters), clip_sequence=list(job.clip_sequence))

    def update(self, job_id: str, status: JobStatus, output_reference: str | None = None) -> None:
        status = JobStatus(status)
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise JobNotFoundError(job_id)
            check_transition(job, status, output_reference)
            job.status = status
            job.output_filename = output_reference
        logger.info("[store] Job %s -> %s", job_id, status)

    def clear(self) -> None:
        with self._lock:
            self._jobs.clear()

    def __len__(self) -> int:
        return len(self._jobs)


class SqliteJobStore:
    """Store backed by the ``generated_videos`` table; parameters and plan are JSON columns."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def create(self, parameters: dict[str, Any], plan: list[SequencePlanEntry]) -> str:
        job_id = generate_job_id()
        created_at = datetime.now(timezone.utc).isoformat()
        with self._db.connection() as conn:
            conn.execute(
                """
                INSERT INTO generated_videos (id, user_parameters, clip_sequence, status, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    job_id,
                    json.dumps(parameters, default=str),
                    json.dumps([entry.to_record() for entry in plan]),
                    str(JobStatus.PROCESSING),
                    created_at,
                ),
            )
        logger.info("[store] Job created: job_id=%s entries=%d", job_id, len(plan))
        return job_id

    def get(self, job_id: str) -> GenerationJob:
        with self._db.connection() as conn:
            row = conn.execute("SELECT * FROM generated_videos WHERE id = ?", (job_id,)).fetchone()
        if row is None:
            raise JobNotFoundError(job_id)
        return GenerationJob(
            id=row["id"],
            user_parameters=json.loads(row["user_parameters"]),
            clip_sequence=[SequencePlanEntry.from_record(r) for r in json.loads(row["clip_sequence"])],
            status=JobStatus(row["status"]),
            output_filename=row["output_filename"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def update(self, job_id: str, status: JobStatus, output_reference: str | None = None) -> None:
        status = JobStatus(status)
        with self._db.connection() as conn:
            row = conn.execute(
                "SELECT id, status FROM generated_videos WHERE id = ?", (job_id,)
            ).fetchone()
            if row is None:
                raise JobNotFoundError(job_id)
            current = GenerationJob(id=job_id, user_parameters={}, clip_sequence=[], status=JobStatus(row["status"]))
            check_transition(current, status, output_reference)
            conn.execute(
                "UPDATE generated_videos SET status = ?, output_filename = ? WHERE id = ? AND status = ?",
                (str(status), output_reference, job_id, str(JobStatus.PROCESSING)),
            )
        logger.info("[store] Job %s -> %s", job_id, status)
