"""Background job processor: renders a stored plan and records the terminal status."""

from __future__ import annotations

import asyncio
import logging
import shutil
from contextlib import suppress
from pathlib import Path

from models import JobStatus, SequencePlanEntry
from services.renderer import Renderer
from services.store import JobStore

logger = logging.getLogger(__name__)

CLEANUP_DELAY_SECONDS = 300.0  # 5 minutes


class JobProcessor:
    """
    Runs one fire-and-forget asyncio task per job.

    The task never raises: render failures become a FAILED status in the job
    store, which stays the only place job state is observable. Each run gets
    its own working directory, removed ``cleanup_delay_seconds`` after the run
    ends whatever its outcome.
    """

    def __init__(
        self,
        store: JobStore,
        renderer: Renderer,
        *,
        work_root: Path,
        cleanup_delay_seconds: float = CLEANUP_DELAY_SECONDS,
    ) -> None:
        self._store = store
        self._renderer = renderer
        self._work_root = Path(work_root)
        self._cleanup_delay = cleanup_delay_seconds
        self._runs: dict[str, asyncio.Task[None]] = {}
        self._cleanups: dict[Path, asyncio.Task[None]] = {}

    @property
    def active_jobs(self) -> set[str]:
        return set(self._runs)

    def work_dir_for(self, job_id: str) -> Path:
        return self._work_root / f"temp_{job_id}"

    def start(self, job_id: str, plan: list[SequencePlanEntry]) -> asyncio.Task[None]:
        """Schedule rendering of ``plan`` on the running loop and return immediately."""
        if job_id in self._runs:
            raise RuntimeError(f"Job {job_id} is already being processed")
        task = asyncio.create_task(self._run(job_id, list(plan)), name=f"render-{job_id}")
        self._runs[job_id] = task
        task.add_done_callback(lambda _t: self._runs.pop(job_id, None))
        logger.info("[processor] Started job %s (%d segments)", job_id, len(plan))
        return task

    async def _run(self, job_id: str, plan: list[SequencePlanEntry]) -> None:
        work_dir = self.work_dir_for(job_id)
        try:
            work_dir.mkdir(parents=True, exist_ok=True)
            output_reference = await self._renderer.render(job_id, plan, work_dir)
            await asyncio.to_thread(self._store.update, job_id, JobStatus.COMPLETED, output_reference)
            logger.info("[processor] Job %s completed: %s", job_id, output_reference)
        except Exception as exc:  # noqa: BLE001
            logger.error("[processor] Job %s failed: %s", job_id, exc, exc_info=True)
            await self._mark_failed(job_id)
        finally:
            self._schedule_cleanup(work_dir)

    async def _mark_failed(self, job_id: str) -> None:
        try:
            await asyncio.to_thread(self._store.update, job_id, JobStatus.FAILED)
        except Exception as exc:  # noqa: BLE001
            logger.error("[processor] Could not mark job %s as failed: %s", job_id, exc, exc_info=True)

    def _schedule_cleanup(self, work_dir: Path) -> None:
        previous = self._cleanups.pop(work_dir, None)
        if previous is not None:
            previous.cancel()
        task = asyncio.create_task(self._cleanup_later(work_dir), name=f"cleanup-{work_dir.name}")
        self._cleanups[work_dir] = task
        task.add_done_callback(lambda t: self._forget_cleanup(work_dir, t))

    def _forget_cleanup(self, work_dir: Path, task: asyncio.Task[None]) -> None:
        if self._cleanups.get(work_dir) is task:
            del self._cleanups[work_dir]

    async def _cleanup_later(self, work_dir: Path) -> None:
        await asyncio.sleep(self._cleanup_delay)
        await remove_work_dir(work_dir)

    async def drain(self) -> None:
        """Wait for in-flight renders, then remove every pending working directory now."""
        runs = list(self._runs.values())
        if runs:
            logger.info("[processor] Waiting for %d in-flight job(s)", len(runs))
            await asyncio.gather(*runs, return_exceptions=True)
        pending = list(self._cleanups.items())
        self._cleanups.clear()
        for work_dir, task in pending:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
            await remove_work_dir(work_dir)


async def remove_work_dir(work_dir: Path) -> None:
    try:
        await asyncio.to_thread(shutil.rmtree, work_dir)
        logger.info("[processor] Removed working directory %s", work_dir)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.error("[processor] Cleanup of %s failed: %s", work_dir, exc)
