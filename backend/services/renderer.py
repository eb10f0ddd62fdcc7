"""Renderers turn a sequence plan into a playable output file reference."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from models import SequencePlanEntry
from services.errors import RenderError

logger = logging.getLogger(__name__)

DEFAULT_PUBLIC_PREFIX = "/api/videos/generated"
DEFAULT_RENDER_DELAY_SECONDS = 5.0


class Renderer(Protocol):
    async def render(self, job_id: str, plan: list[SequencePlanEntry], work_dir: Path) -> str:
        """Materialise ``plan`` and return the output reference, or raise RenderError."""
        ...


def output_filename(job_id: str, timestamp_ms: int, extension: str = "mp4") -> str:
    return f"video_{job_id}_{timestamp_ms}.{extension}"


class SimulatedRenderer:
    """
    Stand-in for a real encoder.

    Writes the edit list to ``work_dir/plan.json``, waits ``delay_seconds`` to
    model encoding time, and returns a reference under ``public_prefix`` of the
    form ``video_{job_id}_{timestamp}.mp4``. No media file is produced.
    """

    def __init__(
        self,
        *,
        output_dir: Path,
        public_prefix: str = DEFAULT_PUBLIC_PREFIX,
        delay_seconds: float = DEFAULT_RENDER_DELAY_SECONDS,
        extension: str = "mp4",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._output_dir = Path(output_dir)
        self._public_prefix = public_prefix.rstrip("/")
        self._delay = delay_seconds
        self._extension = extension
        self._clock = clock

    async def render(self, job_id: str, plan: list[SequencePlanEntry], work_dir: Path) -> str:
        if not plan:
            raise RenderError(f"Nothing to render for job {job_id}: plan is empty")
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            edit_list = [entry.to_record() for entry in plan]
            (work_dir / "plan.json").write_text(json.dumps(edit_list, indent=2), encoding="utf-8")
        except OSError as exc:
            raise RenderError(f"Cannot prepare render inputs for job {job_id}: {exc}") from exc

        await asyncio.sleep(self._delay)

        filename = output_filename(job_id, int(self._clock() * 1000), self._extension)
        logger.info("[renderer] Simulated render for job %s: %d segments -> %s", job_id, len(plan), filename)
        return f"{self._public_prefix}/{filename}"
