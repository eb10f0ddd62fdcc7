from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


class Style(StrEnum):
    CINEMATIC = "cinematic"
    DYNAMIC = "dynamic"
    SMOOTH = "smooth"


class Transition(StrEnum):
    FADE = "fade"
    DISSOLVE = "dissolve"
    SLIDE = "slide"


class JobStatus(StrEnum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PROCESSING


@dataclass(frozen=True)
class SequencePlanEntry:
    clip_id: str
    filename: str
    duration: float                        # trimmed segment length in seconds
    transition: Transition
    storage_path: str                      # copied from the source clip

    def to_record(self) -> dict[str, Any]:
        return {
            "clipId": self.clip_id,
            "filename": self.filename,
            "duration": self.duration,
            "transition": str(self.transition),
            "storagePath": self.storage_path,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "SequencePlanEntry":
        return cls(
            clip_id=str(record["clipId"]),
            filename=record["filename"],
            duration=float(record["duration"]),
            transition=Transition(record["transition"]),
            storage_path=record["storagePath"],
        )


@dataclass
class GenerationJob:
    id: str
    user_parameters: dict[str, Any]        # request body as submitted
    clip_sequence: list[SequencePlanEntry]
    status: JobStatus = JobStatus.PROCESSING
    output_filename: str | None = None     # set only once status is COMPLETED
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_record(self) -> dict[str, Any]:
        """Persisted/polled representation of the job."""
        return {
            "id": self.id,
            "user_parameters": dict(self.user_parameters),
            "clip_sequence": [entry.to_record() for entry in self.clip_sequence],
            "output_filename": self.output_filename,
            "status": str(self.status),
            "created_at": self.created_at.isoformat(),
        }
