from .clip import Clip, Season, TimeOfDay
from .job import GenerationJob, JobStatus, SequencePlanEntry, Style, Transition

__all__ = [
    "Clip",
    "TimeOfDay",
    "Season",
    "Style",
    "Transition",
    "SequencePlanEntry",
    "GenerationJob",
    "JobStatus",
]
