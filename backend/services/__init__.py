from .catalog import InMemoryClipCatalog, SqliteClipCatalog, load_clips
from .planner import plan_sequence
from .processor import JobProcessor
from .renderer import SimulatedRenderer
from .store import InMemoryJobStore, SqliteJobStore

__all__ = [
    "InMemoryClipCatalog",
    "SqliteClipCatalog",
    "load_clips",
    "plan_sequence",
    "JobProcessor",
    "SimulatedRenderer",
    "InMemoryJobStore",
    "SqliteJobStore",
]
