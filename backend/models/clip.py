from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class TimeOfDay(StrEnum):
    DAY = "day"
    NIGHT = "night"
    SUNRISE = "sunrise"
    SUNSET = "sunset"


class Season(StrEnum):
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"


@dataclass(frozen=True)
class Clip:
    id: str
    filename: str
    location: str
    time_of_day: TimeOfDay
    season: Season
    duration: float                        # seconds, always > 0
    storage_path: str                      # path/URI of the source footage
    tags: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.duration <= 0:
            raise ValueError(f"Clip {self.id!r} duration must be positive, got {self.duration}")
        # Catalog rows arrive as plain strings.
        object.__setattr__(self, "time_of_day", TimeOfDay(self.time_of_day))
        object.__setattr__(self, "season", Season(self.season))
        object.__setattr__(self, "tags", frozenset(self.tags))

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Clip":
        """Build a clip from a catalog row or JSON seed entry (snake_case or camelCase keys)."""
        return cls(
            id=str(record["id"]),
            filename=record["filename"],
            location=record["location"],
            time_of_day=record.get("time_of_day") or record["timeOfDay"],
            season=record["season"],
            duration=float(record["duration"]),
            storage_path=record.get("storage_path") or record["storagePath"],
            tags=frozenset(record.get("tags") or ()),
        )
