"""Clip catalog: filtered, bounded lookups of reusable footage."""

from __future__ import annotations

import json
import logging
import random
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from models import Clip
from services.database import Database
from services.errors import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_CANDIDATE_LIMIT = 8


@dataclass
class CatalogOptions:
    locations: list[str] = field(default_factory=list)
    times: list[str] = field(default_factory=list)
    seasons: list[str] = field(default_factory=list)


class ClipCatalog(Protocol):
    def find_candidates(
        self,
        location: str,
        time_of_day: str,
        season: str,
        limit: int = DEFAULT_CANDIDATE_LIMIT,
    ) -> list[Clip]: ...

    def list_options(self) -> CatalogOptions: ...

    def add(self, clip: Clip) -> None: ...


class InMemoryClipCatalog:
    """Catalog backed by a dict. Matching clips are sampled at random up to ``limit``."""

    def __init__(self, clips: list[Clip] | None = None, *, rng: random.Random | None = None) -> None:
        self._lock = threading.Lock()
        self._clips: dict[str, Clip] = {}
        self._rng = rng or random.Random()
        for clip in clips or []:
            self.add(clip)

    def add(self, clip: Clip) -> None:
        with self._lock:
            self._clips[clip.id] = clip

    def find_candidates(
        self,
        location: str,
        time_of_day: str,
        season: str,
        limit: int = DEFAULT_CANDIDATE_LIMIT,
    ) -> list[Clip]:
        with self._lock:
            matches = [
                clip
                for clip in self._clips.values()
                if clip.location == location and clip.time_of_day == time_of_day and clip.season == season
            ]
        if limit <= 0 or not matches:
            return []
        return self._rng.sample(matches, min(limit, len(matches)))

    def list_options(self) -> CatalogOptions:
        with self._lock:
            clips = list(self._clips.values())
        return CatalogOptions(
            locations=sorted({clip.location for clip in clips}),
            times=sorted({str(clip.time_of_day) for clip in clips}),
            seasons=sorted({str(clip.season) for clip in clips}),
        )

    def __len__(self) -> int:
        return len(self._clips)


class SqliteClipCatalog:
    """Catalog stored in the ``video_clips`` table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def add(self, clip: Clip) -> None:
        with self._db.connection() as conn:
            conn.execute(
                """
                INSERT INTO video_clips (id, filename, location, time_of_day, season, duration, tags_json, storage_path)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    filename = excluded.filename,
                    location = excluded.location,
                    time_of_day = excluded.time_of_day,
                    season = excluded.season,
                    duration = excluded.duration,
                    tags_json = excluded.tags_json,
                    storage_path = excluded.storage_path
                """,
                (
                    clip.id,
                    clip.filename,
                    clip.location,
                    str(clip.time_of_day),
                    str(clip.season),
                    clip.duration,
                    json.dumps(sorted(clip.tags)),
                    clip.storage_path,
                ),
            )

    def find_candidates(
        self,
        location: str,
        time_of_day: str,
        season: str,
        limit: int = DEFAULT_CANDIDATE_LIMIT,
    ) -> list[Clip]:
        if limit <= 0:
            return []
        with self._db.connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM video_clips
                WHERE location = ? AND time_of_day = ? AND season = ?
                ORDER BY RANDOM()
                LIMIT ?
                """,
                (location, str(time_of_day), str(season), limit),
            ).fetchall()
        return [_clip_from_row(row) for row in rows]

    def list_options(self) -> CatalogOptions:
        with self._db.connection() as conn:
            locations = conn.execute("SELECT DISTINCT location FROM video_clips ORDER BY location").fetchall()
            times = conn.execute("SELECT DISTINCT time_of_day FROM video_clips ORDER BY time_of_day").fetchall()
            seasons = conn.execute("SELECT DISTINCT season FROM video_clips ORDER BY season").fetchall()
        return CatalogOptions(
            locations=[row[0] for row in locations],
            times=[row[0] for row in times],
            seasons=[row[0] for row in seasons],
        )


def _clip_from_row(row) -> Clip:
    record = dict(row)
    record["tags"] = json.loads(record.pop("tags_json") or "[]")
    return Clip.from_record(record)


def load_clips(path: str | Path) -> list[Clip]:
    """
    Read a JSON seed file: a list of clip records, e.g.

        [{"id": "paris-1", "filename": "paris_day_1.mp4", "location": "Paris",
          "time_of_day": "day", "season": "summer", "duration": 4.0,
          "tags": ["river"], "storage_path": "clips/paris_day_1.mp4"}]
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise PersistenceError(f"Cannot read clip catalog {path}: {exc}") from exc
    if not isinstance(raw, list):
        raise PersistenceError(f"Clip catalog {path} must contain a JSON list")
    clips = []
    for index, record in enumerate(raw):
        try:
            clips.append(Clip.from_record(record))
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Invalid clip record #{index} in {path}: {exc!r}") from exc
    logger.info("[catalog] Loaded %d clips from %s", len(clips), path)
    return clips
