from __future__ import annotations

import json
import random
from pathlib import Path

import pytest

from models import Clip
from services.catalog import DEFAULT_CANDIDATE_LIMIT, InMemoryClipCatalog, SqliteClipCatalog, load_clips
from services.database import Database
from services.errors import PersistenceError


def _clip(clip_id: str, location: str = "Paris", time_of_day: str = "day", season: str = "summer") -> Clip:
    return Clip(
        id=clip_id,
        filename=f"{clip_id}.mp4",
        location=location,
        time_of_day=time_of_day,
        season=season,
        duration=4.0,
        storage_path=f"clips/{clip_id}.mp4",
        tags=frozenset({"city"}),
    )


def _seed() -> list[Clip]:
    clips = [_clip(f"paris-{i}") for i in range(12)]
    clips += [
        _clip("paris-night", time_of_day="night"),
        _clip("paris-winter", season="winter"),
        _clip("tokyo-1", location="Tokyo", time_of_day="sunset", season="spring"),
    ]
    return clips


@pytest.fixture(params=["memory", "sqlite"])
def catalog(request: pytest.FixtureRequest, tmp_path: Path):
    if request.param == "memory":
        cat = InMemoryClipCatalog(rng=random.Random(0))
    else:
        database = Database(tmp_path / "catalog.sqlite3")
        database.init_schema()
        cat = SqliteClipCatalog(database)
    for clip in _seed():
        cat.add(clip)
    return cat


def test_find_candidates_filters_exactly(catalog) -> None:
    found = catalog.find_candidates("Tokyo", "sunset", "spring")
    assert [clip.id for clip in found] == ["tokyo-1"]
    assert found[0].tags == frozenset({"city"})
    assert found[0].duration == 4.0


def test_find_candidates_is_bounded_by_limit(catalog) -> None:
    found = catalog.find_candidates("Paris", "day", "summer")
    assert len(found) == DEFAULT_CANDIDATE_LIMIT
    assert all(clip.id.startswith("paris-") and clip.id[6:].isdigit() for clip in found)

    assert len(catalog.find_candidates("Paris", "day", "summer", limit=3)) == 3


def test_find_candidates_returns_same_membership_when_under_limit(catalog) -> None:
    first = {clip.id for clip in catalog.find_candidates("Paris", "night", "summer", limit=8)}
    second = {clip.id for clip in catalog.find_candidates("Paris", "night", "summer", limit=8)}
    assert first == second == {"paris-night"}


def test_find_candidates_no_match_is_empty_not_error(catalog) -> None:
    assert catalog.find_candidates("Atlantis", "day", "summer") == []
    assert catalog.find_candidates("Paris", "day", "summer", limit=0) == []


def test_list_options_returns_distinct_sorted_values(catalog) -> None:
    options = catalog.list_options()
    assert options.locations == ["Paris", "Tokyo"]
    assert options.times == ["day", "night", "sunset"]
    assert options.seasons == ["spring", "summer", "winter"]


def test_sqlite_add_is_an_upsert(tmp_path: Path) -> None:
    database = Database(tmp_path / "catalog.sqlite3")
    database.init_schema()
    cat = SqliteClipCatalog(database)
    cat.add(_clip("paris-1"))
    cat.add(_clip("paris-1", location="Lyon"))

    assert cat.find_candidates("Paris", "day", "summer") == []
    assert [c.id for c in cat.find_candidates("Lyon", "day", "summer")] == ["paris-1"]


def test_load_clips_accepts_camel_case_records(tmp_path: Path) -> None:
    seed = tmp_path / "clips.json"
    seed.write_text(
        json.dumps(
            [
                {
                    "id": 7,
                    "filename": "eiffel.mp4",
                    "location": "Paris",
                    "timeOfDay": "sunset",
                    "season": "autumn",
                    "duration": "5.25",
                    "tags": ["tower", "river"],
                    "storagePath": "clips/eiffel.mp4",
                }
            ]
        ),
        encoding="utf-8",
    )
    (clip,) = load_clips(seed)
    assert clip.id == "7"
    assert clip.time_of_day == "sunset"
    assert clip.duration == 5.25
    assert clip.tags == frozenset({"tower", "river"})


def test_load_clips_rejects_unreadable_file(tmp_path: Path) -> None:
    with pytest.raises(PersistenceError):
        load_clips(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text('{"not": "a list"}', encoding="utf-8")
    with pytest.raises(PersistenceError):
        load_clips(bad)


@pytest.mark.parametrize(
    "record",
    [
        {"id": "p1", "filename": "p1.mp4", "location": "Paris", "season": "summer", "duration": 4, "storage_path": "p1"},
        {"id": "p1", "filename": "p1.mp4", "location": "Paris", "time_of_day": "noon", "season": "summer",
         "duration": 4, "storage_path": "p1"},
        {"id": "p1", "filename": "p1.mp4", "location": "Paris", "time_of_day": "day", "season": "summer",
         "duration": "long", "storage_path": "p1"},
        "paris.mp4",
    ],
)
def test_load_clips_reports_malformed_record_index(tmp_path: Path, record) -> None:
    valid = {"id": "ok", "filename": "ok.mp4", "location": "Paris", "time_of_day": "day", "season": "summer",
             "duration": 4, "storage_path": "clips/ok.mp4"}
    seed = tmp_path / "clips.json"
    seed.write_text(json.dumps([valid, record]), encoding="utf-8")

    with pytest.raises(PersistenceError, match="#1"):
        load_clips(seed)


def test_clip_rejects_non_positive_duration() -> None:
    with pytest.raises(ValueError):
        Clip(
            id="x",
            filename="x.mp4",
            location="Paris",
            time_of_day="day",
            season="summer",
            duration=0,
            storage_path="clips/x.mp4",
        )
