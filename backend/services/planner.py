"""Clip sequence planner: turns a candidate clip set into a timed, transitioned plan."""

from __future__ import annotations

import math
import random
from collections.abc import Sequence

from models import Clip, SequencePlanEntry, Style, Transition
from services.errors import PlanningError

# Each clip contributes a short "highlight" slice, never its full length.
MIN_SEGMENT_SECONDS = 1.0
MAX_SEGMENT_SECONDS = 3.0

# Transitions are drawn uniformly from these pools, so repeats act as weights.
TRANSITIONS_BY_STYLE: dict[str, tuple[Transition, ...]] = {
    Style.CINEMATIC: (Transition.FADE, Transition.FADE, Transition.DISSOLVE),
    Style.DYNAMIC: (Transition.FADE, Transition.SLIDE),
    Style.SMOOTH: (Transition.FADE,),
}


def pick_transition(style: str | None, rng: random.Random) -> Transition:
    """Choose a transition for one segment. Unknown styles use the smooth pool."""
    pool = TRANSITIONS_BY_STYLE.get(style or "", TRANSITIONS_BY_STYLE[Style.SMOOTH])
    return rng.choice(pool)


def plan_sequence(
    candidates: Sequence[Clip],
    total_duration: float,
    style: str | None,
    *,
    rng: random.Random | None = None,
) -> list[SequencePlanEntry]:
    """
    Shuffle the candidates and take a 1-3 second slice of each until the
    requested duration is used up or the candidates run out.

    The plan may come up short when the candidates cannot cover
    ``total_duration``; that is a valid plan, not an error. An empty list is
    returned for empty input or a non-positive duration.
    """
    rng = rng or random.Random()
    shuffled = list(candidates)
    rng.shuffle(shuffled)

    plan: list[SequencePlanEntry] = []
    total = float(total_duration)
    durations: list[float] = []
    used = 0.0
    for clip in shuffled:
        if used >= total:
            break
        segment = min(clip.duration, rng.uniform(MIN_SEGMENT_SECONDS, MAX_SEGMENT_SECONDS), total - used)
        if segment <= 0:
            raise PlanningError(f"Non-positive segment {segment} planned for clip {clip.id!r}")
        segment = _fit_to_budget(durations, segment, total)
        if segment <= 0:
            break
        plan.append(
            SequencePlanEntry(
                clip_id=clip.id,
                filename=clip.filename,
                duration=segment,
                transition=pick_transition(style, rng),
                storage_path=clip.storage_path,
            )
        )
        durations.append(segment)
        used += segment
    return plan


def _fit_to_budget(durations: list[float], segment: float, total: float) -> float:
    """Shrink ``segment`` until neither a running sum nor ``sum()`` of the plan exceeds ``total``."""
    used = 0.0
    for duration in durations:
        used += duration
    while True:
        overshoot = max(used + segment, sum([*durations, segment])) - total
        if overshoot <= 0:
            return segment
        segment = math.nextafter(segment - overshoot, 0.0)


def plan_duration(plan: Sequence[SequencePlanEntry]) -> float:
    return sum(entry.duration for entry in plan)
