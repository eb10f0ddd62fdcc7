"""Video generation REST API: catalog options, job submission and status polling."""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from app.config import Settings
from models import Season, TimeOfDay
from services.catalog import ClipCatalog
from services.errors import JobNotFoundError, NoMatchingClipsError, PersistenceError
from services.planner import plan_sequence
from services.processor import JobProcessor
from services.store import JobStore

router = APIRouter(tags=["videos"])
logger = logging.getLogger(__name__)

NO_MATCH_DETAIL = {
    "error": "No clips found matching your criteria",
    "suggestion": "Try different location, time, or season",
}


class GenerateVideoRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    location: str = Field(..., min_length=1)
    time_of_day: TimeOfDay = Field(..., alias="timeOfDay")
    season: Season
    duration: float = Field(..., gt=0, description="Target video length in seconds")
    style: str | None = None  # unknown or missing styles plan with the smooth pool


class GenerateVideoResponse(BaseModel):
    jobId: str
    status: str
    message: str
    estimatedTime: str
    clipsUsed: int


class ParametersResponse(BaseModel):
    locations: list[str]
    times: list[str]
    seasons: list[str]


class JobStatusResponse(BaseModel):
    """Job record for polling. GET /api/job-status/{id}."""

    id: str
    user_parameters: dict[str, Any]
    clip_sequence: list[dict[str, Any]]
    output_filename: str | None = None
    status: str
    created_at: str


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_catalog(request: Request) -> ClipCatalog:
    return request.app.state.catalog


def get_job_store(request: Request) -> JobStore:
    return request.app.state.job_store


def get_processor(request: Request) -> JobProcessor:
    return request.app.state.processor


@router.get("/parameters", response_model=ParametersResponse)
def get_parameters(catalog: ClipCatalog = Depends(get_catalog)) -> ParametersResponse:
    """Distinct locations, times of day and seasons available in the catalog."""
    try:
        options = catalog.list_options()
    except PersistenceError as exc:
        logger.error("[videos] Parameters lookup failed: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to fetch parameters") from exc
    return ParametersResponse(locations=options.locations, times=options.times, seasons=options.seasons)


@router.post("/generate-video", response_model=GenerateVideoResponse)
async def generate_video(
    body: GenerateVideoRequest,
    settings: Settings = Depends(get_settings),
    catalog: ClipCatalog = Depends(get_catalog),
    store: JobStore = Depends(get_job_store),
    processor: JobProcessor = Depends(get_processor),
) -> GenerateVideoResponse:
    """Plan a video from matching clips, store the job and start rendering in the background."""
    logger.info(
        "[videos] POST /api/generate-video location=%s time=%s season=%s duration=%s style=%s",
        body.location,
        body.time_of_day,
        body.season,
        body.duration,
        body.style,
    )
    if body.duration > settings.max_duration_seconds:
        raise HTTPException(
            status_code=422,
            detail=f"duration must be at most {settings.max_duration_seconds:g} seconds",
        )
    try:
        clips = await asyncio.to_thread(
            catalog.find_candidates, body.location, body.time_of_day, body.season, settings.candidate_limit
        )
        if not clips:
            raise NoMatchingClipsError(f"{body.location}/{body.time_of_day}/{body.season}")
        plan = plan_sequence(clips, body.duration, body.style)
        job_id = await asyncio.to_thread(store.create, body.model_dump(mode="json", by_alias=True), plan)
    except NoMatchingClipsError as exc:
        logger.info("[videos] No clips for %s", exc)
        raise HTTPException(status_code=404, detail=NO_MATCH_DETAIL) from exc
    except PersistenceError as exc:
        logger.error("[videos] Generation error: %s", exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to start video generation") from exc

    processor.start(job_id, plan)
    return GenerateVideoResponse(
        jobId=job_id,
        status="processing",
        message="Video generation started",
        estimatedTime="20-30 seconds",
        clipsUsed=len(plan),
    )


@router.get("/job-status/{job_id}", response_model=JobStatusResponse)
def get_job_status(job_id: str, store: JobStore = Depends(get_job_store)) -> JobStatusResponse:
    """Poll a job until its status is completed or failed (clients poll about every 3s)."""
    try:
        job = store.get(job_id)
    except JobNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Job not found") from exc
    except PersistenceError as exc:
        logger.error("[videos] Status lookup for %s failed: %s", job_id, exc)
        raise HTTPException(status_code=500, detail="Failed to read job status") from exc
    return JobStatusResponse(**job.to_record())
