"""
Background job status and service health.
"""

from fastapi import APIRouter

from ..services.errors import NotFoundError
from .dependencies import get_jobs, get_providers, get_settings_instance, has_db

router = APIRouter(prefix="/api", tags=["jobs"])


@router.get("/jobs")
async def list_jobs(limit: int = 50):
    """Most recent jobs first"""
    return {"jobs": [job.to_dict() for job in get_jobs().list(limit)]}


@router.get("/jobs/{job_id}")
async def get_job(job_id: str):
    """
    Poll a background job.

    Returns:
    {
        "job": {
            "id": "...",
            "kind": "world_image",
            "targetId": "...",
            "status": "pending" | "running" | "complete" | "failed",
            "result": {...},
            "error": null,
            ...
        }
    }
    """
    job = get_jobs().get(job_id)
    if not job:
        raise NotFoundError("Job not found")
    return {"job": job.to_dict()}


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    providers = get_providers()
    return {
        "status": "healthy",
        "service": get_settings_instance().app_name,
        "database_configured": has_db(),
        "text_configured": providers.has_text,
        "images_configured": providers.has_images,
        "audio_configured": providers.has_audio,
    }
