"""Calculation queue status and health check route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ladder_league.database.db import get_db_session
from ladder_league.services.stats_queue import get_stats_queue
from ladder_league.api.routes import to_http_exception
from ladder_league.models.schemas import HealthResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/calculate-stats/status")
async def get_calculation_status(session: AsyncSession = Depends(get_db_session)):
    """
    Get current queue status and recent jobs.

    Returns:
        dict: Queue status with running, pending, and recent jobs
    """
    try:
        queue = get_stats_queue()
        return await queue.get_queue_status(session)
    except Exception as e:
        raise to_http_exception(e, "getting queue status")


@router.get("/api/calculate-stats/status/{job_id}")
async def get_job_status(job_id: int, session: AsyncSession = Depends(get_db_session)):
    """
    Get status of a specific calculation job.

    Args:
        job_id: Job ID

    Returns:
        dict: Job status
    """
    try:
        queue = get_stats_queue()
        job_status = await queue.get_job_status(session, job_id)

        if not job_status:
            raise HTTPException(status_code=404, detail=f"Job {job_id} not found")

        return job_status
    except Exception as e:
        raise to_http_exception(e, "getting job status")


@router.get("/api/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Service status
    """
    return {"status": "healthy", "message": "API is running"}
