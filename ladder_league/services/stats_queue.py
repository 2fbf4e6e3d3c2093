"""
Standings calculation queue with deduplication.

Standings recomputes are deferred to a database-backed queue that:
- Deduplicates requests for the same game day
- Runs one calculation at a time, so standing writes never interleave
- Persists across server restarts
- Tracks job status
"""

import asyncio
import logging
from typing import Optional, Dict, Callable, Awaitable, Set
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_
from ladder_league.utils.datetime_utils import utcnow
from ladder_league.database.models import StatsCalculationJob, StatsCalculationJobStatus
from ladder_league.database import db

logger = logging.getLogger(__name__)

GAME_DAY_CALC_TYPE = "game_day"


def _job_summary(job: StatsCalculationJob) -> Dict:
    return {
        "id": job.id,
        "calc_type": job.calc_type,
        "league_id": job.league_id,
        "game_day_id": job.game_day_id,
    }


def _isoformat(value) -> Optional[str]:
    return value.isoformat() if value else None


class StatsCalculationQueue:
    """Database-backed queue for standings calculation jobs."""

    def __init__(self):
        self._worker_task: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()
        self._stop_event = asyncio.Event()
        self._game_day_calc_callback: Optional[
            Callable[[AsyncSession, int, int], Awaitable[Dict]]
        ] = None

    async def enqueue_calculation(
        self,
        session: AsyncSession,
        league_id: int,
        game_day_id: int
    ) -> int:
        """
        Enqueue a standings calculation for a game day.

        Deduplication logic:
        - If a pending job for the same game day exists, return it
        - If any calculation is running, queue one pending job for this game day
        - Otherwise start immediately

        Args:
            session: Database session
            league_id: League ID
            game_day_id: Game day ID

        Returns:
            Job ID
        """
        queued = await self._find_queued_job(session, league_id, game_day_id)
        if queued:
            return queued.id

        running_job = await self._get_running_job(session)
        if running_job:
            # A job running for the same game day may have read its inputs
            # before this request, so it still gets one follow-up run.
            return await self._create_pending_job(session, league_id, game_day_id)

        job = StatsCalculationJob(
            calc_type=GAME_DAY_CALC_TYPE,
            league_id=league_id,
            game_day_id=game_day_id,
            status=StatsCalculationJobStatus.RUNNING,
            started_at=utcnow()
        )
        session.add(job)
        await session.commit()
        await session.refresh(job)

        task = asyncio.create_task(self._run_calculation(job.id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return job.id

    async def _get_running_job(self, session: AsyncSession) -> Optional[StatsCalculationJob]:
        """Get currently running job if any."""
        result = await session.execute(
            select(StatsCalculationJob)
            .where(StatsCalculationJob.status == StatsCalculationJobStatus.RUNNING)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _find_queued_job(
        self,
        session: AsyncSession,
        league_id: int,
        game_day_id: int
    ) -> Optional[StatsCalculationJob]:
        """Find a pending job for the same game day."""
        result = await session.execute(
            select(StatsCalculationJob)
            .where(and_(
                StatsCalculationJob.status == StatsCalculationJobStatus.PENDING,
                StatsCalculationJob.calc_type == GAME_DAY_CALC_TYPE,
                StatsCalculationJob.league_id == league_id,
                StatsCalculationJob.game_day_id == game_day_id,
            ))
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _get_first_queued_job(self, session: AsyncSession) -> Optional[StatsCalculationJob]:
        """Get oldest pending job."""
        result = await session.execute(
            select(StatsCalculationJob)
            .where(StatsCalculationJob.status == StatsCalculationJobStatus.PENDING)
            .order_by(StatsCalculationJob.created_at.asc(), StatsCalculationJob.id.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _create_pending_job(
        self,
        session: AsyncSession,
        league_id: int,
        game_day_id: int
    ) -> int:
        """Create a pending job and return its ID."""
        job = StatsCalculationJob(
            calc_type=GAME_DAY_CALC_TYPE,
            league_id=league_id,
            game_day_id=game_day_id,
            status=StatsCalculationJobStatus.PENDING
        )
        session.add(job)
        await session.commit()
        await session.refresh(job)
        logger.info(f"Queued standings calculation job {job.id} for game day {game_day_id}")
        return job.id

    def register_calculation_callback(
        self,
        game_day_calc_callback: Callable[[AsyncSession, int, int], Awaitable[Dict]]
    ) -> None:
        """
        Register the standings calculation function.

        Must be called before any calculation can be executed, typically
        during application startup.

        Args:
            game_day_calc_callback: Async function taking (session, league_id, game_day_id)

        Raises:
            TypeError: If the callback is not callable
        """
        if not callable(game_day_calc_callback):
            raise TypeError("game_day_calc_callback must be callable")

        if self._game_day_calc_callback is not None:
            logger.warning("Re-registering calculation callback (previous callback will be replaced)")

        self._game_day_calc_callback = game_day_calc_callback
        logger.info("Standings calculation callback registered successfully")

    async def _run_calculation(self, job_id: int) -> None:
        """Run a calculation job and record its outcome."""
        session = db.AsyncSessionLocal()
        try:
            result = await session.execute(
                select(StatsCalculationJob).where(StatsCalculationJob.id == job_id)
            )
            job = result.scalar_one_or_none()
            if not job:
                return

            try:
                if self._game_day_calc_callback is None:
                    raise RuntimeError(
                        "Calculation callback not registered. "
                        "Call register_calculation_callback() before running jobs."
                    )
                if job.calc_type != GAME_DAY_CALC_TYPE:
                    raise ValueError(f"Unknown calc_type: {job.calc_type}")
                if job.league_id is None or job.game_day_id is None:
                    raise ValueError("league_id and game_day_id required for game_day calculation")

                logger.info(f"Running standings calculation job {job_id} for game day {job.game_day_id}")
                await self._game_day_calc_callback(session, job.league_id, job.game_day_id)

                await session.execute(
                    update(StatsCalculationJob)
                    .where(StatsCalculationJob.id == job_id)
                    .values(
                        status=StatsCalculationJobStatus.COMPLETED,
                        completed_at=utcnow()
                    )
                )
                await session.commit()
                logger.info(f"Standings calculation job {job_id} completed")

            except Exception as e:
                logger.error(f"Standings calculation job {job_id} failed: {e}", exc_info=True)
                await session.rollback()
                await session.execute(
                    update(StatsCalculationJob)
                    .where(StatsCalculationJob.id == job_id)
                    .values(
                        status=StatsCalculationJobStatus.FAILED,
                        completed_at=utcnow(),
                        error_message=str(e)
                    )
                )
                await session.commit()
        finally:
            await session.close()

    async def _process_queue_worker(self) -> None:
        """Background worker that processes pending jobs."""
        while not self._stop_event.is_set():
            try:
                job_id = None
                async with db.AsyncSessionLocal() as session:
                    job = await self._get_first_queued_job(session)
                    if job and not await self._get_running_job(session):
                        await session.execute(
                            update(StatsCalculationJob)
                            .where(StatsCalculationJob.id == job.id)
                            .values(
                                status=StatsCalculationJobStatus.RUNNING,
                                started_at=utcnow()
                            )
                        )
                        await session.commit()
                        job_id = job.id

                if job_id is not None:
                    # Runs in its own session
                    await self._run_calculation(job_id)
                else:
                    await asyncio.sleep(1)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Error in queue worker: {e}", exc_info=True)
                await asyncio.sleep(5)

    async def get_queue_status(self, session: AsyncSession) -> Dict:
        """Get current queue status."""
        running = await self._get_running_job(session)

        result = await session.execute(
            select(StatsCalculationJob)
            .where(StatsCalculationJob.status == StatsCalculationJobStatus.PENDING)
            .order_by(StatsCalculationJob.created_at.asc(), StatsCalculationJob.id.asc())
        )
        pending = result.scalars().all()

        # Last 10 of each terminal status
        result = await session.execute(
            select(StatsCalculationJob)
            .where(StatsCalculationJob.status == StatsCalculationJobStatus.COMPLETED)
            .order_by(StatsCalculationJob.completed_at.desc())
            .limit(10)
        )
        recent_completed = result.scalars().all()

        result = await session.execute(
            select(StatsCalculationJob)
            .where(StatsCalculationJob.status == StatsCalculationJobStatus.FAILED)
            .order_by(StatsCalculationJob.completed_at.desc())
            .limit(10)
        )
        recent_failed = result.scalars().all()

        return {
            "running": {
                **_job_summary(running),
                "started_at": _isoformat(running.started_at)
            } if running else None,
            "pending": [
                {**_job_summary(j), "created_at": _isoformat(j.created_at)}
                for j in pending
            ],
            "recent_completed": [
                {**_job_summary(j), "completed_at": _isoformat(j.completed_at)}
                for j in recent_completed
            ],
            "recent_failed": [
                {
                    **_job_summary(j),
                    "error_message": j.error_message,
                    "completed_at": _isoformat(j.completed_at)
                }
                for j in recent_failed
            ]
        }

    async def get_job_status(self, session: AsyncSession, job_id: int) -> Optional[Dict]:
        """Get status of a specific job."""
        result = await session.execute(
            select(StatsCalculationJob).where(StatsCalculationJob.id == job_id)
        )
        job = result.scalar_one_or_none()
        if not job:
            return None

        return {
            **_job_summary(job),
            "status": job.status.value,
            "created_at": _isoformat(job.created_at),
            "started_at": _isoformat(job.started_at),
            "completed_at": _isoformat(job.completed_at),
            "error_message": job.error_message
        }

    def start_background_worker(self) -> None:
        """Start the background worker."""
        if self._worker_task is None or self._worker_task.done():
            self._stop_event.clear()
            self._worker_task = asyncio.create_task(self._process_queue_worker())

    def stop_background_worker(self) -> None:
        """Stop the background worker."""
        self._stop_event.set()
        if self._worker_task and not self._worker_task.done():
            self._worker_task.cancel()


# Global queue instance
_stats_queue = StatsCalculationQueue()


def get_stats_queue() -> StatsCalculationQueue:
    """Get the global stats queue instance."""
    return _stats_queue
