"""
Background Job Registry

World icons and story music are slow to generate, so handlers hand them off
here and respond immediately with a job id. The job's status moves
pending -> running -> complete | failed and can be polled via /api/jobs.

Jobs live in process memory; a restart forgets them (the generated asset URL
is still written to its row when a job completes).
"""

from typing import Dict, Any, List, Optional, Callable, Awaitable
from collections import OrderedDict
from datetime import datetime
from uuid import uuid4
import asyncio
import logging
import time

logger = logging.getLogger(__name__)

# ==================== Job Status Constants ====================
JOB_PENDING = "pending"
JOB_RUNNING = "running"
JOB_COMPLETE = "complete"
JOB_FAILED = "failed"

# ==================== Job Kind Constants ====================
JOB_WORLD_IMAGE = "world_image"
JOB_STORY_MUSIC = "story_music"


class Job:
    """One unit of background work"""
    def __init__(self, kind: str, target_id: str):
        self.id = str(uuid4())
        self.kind = kind
        self.target_id = target_id
        self.status = JOB_PENDING
        self.result: Optional[Dict[str, Any]] = None
        self.error: Optional[str] = None
        self.created_at = datetime.utcnow()
        self.started_at: Optional[datetime] = None
        self.finished_at: Optional[datetime] = None

    @property
    def done(self) -> bool:
        return self.status in (JOB_COMPLETE, JOB_FAILED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "targetId": self.target_id,
            "status": self.status,
            "result": self.result,
            "error": self.error,
            "createdAt": self.created_at.isoformat(),
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
        }


class JobRegistry:
    """
    In-process registry of fire-and-forget work.

    Keeps the most recent `max_jobs` jobs; older finished jobs are evicted
    first when the limit is reached.
    """

    def __init__(self, max_jobs: int = 500, app_logger=None):
        self.max_jobs = max_jobs
        self.app_logger = app_logger
        self._jobs: "OrderedDict[str, Job]" = OrderedDict()
        self._tasks: Dict[str, asyncio.Task] = {}

    def submit(self, kind: str, target_id: str, work: Callable[[], Awaitable[Dict[str, Any]]]) -> Job:
        """
        Register a job and schedule it on the running event loop.

        Args:
            kind: Job kind (e.g. JOB_WORLD_IMAGE)
            target_id: Id of the row the job will update
            work: Zero-argument coroutine function returning the job result

        Returns:
            The pending Job (already scheduled)
        """
        job = Job(kind, target_id)
        self._jobs[job.id] = job
        self._evict()

        if self.app_logger:
            self.app_logger.job_received(kind, target_id)

        task = asyncio.get_running_loop().create_task(self._run(job, work))
        self._tasks[job.id] = task
        task.add_done_callback(lambda _: self._tasks.pop(job.id, None))
        return job

    async def _run(self, job: Job, work: Callable[[], Awaitable[Dict[str, Any]]]):
        job.status = JOB_RUNNING
        job.started_at = datetime.utcnow()
        start = time.time()

        try:
            job.result = await work()
            job.status = JOB_COMPLETE
            if self.app_logger:
                self.app_logger.job_completed(job.kind, job.target_id, time.time() - start)
        except Exception as e:
            job.status = JOB_FAILED
            job.error = str(e)
            logger.error(f"❌ Job {job.kind} for {job.target_id} failed: {e}", exc_info=True)
            if self.app_logger:
                self.app_logger.job_failed(job.kind, job.target_id, str(e))
        finally:
            job.finished_at = datetime.utcnow()

    def _evict(self):
        while len(self._jobs) > self.max_jobs:
            finished = next((jid for jid, j in self._jobs.items() if j.done), None)
            if finished is None:
                break
            del self._jobs[finished]

    def get(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)

    def list(self, limit: int = 50) -> List[Job]:
        """Most recent jobs first"""
        return list(reversed(self._jobs.values()))[:limit]

    async def wait(self, job_id: str) -> Optional[Job]:
        """Wait for a job to finish (used at shutdown and in tests)"""
        task = self._tasks.get(job_id)
        if task:
            await asyncio.shield(task)
        return self._jobs.get(job_id)

    async def drain(self):
        """Wait for all in-flight jobs"""
        if self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)
