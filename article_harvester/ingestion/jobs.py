"""
Background Jobs Module
======================

Defines arq tasks for queued single-link ingestion. Uses Redis as the job
queue backend.

Several workers may run these tasks at once. Each task is an independent
Single-Link run; workers do not coordinate beyond the runner's
already-ingested check and the database's unique constraints.
"""

from __future__ import annotations

import logging
import os
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from arq import create_pool
from arq.connections import RedisSettings

from article_harvester.core.errors import HarvesterError
from article_harvester.db.engine import get_session
from article_harvester.ingestion.runners import SingleLinkRunner

logger = logging.getLogger(__name__)


def get_redis_settings() -> RedisSettings:
    """Get Redis connection settings from environment."""
    return RedisSettings(
        host=os.environ.get("REDIS_HOST", "localhost"),
        port=int(os.environ.get("REDIS_PORT", "6379")),
        database=int(os.environ.get("REDIS_DB", "0")),
    )


async def process_next_link(ctx: dict[str, Any]) -> dict[str, Any]:
    """
    Run the Single-Link Runner once.

    Args:
        ctx: arq context

    Returns:
        Job outcome as a dictionary
    """
    job_id = ctx.get("job_id", str(uuid4()))
    started_at = datetime.now(UTC)
    outcome: dict[str, Any] = {"job_id": job_id, "started_at": started_at.isoformat()}

    try:
        with get_session() as session:
            result = await SingleLinkRunner(session).run()
        outcome.update(status="completed", message=result.message, link=result.link)
    except HarvesterError as e:
        logger.error(f"Job {job_id} failed: {e}")
        outcome.update(status="failed", message=str(e), link=None)

    completed_at = datetime.now(UTC)
    outcome["completed_at"] = completed_at.isoformat()
    outcome["duration_seconds"] = (completed_at - started_at).total_seconds()
    return outcome


async def enqueue_links(count: int = 1) -> list[str]:
    """
    Enqueue single-link ingestion jobs.

    Args:
        count: Number of jobs to enqueue

    Returns:
        Job IDs
    """
    redis = await create_pool(get_redis_settings())
    try:
        job_ids = []
        for _ in range(count):
            job = await redis.enqueue_job("process_next_link")
            if job is not None:
                job_ids.append(job.job_id)
    finally:
        await redis.close()
    return job_ids


async def get_job_status(job_id: str) -> dict[str, Any] | None:
    """
    Get the status of a queued job.

    Args:
        job_id: Job ID to look up

    Returns:
        Job info dict, or None if not found
    """
    from arq.jobs import Job, JobStatus

    redis = await create_pool(get_redis_settings())
    try:
        job = Job(job_id, redis)
        status = await job.status()
        if status == JobStatus.not_found:
            return None
        info = await job.result_info()
    finally:
        await redis.close()

    return {
        "job_id": job_id,
        "status": status.value,
        "result": info.result if info else None,
    }


class WorkerSettings:
    """arq worker settings."""

    functions = [process_next_link]
    redis_settings = get_redis_settings()
    max_jobs = 1
    job_timeout = 600
    keep_result = 86400  # 24 hours
