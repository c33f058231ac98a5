"""Celery tasks for batch result calculation."""

import asyncio
import logging

from app.database import AsyncSessionLocal
from app.services.result_service import calculate_all_results
from app.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


async def _calculate_all(force: bool) -> int:
    async with AsyncSessionLocal() as db:
        results = await calculate_all_results(db, force=force)
    return len(results)


@celery_app.task(name="app.workers.tasks_results.calculate_all_results_task")
def calculate_all_results_task(force: bool = False) -> dict:
    created = asyncio.run(_calculate_all(force))
    logger.info("Background batch scoring wrote %d result(s)", created)
    return {"created": created}
