"""
Background work for the media app.

Only one kind of job exists: destroying a provider object that no Asset
row references (an upload whose metadata save failed). It runs on
``maintenance_queue`` so the discard endpoint can answer 202 immediately.
"""
import logging
from typing import Any, Dict

import django_rq
from django.conf import settings
from rq import Retry, Worker

logger = logging.getLogger(__name__)


MAINTENANCE_QUEUE = "maintenance_queue"

REMOTE_DELETE_FUNCTION = "apps.media.jobs.delete_remote_object"

EMPTY_QUEUE_STATS = {"queued": 0, "started": 0, "failed": 0, "workers": 0}


class QueueManager:
    """Enqueueing and inspection of the maintenance queue."""

    @staticmethod
    def get_queue(queue_name: str = MAINTENANCE_QUEUE):
        return django_rq.get_queue(queue_name)

    @staticmethod
    def enqueue_remote_delete(public_id: str, resource_type: str) -> str:
        """
        Queue ``delete_remote_object(public_id, resource_type)``.

        Provider failures are retried ``RQ_RETRY_MAX_TIMES`` times with the
        back-off in ``RQ_RETRY_DELAYS``. Returns the RQ job id.
        """
        rq_job = QueueManager.get_queue(MAINTENANCE_QUEUE).enqueue(
            REMOTE_DELETE_FUNCTION,
            public_id,
            resource_type,
            retry=Retry(max=settings.RQ_RETRY_MAX_TIMES, interval=settings.RQ_RETRY_DELAYS),
        )
        logger.info(f"Queued remote delete of {resource_type} {public_id} (rq_job_id={rq_job.id})")
        return rq_job.id

    @staticmethod
    def get_queue_stats() -> Dict[str, Dict[str, Any]]:
        """
        Job counts and live workers for the maintenance queue.

        Redis being down is reported in the stats (``error`` key) rather
        than raised, so the health endpoint can still answer.
        """
        try:
            queue = QueueManager.get_queue(MAINTENANCE_QUEUE)
            workers = [
                worker for worker in Worker.all(connection=django_rq.get_connection(MAINTENANCE_QUEUE))
                if MAINTENANCE_QUEUE in worker.queue_names()
            ]
            stats = {
                "queued": queue.count,
                "started": len(queue.started_job_registry),
                "failed": len(queue.failed_job_registry),
                "workers": len(workers),
            }
        except Exception as e:
            logger.warning(f"Could not read stats for {MAINTENANCE_QUEUE}: {e}")
            stats = {**EMPTY_QUEUE_STATS, "error": str(e)}

        return {MAINTENANCE_QUEUE: stats}
