import logging

from django.conf import settings
from django.db import transaction
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


def enqueue_after_commit(task, *args):
    """Queue an RQ job once the surrounding transaction commits."""
    if not getattr(settings, "NOTIFICATIONS_ENABLED", True):
        return

    def _enqueue():
        try:
            task.delay(*args)
        except RedisError:
            logger.exception("Could not enqueue %s%r", getattr(task, "__name__", task), args)

    transaction.on_commit(_enqueue)
