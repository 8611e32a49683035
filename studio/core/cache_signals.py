"""
Cache invalidation signals
Automatically invalidate cache when production data changes
"""
from django.conf import settings
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .model_cache import (
    bump_generation, invalidate_dashboard_cache, invalidate_job_card_cache,
    JOB_CARD_LIST_KEY_PREFIX,
)

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()


@contextmanager
def suspend_cache_signals():
    """
    Temporarily suspend cache invalidation signals for bulk operations.
    Invalidate manually after the block.
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def uses_redis_cache():
    backend = settings.CACHES.get('default', {}).get('BACKEND', '')
    return backend.startswith('django_redis')


def invalidate_cache_pattern(pattern):
    """
    Delete all cache keys matching a pattern.
    Uses Redis SCAN; other backends rely on generation stamps and TTL.
    """
    if not uses_redis_cache():
        logger.debug(f"Pattern invalidation skipped for non-Redis cache: {pattern}")
        return 0
    try:
        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")

        keys = []
        cursor = 0
        while True:
            cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}*", count=100)
            keys.extend(partial_keys)
            if cursor == 0:
                break

        if keys:
            redis_conn.delete(*keys)
        logger.info(f"Cache invalidation requested for pattern: {pattern} - Deleted {len(keys)} keys")
        return len(keys)
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")
        return 0


def invalidate_job_card_lists(licensee_id):
    bump_generation(f"{JOB_CARD_LIST_KEY_PREFIX}{licensee_id}")


# --- Signal Handlers ---

@receiver([post_save, post_delete])
def invalidate_booking_cache(sender, instance, **kwargs):
    """Bookings feed the dashboard and the job card listings"""
    if is_suspended() or sender.__name__ != 'Booking':
        return
    from studio.bookings.models import Booking
    if isinstance(instance, Booking):
        licensee_id = instance.licensee_id

        def invalidate_after_commit():
            invalidate_dashboard_cache(licensee_id)
            invalidate_job_card_lists(licensee_id)

        transaction.on_commit(invalidate_after_commit)


@receiver([post_save, post_delete])
def invalidate_production_asset_cache(sender, instance, **kwargs):
    """Files and content items are embedded in job card detail responses"""
    if is_suspended() or sender.__name__ not in ('ProductionFile', 'ContentItem'):
        return
    from studio.production.models import ProductionFile, ContentItem
    if isinstance(instance, (ProductionFile, ContentItem)):
        try:
            invalidate_job_card_cache(instance.job_card)
        except Exception as e:
            logger.warning(f"Error in invalidate_production_asset_cache signal: {e}")
