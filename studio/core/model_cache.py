"""
Caching for frequently read records: clients, job cards and dashboard stats.

Detail entries are keyed by primary key. List entries are keyed by licensee
plus a generation stamp, so a write only has to move the stamp forward for
every cached list of that licensee to fall out of use.
"""
import logging
import time

from django.core.cache import cache
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

logger = logging.getLogger(__name__)

# Cache key prefixes
CLIENT_KEY_PREFIX = 'client:'
CLIENT_LIST_KEY_PREFIX = 'client_list:'
JOB_CARD_KEY_PREFIX = 'job_card:'
JOB_CARD_LIST_KEY_PREFIX = 'job_card_list:'
DASHBOARD_KEY_PREFIX = 'dashboard_stats:'
GENERATION_KEY_PREFIX = 'cache_generation:'

# Cache TTL (Time To Live) in seconds
CLIENT_CACHE_TTL = 600  # 10 minutes
CLIENT_LIST_CACHE_TTL = 300  # 5 minutes
# Job cards move through production quickly
JOB_CARD_CACHE_TTL = 120
JOB_CARD_LIST_CACHE_TTL = 60
DASHBOARD_CACHE_TTL = 120


# ==================== GENERATIONS ====================

def get_generation(name: str) -> int:
    """Current generation stamp for a family of list keys"""
    return cache.get_or_set(f"{GENERATION_KEY_PREFIX}{name}", time.time_ns, None)


def bump_generation(name: str):
    """Retire every list key built with the previous stamp"""
    cache.set(f"{GENERATION_KEY_PREFIX}{name}", time.time_ns(), None)
    logger.debug(f"Bumped cache generation: {name}")


# ==================== CLIENT CACHING ====================

def get_client_cache_key(client_id: int) -> str:
    """Get cache key for client by ID"""
    return f"{CLIENT_KEY_PREFIX}{client_id}"


def get_client_list_cache_key(licensee_id: int, search: str = '', office: str = '') -> str:
    """Get cache key for a licensee's client list"""
    generation = get_generation(f"{CLIENT_LIST_KEY_PREFIX}{licensee_id}")
    return f"{CLIENT_LIST_KEY_PREFIX}{licensee_id}:{generation}:{search or 'all'}:{office or 'all'}"


def cache_client_data(client_id: int, data, ttl: int = None):
    """Cache serialized client data"""
    cache.set(get_client_cache_key(client_id), data, ttl or CLIENT_CACHE_TTL)
    logger.debug(f"Cached client data (ID: {client_id})")


def get_cached_client(client_id: int):
    """Get cached client data by ID"""
    cached_data = cache.get(get_client_cache_key(client_id))
    if cached_data:
        logger.debug(f"Cache hit for client: {client_id}")
    return cached_data


def invalidate_client_cache(client_obj):
    """Invalidate all cache entries for a client"""
    if not client_obj:
        return
    cache.delete(get_client_cache_key(client_obj.id))
    bump_generation(f"{CLIENT_LIST_KEY_PREFIX}{client_obj.licensee_id}")
    logger.debug(f"Invalidated cache for client: {client_obj.name} (ID: {client_obj.id})")


# ==================== JOB CARD CACHING ====================

def get_job_card_cache_key(job_card_id: int) -> str:
    return f"{JOB_CARD_KEY_PREFIX}{job_card_id}"


def get_job_card_list_cache_key(licensee_id: int, params: str = '') -> str:
    """Get cache key for a licensee's job card list; params is the normalized query"""
    generation = get_generation(f"{JOB_CARD_LIST_KEY_PREFIX}{licensee_id}")
    return f"{JOB_CARD_LIST_KEY_PREFIX}{licensee_id}:{generation}:{params or 'all'}"


def cache_job_card_data(job_card_id: int, data, ttl: int = None):
    cache.set(get_job_card_cache_key(job_card_id), data, ttl or JOB_CARD_CACHE_TTL)
    logger.debug(f"Cached job card data (ID: {job_card_id})")


def get_cached_job_card(job_card_id: int):
    cached_data = cache.get(get_job_card_cache_key(job_card_id))
    if cached_data:
        logger.debug(f"Cache hit for job card: {job_card_id}")
    return cached_data


def invalidate_job_card_cache(job_card_obj):
    """Invalidate all cache entries for a job card"""
    if not job_card_obj:
        return
    cache.delete(get_job_card_cache_key(job_card_obj.id))
    bump_generation(f"{JOB_CARD_LIST_KEY_PREFIX}{job_card_obj.licensee_id}")
    logger.debug(f"Invalidated cache for job card: {job_card_obj.job_id or '-'} (ID: {job_card_obj.id})")


# ==================== DASHBOARD CACHING ====================

def get_dashboard_cache_key(licensee_id: int) -> str:
    generation = get_generation(f"{DASHBOARD_KEY_PREFIX}{licensee_id}")
    return f"{DASHBOARD_KEY_PREFIX}{licensee_id}:{generation}"


def invalidate_dashboard_cache(licensee_id: int):
    bump_generation(f"{DASHBOARD_KEY_PREFIX}{licensee_id}")


# ==================== DJANGO SIGNALS ====================

@receiver(post_save)
def model_post_save(sender, instance, **kwargs):
    """Invalidate cache when a cached model is saved"""
    from .cache_signals import is_suspended
    if is_suspended():
        return
    model_name = sender.__name__

    if model_name == 'Client':
        from studio.clients.models import Client
        if isinstance(instance, Client):
            invalidate_client_cache(instance)
            invalidate_dashboard_cache(instance.licensee_id)

    elif model_name == 'JobCard':
        from studio.production.models import JobCard
        if isinstance(instance, JobCard):
            invalidate_job_card_cache(instance)


@receiver(post_delete)
def model_post_delete(sender, instance, **kwargs):
    """Invalidate cache when a cached model is deleted"""
    from .cache_signals import is_suspended
    if is_suspended():
        return
    model_name = sender.__name__

    if model_name == 'Client':
        from studio.clients.models import Client
        if isinstance(instance, Client):
            invalidate_client_cache(instance)
            invalidate_dashboard_cache(instance.licensee_id)
            logger.debug(f"Cache invalidated for deleted client: {instance.name} (ID: {instance.id})")

    elif model_name == 'JobCard':
        from studio.production.models import JobCard
        if isinstance(instance, JobCard):
            invalidate_job_card_cache(instance)
