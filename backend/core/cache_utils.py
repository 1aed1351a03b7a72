"""
Caching utilities for expensive report and catalog queries.
Uses Redis (django-redis) in deployment; any Django cache backend works.
"""
from django.core.cache import cache, caches
from django_redis import get_redis_connection
from django_redis.cache import RedisCache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
CATALOG_CACHE_TTL = 900  # 15 minutes
REPORTS_CACHE_TTL = 300  # 5 minutes
PROMOTIONS_CACHE_TTL = 600  # 10 minutes
MOTORCYCLE_LIST_CACHE_TTL = 120  # 2 minutes


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=120, key_prefix="brands_list")
        def get_expensive_data(organization_id):
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator


def _is_redis_backend():
    return isinstance(caches['default'], RedisCache)


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern.

    Redis is scanned with SCAN; other backends can not enumerate keys and
    are cleared entirely.
    """
    if not _is_redis_backend():
        cache.clear()
        logger.debug(f"Cleared non-redis cache for pattern: {pattern}")
        return

    try:
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
            logger.info(f"Invalidated {len(keys)} cache keys matching pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")


def report_key_prefix(organization_id):
    return f"report:{organization_id}"


def get_cached_report(report_name, organization_id, **params):
    """
    Get cached report data
    Returns tuple: (cached_data, cache_key)
    """
    cache_key = make_cache_key(f"{report_key_prefix(organization_id)}:{report_name}", **params)
    return cache.get(cache_key), cache_key


def cache_report(cache_key, data, ttl=REPORTS_CACHE_TTL):
    """Cache report data"""
    cache.set(cache_key, data, ttl)
    logger.debug(f"Cached report: {cache_key}")


def invalidate_reports_cache(organization_id):
    """Invalidate every report of an organization"""
    invalidate_cache_pattern(report_key_prefix(organization_id))


def get_catalog_cache_key(name, organization_id=None):
    return f"catalog:{name}:{organization_id or 'global'}"


def invalidate_catalog_cache():
    invalidate_cache_pattern("catalog:")


def motorcycle_list_key_prefix(organization_id):
    return f"motorcycles:{organization_id}"


def get_motorcycle_list_cache_key(organization_id, params):
    return make_cache_key(motorcycle_list_key_prefix(organization_id), **params)


def invalidate_motorcycle_list_cache(organization_id):
    invalidate_cache_pattern(motorcycle_list_key_prefix(organization_id))


PROMOTIONS_KEY_PREFIX = "promotions"


def invalidate_promotions_cache():
    invalidate_cache_pattern(f"{PROMOTIONS_KEY_PREFIX}:")
