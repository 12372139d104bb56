"""Utils package - helper functions and utilities"""

from .constants import *
from .cache_keys import CacheKeys
from .slugs import vehicle_slug

__all__ = [
    'CacheKeys',
    'vehicle_slug',
]
