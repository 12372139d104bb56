"""Centralized cache key patterns"""

class CacheKeys:
    """Cache key generators for consistent naming"""

    @staticmethod
    def booking_flow(flow_id):
        return f'booking_flow:{flow_id}'
