"""Distance and geocoding lookups through Google Maps"""
import logging
import math
from decimal import Decimal, ROUND_HALF_UP

import googlemaps
from django.conf import settings

from ..utils.constants import BusinessRules

logger = logging.getLogger(__name__)


class DistanceLookupError(Exception):
    """Raised when Google Maps cannot measure a route"""
    pass


class DistanceService:
    def __init__(self, api_key=None, client=None, timeout=None):
        self.api_key = settings.GOOGLE_MAPS_API_KEY if api_key is None else api_key
        timeout = timeout or settings.DISTANCE_LOOKUP_TIMEOUT_SECONDS
        if client is not None:
            self.gmaps = client
        else:
            self.gmaps = googlemaps.Client(key=self.api_key, timeout=timeout) if self.api_key else None

    def _client(self):
        if not self.gmaps:
            raise DistanceLookupError('Distance service is not configured')
        return self.gmaps

    def measure(self, origin, destination):
        """
        Driving distance and duration between two (lat, lon) pairs.

        Via points are not part of the distance-matrix request; the quote is
        measured between pickup and destination only.

        Returns:
            {'distance_miles': Decimal, 'duration_minutes': int}
        """
        gmaps = self._client()
        try:
            result = gmaps.distance_matrix(
                origins=[tuple(origin)],
                destinations=[tuple(destination)],
                mode='driving',
                units='imperial',
            )
        except (googlemaps.exceptions.ApiError, googlemaps.exceptions.TransportError,
                googlemaps.exceptions.Timeout) as e:
            logger.error(f'[DISTANCE] Distance matrix request failed: {e}')
            raise DistanceLookupError('Failed to calculate distance') from e

        try:
            element = result['rows'][0]['elements'][0]
        except (KeyError, IndexError) as e:
            raise DistanceLookupError('No route found between these locations') from e

        if element.get('status') != 'OK':
            logger.warning(f'[DISTANCE] No route: {element.get("status")}')
            raise DistanceLookupError('No route found between these locations')

        meters = Decimal(element['distance']['value'])
        miles = (meters / Decimal(str(BusinessRules.METERS_PER_MILE))).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        minutes = math.ceil(element['duration']['value'] / 60)
        return {'distance_miles': miles, 'duration_minutes': minutes}

    def suggest_addresses(self, query, limit=5):
        """Address suggestions with coordinates for the pickup/destination inputs"""
        gmaps = self._client()
        try:
            results = gmaps.geocode(query)
        except (googlemaps.exceptions.ApiError, googlemaps.exceptions.TransportError,
                googlemaps.exceptions.Timeout) as e:
            logger.error(f'[DISTANCE] Geocode request failed: {e}')
            raise DistanceLookupError('Address lookup failed') from e

        return [{
            'display_name': item['formatted_address'],
            'lat': item['geometry']['location']['lat'],
            'lon': item['geometry']['location']['lng'],
            'place_id': item.get('place_id'),
        } for item in results[:limit]]
