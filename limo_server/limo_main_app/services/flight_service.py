"""Flight lookup through the AeroDataBox API on RapidAPI"""
import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class FlightLookupError(Exception):
    status_code = 502

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class FlightLookupTimeout(FlightLookupError):
    status_code = 504


class FlightService:
    BASE_URL = 'https://aerodatabox.p.rapidapi.com'
    HOST = 'aerodatabox.p.rapidapi.com'

    def __init__(self, api_key=None, timeout=None):
        self.api_key = settings.RAPIDAPI_KEY if api_key is None else api_key
        self.timeout = timeout or settings.FLIGHT_LOOKUP_TIMEOUT_SECONDS

    def _headers(self):
        return {'X-RapidAPI-Key': self.api_key, 'X-RapidAPI-Host': self.HOST}

    def search(self, flight_number, date=None):
        """
        Find a flight by number, optionally on a given `datetime.date`.

        The dated lookup is tried first; on any failure it falls back to the
        undated search endpoint.
        """
        flight_number = (flight_number or '').replace(' ', '').upper()
        if not flight_number:
            raise FlightLookupError('Flight number is required', status_code=400)
        if not self.api_key:
            raise FlightLookupError('Flight search is not configured. Please contact support.', status_code=503)

        if date:
            flights = self._search_by_date(flight_number, date)
            if flights:
                return flights

        url = f'{self.BASE_URL}/flights/search/term'
        data = self._get(url, params={'q': flight_number, 'limit': 10})
        if isinstance(data, list):
            return data
        return data.get('items', [])

    def _search_by_date(self, flight_number, date):
        url = f'{self.BASE_URL}/flights/number/{flight_number}/{date:%Y-%m-%d}'
        try:
            data = self._get(url)
        except FlightLookupTimeout:
            raise
        except FlightLookupError as e:
            logger.info(f'[FLIGHT] Dated lookup for {flight_number} failed ({e.message}), falling back to search')
            return []
        return data if isinstance(data, list) else [data]

    def _get(self, url, params=None):
        try:
            response = requests.get(url, headers=self._headers(), params=params, timeout=self.timeout)
        except requests.Timeout as e:
            logger.warning(f'[FLIGHT] Request to {url} timed out after {self.timeout}s')
            raise FlightLookupTimeout('Flight search timed out. Please try again.') from e
        except requests.RequestException as e:
            logger.error(f'[FLIGHT] Request to {url} failed: {e}')
            raise FlightLookupError('Flight search service temporarily unavailable') from e

        if response.status_code in (204, 404):
            return []
        if response.status_code in (401, 403):
            logger.error(f'[FLIGHT] API rejected credentials: {response.status_code}')
            raise FlightLookupError('Flight search is not configured. Please contact support.', status_code=503)
        if response.status_code == 429:
            raise FlightLookupError('Flight search rate limit reached. Please try again later.', status_code=429)
        if response.status_code >= 400:
            logger.warning(f'[FLIGHT] API error {response.status_code}: {response.text[:200]}')
            raise FlightLookupError('Flight search service temporarily unavailable')

        try:
            return response.json()
        except ValueError as e:
            raise FlightLookupError('Invalid response from flight search service') from e
