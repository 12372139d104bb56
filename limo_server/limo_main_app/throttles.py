from rest_framework.throttling import UserRateThrottle


class QuoteRateThrottle(UserRateThrottle):
    """Quotes, price and address lookups (they hit Google Maps)"""
    scope = 'quote'


class FlightLookupRateThrottle(UserRateThrottle):
    scope = 'flight_lookup'
