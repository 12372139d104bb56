"""Views package - HTTP request handlers"""

from .quote_views import calculate_distance, calculate_price, available_pricing_rules, geocode, flight_search
from .booking_flow_views import BookingFlowViewSet
from .booking_views import BookingViewSet, stripe_webhook
from .vehicle_views import VehicleTypeViewSet, PricingRuleViewSet, DriverViewSet

__all__ = [
    'calculate_distance', 'calculate_price', 'available_pricing_rules', 'geocode', 'flight_search',
    'BookingFlowViewSet', 'BookingViewSet', 'stripe_webhook',
    'VehicleTypeViewSet', 'PricingRuleViewSet', 'DriverViewSet',
]
