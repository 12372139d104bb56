from django.urls import path, include
from rest_framework import routers

from .views import (
    calculate_distance, calculate_price, available_pricing_rules, geocode, flight_search,
    BookingFlowViewSet, BookingViewSet, stripe_webhook,
    VehicleTypeViewSet, PricingRuleViewSet, DriverViewSet,
)

router = routers.DefaultRouter()
router.register(r"booking-flow", BookingFlowViewSet, basename="booking-flow")
router.register(r"bookings", BookingViewSet, basename="bookings")
router.register(r"vehicle-types", VehicleTypeViewSet, basename="vehicle-types")
router.register(r"pricing-rules", PricingRuleViewSet, basename="pricing-rules")
router.register(r"drivers", DriverViewSet, basename="drivers")

urlpatterns = [
    path('calculate-distance/', calculate_distance, name='calculate-distance'),
    path('calculate-price/', calculate_price, name='calculate-price'),
    path('pricing-rules/available/', available_pricing_rules, name='pricing-rules-available'),
    path('geocode/', geocode, name='geocode'),
    path('flights/search/', flight_search, name='flight-search'),
    path('webhook/stripe/', stripe_webhook, name='stripe-webhook'),
    path('', include(router.urls)),
]
