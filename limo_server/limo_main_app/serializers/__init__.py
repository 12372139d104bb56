"""Serializers package - imports from domain-specific modules"""

# User serializers
from .user_serializers import (
    UserSerializer,
    ProfileSerializer,
)

# Fleet and pricing serializers
from .fleet_serializers import (
    VehicleTypeSerializer,
    PricingRuleSerializer,
    PricingRuleSummarySerializer,
    DriverSerializer,
)

# Quote serializers
from .quote_serializers import (
    LocationSerializer,
    TripParametersSerializer,
    DistanceRequestSerializer,
    FlightSearchSerializer,
    PriceRequestSerializer,
    PriceSerializer,
    VehicleOptionSerializer,
    QuoteSerializer,
)

# Booking flow serializers
from .flow_serializers import (
    PassengerDetailsSerializer,
    PaymentSelectionSerializer,
    SelectVehicleSerializer,
    BookingFlowSerializer,
)

# Booking serializers
from .booking_serializers import (
    BookingSerializer,
    StaffBookingCreateSerializer,
    AssignDriverSerializer,
    BookingActionSerializer,
    DriverPaymentSerializer,
)

__all__ = [
    'UserSerializer',
    'ProfileSerializer',
    'VehicleTypeSerializer',
    'PricingRuleSerializer',
    'PricingRuleSummarySerializer',
    'DriverSerializer',
    'LocationSerializer',
    'TripParametersSerializer',
    'DistanceRequestSerializer',
    'FlightSearchSerializer',
    'PriceRequestSerializer',
    'PriceSerializer',
    'VehicleOptionSerializer',
    'QuoteSerializer',
    'PassengerDetailsSerializer',
    'PaymentSelectionSerializer',
    'SelectVehicleSerializer',
    'BookingFlowSerializer',
    'BookingSerializer',
    'StaffBookingCreateSerializer',
    'AssignDriverSerializer',
    'BookingActionSerializer',
    'DriverPaymentSerializer',
]
