"""Models package - domain-based organization"""

# User models
from .user import Profile

# Fleet models
from .fleet import VehicleType, Driver

# Pricing models
from .pricing import PricingRule

# Booking models
from .booking import Booking, BookingDecline

__all__ = [
    'Profile', 'VehicleType', 'Driver', 'PricingRule', 'Booking', 'BookingDecline',
]
