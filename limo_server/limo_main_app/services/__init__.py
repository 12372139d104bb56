"""Services package - business logic layer"""

from credits.ledger import InsufficientCreditError
from ..payment_gateways.payment_gateway import PaymentError
from .pricing_service import PricingService, PricingRuleNotFound, PriceCalculationError
from .distance_service import DistanceService, DistanceLookupError
from .flight_service import FlightService, FlightLookupError, FlightLookupTimeout
from .quote_service import QuoteService, QuoteValidationError, PricingConfigurationError
from .notification_service import NotificationService
from .payment_service import PaymentService
from .booking_service import BookingService, InvalidTransitionError, BookingPermissionError
from .booking_flow import BookingFlow, BookingFlowStore, AuthenticationRequired, FlowStateError
from .reassignment import (
    get_reassignment_policy, ReassignmentPolicy, DispatcherQueuePolicy, NearestAvailableDriverPolicy,
)

__all__ = [
    'InsufficientCreditError',
    'PaymentError',
    'PricingService',
    'PricingRuleNotFound',
    'PriceCalculationError',
    'DistanceService',
    'DistanceLookupError',
    'FlightService',
    'FlightLookupError',
    'FlightLookupTimeout',
    'QuoteService',
    'QuoteValidationError',
    'PricingConfigurationError',
    'NotificationService',
    'PaymentService',
    'BookingService',
    'InvalidTransitionError',
    'BookingPermissionError',
    'BookingFlow',
    'BookingFlowStore',
    'AuthenticationRequired',
    'FlowStateError',
    'get_reassignment_policy',
    'ReassignmentPolicy',
    'DispatcherQueuePolicy',
    'NearestAvailableDriverPolicy',
]
