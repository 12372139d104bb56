"""Centralized constants and business rules"""

class UserRole:
    PASSENGER = 'passenger'
    DRIVER = 'driver'
    DISPATCHER = 'dispatcher'
    ADMIN = 'admin'

    CHOICES = [
        (PASSENGER, 'Passenger'),
        (DRIVER, 'Driver'),
        (DISPATCHER, 'Dispatcher'),
        (ADMIN, 'Admin'),
    ]

    STAFF = [DISPATCHER, ADMIN]

class ServiceType:
    TRANSFER = 'transfer'
    HOURLY = 'hourly'

    CHOICES = [
        (TRANSFER, 'Transfer'),
        (HOURLY, 'Hourly'),
    ]

class BookingStatus:
    PENDING = 'pending'
    PENDING_DRIVER_ACCEPTANCE = 'pending_driver_acceptance'
    CONFIRMED = 'confirmed'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    CHOICES = [
        (PENDING, 'Pending'),
        (PENDING_DRIVER_ACCEPTANCE, 'Pending Driver Acceptance'),
        (CONFIRMED, 'Confirmed'),
        (IN_PROGRESS, 'In Progress'),
        (COMPLETED, 'Completed'),
        (CANCELLED, 'Cancelled'),
    ]

    TERMINAL = [COMPLETED, CANCELLED]

class BookingAction:
    ASSIGN = 'assign'
    ACCEPT = 'accept'
    DECLINE = 'decline'
    START = 'start'
    COMPLETE = 'complete'
    CANCEL = 'cancel'

# action -> (allowed source states, target state)
BOOKING_TRANSITIONS = {
    BookingAction.ASSIGN: ([BookingStatus.PENDING], BookingStatus.PENDING_DRIVER_ACCEPTANCE),
    BookingAction.ACCEPT: ([BookingStatus.PENDING_DRIVER_ACCEPTANCE], BookingStatus.CONFIRMED),
    BookingAction.DECLINE: ([BookingStatus.PENDING_DRIVER_ACCEPTANCE], BookingStatus.PENDING),
    BookingAction.START: ([BookingStatus.CONFIRMED], BookingStatus.IN_PROGRESS),
    BookingAction.COMPLETE: ([BookingStatus.IN_PROGRESS], BookingStatus.COMPLETED),
    BookingAction.CANCEL: (
        [
            BookingStatus.PENDING,
            BookingStatus.PENDING_DRIVER_ACCEPTANCE,
            BookingStatus.CONFIRMED,
            BookingStatus.IN_PROGRESS,
        ],
        BookingStatus.CANCELLED,
    ),
}

class PaymentMethod:
    CARD = 'card'
    PAY_LATER = 'pay_later'
    CASH = 'cash'
    CREDIT = 'credit'

    CHOICES = [
        (CARD, 'Card (Pay Now)'),
        (PAY_LATER, 'Pay Later'),
        (CASH, 'Cash'),
        (CREDIT, 'Ride Credit'),
    ]

class PaymentStatus:
    PENDING = 'pending'
    PAID = 'paid'
    FAILED = 'failed'
    REFUNDED = 'refunded'

    CHOICES = [
        (PENDING, 'Pending'),
        (PAID, 'Paid'),
        (FAILED, 'Failed'),
        (REFUNDED, 'Refunded'),
    ]

class DiscountType:
    PERCENTAGE = 'percentage'
    FIXED = 'fixed'

    CHOICES = [
        (PERCENTAGE, 'Percentage'),
        (FIXED, 'Fixed Amount'),
    ]

class FlowStep:
    TRIP_DETAILS = 1
    VEHICLE_SELECTION = 2
    PASSENGER_DETAILS = 3
    PAYMENT = 4

class BusinessRules:
    """Business rules and limits"""
    MIN_HOURLY_HOURS = 2
    MAX_HOURLY_HOURS = 24
    MAX_VIA_POINTS = 3
    MIN_PASSENGER_COUNT = 1
    DEFAULT_GRATUITY_PERCENT = 20
    DEFAULT_COMMISSION_PERCENT = 30
    METERS_PER_MILE = 1609.344
    EMAIL_PATTERN = r'^[^\s@]+@[^\s@]+\.[^\s@]+$'
    MAX_REASSIGN_DISTANCE_KM = 80
