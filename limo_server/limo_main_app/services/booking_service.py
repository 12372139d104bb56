"""Booking service - creation and the booking lifecycle state machine"""
import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ..models import Booking, BookingDecline, Driver
from ..payment_gateways.credit_payment_gateway import CreditPaymentGateway
from ..payment_gateways.stripe_payment_gateway import StripePaymentGateway
from ..permissions import get_role, is_staff_user
from ..utils.constants import (
    BookingStatus, BookingAction, BOOKING_TRANSITIONS, PaymentMethod, PaymentStatus, UserRole,
)
from .notification_service import NotificationService
from .pricing_service import to_money

logger = logging.getLogger(__name__)


class InvalidTransitionError(Exception):
    """Raised when an action is not allowed from the booking's current status"""
    def __init__(self, action, status):
        self.action = action
        self.status = status
        super().__init__(f'Cannot {action} a booking that is {status}')


class BookingPermissionError(Exception):
    """Raised when the user may not perform the action on this booking"""
    pass


def default_driver_payment(total_amount):
    commission = Decimal(str(settings.SYSTEM_COMMISSION_PERCENTAGE))
    return to_money(Decimal(total_amount) * (Decimal('100') - commission) / Decimal('100'))


class BookingService:
    """Service for booking operations"""

    def __init__(self, notification_service=None):
        self.notifications = notification_service or NotificationService()

    @transaction.atomic
    def create_booking(self, passenger, vehicle_type, trip, total_amount, passenger_details,
                       payment=None, created_by=None, driver=None, driver_payment=None):
        """
        Create a booking and debit any ride credit it uses, in one transaction.

        Args:
            passenger: User who owns the booking
            vehicle_type: VehicleType
            trip: dict with booking_type, pickup/destination (address, lat, lon), via_points,
                  scheduled_date_time, estimated_distance, estimated_duration, requested_hours
            total_amount: final price of the selected vehicle
            passenger_details: dict with name, phone, email, counts and extras
            payment: plan from PaymentService.plan, or None for pay-later bookings made by staff
            driver: optional pre-assigned Driver

        Raises:
            InsufficientCreditError: balance changed since the credit was resolved
        """
        total_amount = to_money(total_amount)
        payment = payment or {
            'method': PaymentMethod.PAY_LATER,
            'credit_amount': Decimal('0.00'),
            'payment_status': PaymentStatus.PENDING,
            'payment_intent_id': None,
        }
        credit_amount = to_money(payment['credit_amount'])
        if credit_amount > total_amount:
            raise ValueError('Credit applied cannot exceed the booking total')

        pickup = trip['pickup']
        destination = trip.get('destination') or {}
        booking = Booking(
            passenger=passenger,
            vehicle_type=vehicle_type,
            booking_type=trip['booking_type'],
            pickup_address=pickup['address'],
            pickup_lat=pickup.get('lat'),
            pickup_lon=pickup.get('lon'),
            destination_address=destination.get('address'),
            destination_lat=destination.get('lat'),
            destination_lon=destination.get('lon'),
            via_points=list(trip.get('via_points') or []),
            scheduled_date_time=trip['scheduled_date_time'],
            estimated_distance=trip.get('estimated_distance'),
            estimated_duration=trip.get('estimated_duration'),
            requested_hours=trip.get('requested_hours'),
            total_amount=total_amount,
            credit_amount_applied=credit_amount,
            payment_method=payment['method'],
            payment_status=payment['payment_status'],
            payment_intent_id=payment.get('payment_intent_id'),
            passenger_name=passenger_details['name'],
            passenger_phone=passenger_details['phone'],
            passenger_email=passenger_details['email'],
            passenger_count=passenger_details.get('passenger_count', 1),
            luggage_count=passenger_details.get('luggage_count', 0),
            baby_seat=passenger_details.get('baby_seat', False),
            flight_info=passenger_details.get('flight_info'),
            special_instructions=passenger_details.get('special_instructions'),
            bill_reference=passenger_details.get('bill_reference'),
            created_by=created_by or passenger,
        )
        if driver:
            booking.driver = driver
            booking.driver_payment = driver_payment if driver_payment is not None else default_driver_payment(total_amount)
            booking.status = BookingStatus.PENDING_DRIVER_ACCEPTANCE
            booking.assigned_at = timezone.now()
        booking.save()

        if credit_amount > 0:
            CreditPaymentGateway().initiate_payment({
                'user': passenger,
                'amount': credit_amount,
                'booking_id': booking.id,
            })

        if driver:
            transaction.on_commit(lambda: self.notifications.send_driver_assignment(booking))

        logger.info(f'[BOOKING] Created booking {booking.id} for {passenger.username}: {total_amount} via {booking.payment_method} ({booking.status})')
        return booking

    def _lock(self, booking_id):
        return Booking.objects.select_for_update().select_related('driver').get(pk=booking_id)

    def _check_transition(self, booking, action):
        sources, target = BOOKING_TRANSITIONS[action]
        if booking.status not in sources:
            logger.info(f'[BOOKING] Rejected {action} on booking {booking.id} ({booking.status})')
            raise InvalidTransitionError(action, booking.status)
        return target

    def _driver_for(self, user):
        driver = Driver.objects.filter(user=user, is_active=True).first() if user else None
        if not driver or get_role(user) != UserRole.DRIVER:
            raise BookingPermissionError('Only drivers can perform this action')
        return driver

    def _ensure_assigned_driver(self, booking, driver):
        if booking.driver_id != driver.id:
            raise BookingPermissionError('This booking is not assigned to you')

    def _ensure_driver_or_staff(self, booking, user):
        if is_staff_user(user):
            return
        if get_role(user) == UserRole.DRIVER and booking.driver and booking.driver.user_id == user.id:
            return
        raise BookingPermissionError('Only the assigned driver or an admin can perform this action')

    @transaction.atomic
    def assign_driver(self, booking_id, driver_id, actor=None, driver_payment=None):
        """Offer a pending booking to a driver. `actor=None` is a system assignment."""
        if actor is not None and not is_staff_user(actor):
            raise BookingPermissionError('Only admins and dispatchers can assign drivers')

        booking = self._lock(booking_id)
        target = self._check_transition(booking, BookingAction.ASSIGN)
        driver = Driver.objects.select_related('user').get(pk=driver_id, is_active=True)

        booking.driver = driver
        booking.driver_payment = to_money(driver_payment) if driver_payment is not None else default_driver_payment(booking.total_amount)
        booking.status = target
        booking.assigned_at = timezone.now()
        booking.save()

        transaction.on_commit(lambda: self.notifications.send_driver_assignment(booking))
        logger.info(f'[BOOKING] Booking {booking.id} assigned to driver {driver.id}, payout {booking.driver_payment}')
        return booking

    @transaction.atomic
    def accept(self, booking_id, user):
        driver = self._driver_for(user)
        booking = self._lock(booking_id)
        target = self._check_transition(booking, BookingAction.ACCEPT)
        self._ensure_assigned_driver(booking, driver)

        booking.status = target
        booking.accepted_at = timezone.now()
        booking.save()

        transaction.on_commit(lambda: self.notifications.send_driver_accepted(booking))
        logger.info(f'[BOOKING] Driver {driver.id} accepted booking {booking.id}')
        return booking

    @transaction.atomic
    def decline(self, booking_id, user, reason=None):
        """Hand the booking back to the pending pool and trigger reassignment after commit"""
        from .reassignment import get_reassignment_policy

        driver = self._driver_for(user)
        booking = self._lock(booking_id)
        target = self._check_transition(booking, BookingAction.DECLINE)
        self._ensure_assigned_driver(booking, driver)

        BookingDecline.objects.create(booking=booking, driver=driver, reason=reason)
        booking.driver = None
        booking.driver_payment = None
        booking.assigned_at = None
        booking.status = target
        booking.save()

        policy = get_reassignment_policy()
        transaction.on_commit(lambda: self.notifications.send_driver_declined(booking, driver, reason))
        transaction.on_commit(lambda: policy.reassign(booking.id))
        logger.info(f'[BOOKING] Driver {driver.id} declined booking {booking.id}')
        return booking

    @transaction.atomic
    def start(self, booking_id, user):
        booking = self._lock(booking_id)
        target = self._check_transition(booking, BookingAction.START)
        self._ensure_driver_or_staff(booking, user)

        booking.status = target
        booking.started_at = timezone.now()
        booking.save()
        logger.info(f'[BOOKING] Booking {booking.id} started')
        return booking

    @transaction.atomic
    def complete(self, booking_id, user):
        booking = self._lock(booking_id)
        target = self._check_transition(booking, BookingAction.COMPLETE)
        self._ensure_driver_or_staff(booking, user)

        booking.status = target
        booking.completed_at = timezone.now()
        booking.save()
        logger.info(f'[BOOKING] Booking {booking.id} completed')
        return booking

    @transaction.atomic
    def cancel(self, booking_id, user, reason=None):
        """Cancel a non-terminal booking and return any ride credit it used"""
        booking = self._lock(booking_id)
        target = self._check_transition(booking, BookingAction.CANCEL)
        if booking.passenger_id != user.id and not is_staff_user(user):
            raise BookingPermissionError('You can only cancel your own bookings')

        booking.status = target
        booking.cancelled_at = timezone.now()
        booking.cancel_reason = reason

        refunded = False
        if booking.credit_amount_applied > 0:
            CreditPaymentGateway().refund({
                'user': booking.passenger,
                'amount': booking.credit_amount_applied,
                'booking_id': booking.id,
            })
            refunded = True

        if (booking.payment_method == PaymentMethod.CARD and booking.payment_status == PaymentStatus.PAID
                and booking.payment_intent_id and booking.remaining_amount > 0):
            StripePaymentGateway().refund({
                'payment_intent_id': booking.payment_intent_id,
                'amount': booking.remaining_amount,
            })
            refunded = True

        if refunded:
            booking.payment_status = PaymentStatus.REFUNDED
        booking.save()
        logger.info(f'[BOOKING] Booking {booking.id} cancelled by {user.username}')
        return booking

    @transaction.atomic
    def update_driver_payment(self, booking_id, actor, amount):
        if not is_staff_user(actor):
            raise BookingPermissionError('Only admins and dispatchers can change driver payments')
        booking = self._lock(booking_id)
        if booking.is_terminal:
            raise InvalidTransitionError('update driver payment for', booking.status)
        booking.driver_payment = to_money(amount)
        booking.save(update_fields=['driver_payment', 'updated_at'])
        logger.info(f'[BOOKING] Booking {booking.id} driver payment set to {booking.driver_payment}')
        return booking

    def bookings_for(self, user):
        """Bookings visible to the user: staff see all, drivers their own rides, passengers their own bookings"""
        qs = Booking.objects.select_related('passenger', 'driver__user', 'vehicle_type')
        role = get_role(user)
        if role in UserRole.STAFF:
            return qs
        if role == UserRole.DRIVER:
            return qs.filter(driver__user=user)
        return qs.filter(passenger=user)

    @transaction.atomic
    def record_payment_result(self, payment_intent_id, succeeded):
        """Apply a Stripe webhook outcome to the booking paid by that PaymentIntent"""
        booking = Booking.objects.select_for_update().filter(payment_intent_id=payment_intent_id).first()
        if not booking:
            logger.info(f'[PAYMENT] No booking for PaymentIntent {payment_intent_id}')
            return None
        if booking.payment_status == PaymentStatus.REFUNDED:
            return booking
        booking.payment_status = PaymentStatus.PAID if succeeded else PaymentStatus.FAILED
        booking.save(update_fields=['payment_status', 'updated_at'])
        logger.info(f'[PAYMENT] Booking {booking.id} payment marked {booking.payment_status}')
        return booking
