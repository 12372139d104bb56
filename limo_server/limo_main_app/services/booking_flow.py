"""
Booking flow - the four-step quote, vehicle, passenger and payment state machine.

The flow is a plain object mutated only through its transitions. It is
serialised to a dict and kept in the Django cache between requests, so an
anonymous visitor can be sent to log in at the vehicle step and resume the
exact same flow afterwards.
"""
import copy
import logging
import uuid
from datetime import datetime
from decimal import Decimal

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from ..payment_gateways.payment_gateway import PaymentError
from ..serializers.flow_serializers import PassengerDetailsSerializer, PaymentSelectionSerializer
from ..utils.cache_keys import CacheKeys
from ..utils.constants import FlowStep, PaymentMethod, ServiceType
from .booking_service import BookingService
from .payment_service import PaymentService
from .quote_service import QuoteService

logger = logging.getLogger(__name__)


class AuthenticationRequired(Exception):
    """Raised when an anonymous user tries to go past vehicle selection"""
    def __init__(self, flow_id, step):
        super().__init__('Please log in to continue your booking')
        self.flow_id = flow_id
        self.step = step


class FlowStateError(Exception):
    """Raised when a transition is not possible from the flow's current state"""
    pass


class BookingFlow:
    FIELDS = ('flow_id', 'step', 'user_id', 'trip', 'quote', 'selected_vehicle',
              'passenger', 'payment_error', 'booking_id')

    def __init__(self, flow_id=None, step=FlowStep.TRIP_DETAILS, user_id=None, trip=None, quote=None,
                 selected_vehicle=None, passenger=None, payment_error=None, booking_id=None):
        self.flow_id = flow_id or uuid.uuid4().hex
        self.step = step
        self.user_id = user_id
        self.trip = trip
        self.quote = quote
        self.selected_vehicle = selected_vehicle
        self.passenger = passenger
        self.payment_error = payment_error
        self.booking_id = booking_id

    def to_dict(self):
        return copy.deepcopy({field: getattr(self, field) for field in self.FIELDS})

    @classmethod
    def from_dict(cls, data):
        return cls(**{field: copy.deepcopy(data.get(field)) for field in cls.FIELDS if field in data})

    @property
    def is_complete(self):
        return self.booking_id is not None

    def _ensure_open(self):
        if self.is_complete:
            raise FlowStateError('This booking has already been placed')

    def _require_step(self, step):
        if self.step < step:
            raise FlowStateError(f'Complete step {self.step} first')

    def _bind_user(self, user):
        if self.user_id is not None and self.user_id != user.id:
            raise FlowStateError('This booking belongs to another account')
        self.user_id = user.id

    def _require_user(self, user):
        if not user or not user.is_authenticated:
            raise AuthenticationRequired(self.flow_id, self.step)
        self._bind_user(user)

    def selected_price(self):
        return self.quote['prices'][self.selected_vehicle]

    # Step 1 -> 2
    def request_quote(self, trip_data, user=None, quote_service=None):
        """Start over from the trip details; the previous quote and selection are dropped"""
        self._ensure_open()
        quote_service = quote_service or QuoteService()

        self.step = FlowStep.TRIP_DETAILS
        self.trip = dict(trip_data)
        self.quote = None
        self.selected_vehicle = None
        self.payment_error = None

        user = user if user and user.is_authenticated else None
        self.quote = quote_service.get_quote(self.trip, user=user)
        self.step = FlowStep.VEHICLE_SELECTION
        logger.info(f'[FLOW] {self.flow_id} quoted {len(self.quote["prices"])} vehicles')
        return self.quote

    # Step 2 -> 3
    def select_vehicle(self, vehicle_slug, user=None):
        self._ensure_open()
        self._require_step(FlowStep.VEHICLE_SELECTION)
        if not self.quote or vehicle_slug not in self.quote['prices']:
            raise FlowStateError('Please choose one of the quoted vehicles')

        self.selected_vehicle = vehicle_slug
        self.step = FlowStep.VEHICLE_SELECTION
        self._require_user(user)
        self.step = FlowStep.PASSENGER_DETAILS
        return self.selected_price()

    # Step 3 -> 4
    def submit_passenger_details(self, details, user=None):
        self._ensure_open()
        self._require_step(FlowStep.PASSENGER_DETAILS)
        self._require_user(user)

        self.step = FlowStep.PASSENGER_DETAILS
        serializer = PassengerDetailsSerializer(data=details)
        serializer.is_valid(raise_exception=True)
        self.passenger = dict(serializer.data)
        self.step = FlowStep.PAYMENT
        return self.passenger

    def prepare_card_payment(self, user, credit_amount=None, payment_service=None):
        """Create the PaymentIntent for whatever the card has to cover"""
        self._ensure_open()
        self._require_step(FlowStep.PAYMENT)
        self._require_user(user)
        payment_service = payment_service or PaymentService()

        total = Decimal(self.selected_price()['final_price'])
        credit = payment_service.resolve_credit(user, total, PaymentMethod.CARD, credit_amount)
        return payment_service.create_payment_intent(
            user, total - credit, metadata={'flow_id': self.flow_id},
        )

    # Step 4 -> done
    def finalize(self, payment_data, user=None, payment_service=None, booking_service=None, quote_service=None):
        """
        Take payment and create the booking.

        A card payment is verified before the booking exists; any payment failure
        keeps the flow on step 4 with the error recorded and no booking created.
        """
        self._ensure_open()
        self._require_step(FlowStep.PAYMENT)
        self._require_user(user)
        payment_service = payment_service or PaymentService()
        booking_service = booking_service or BookingService()
        quote_service = quote_service or QuoteService()

        selection = PaymentSelectionSerializer(data=payment_data)
        selection.is_valid(raise_exception=True)
        selection = selection.validated_data

        vehicle_type = quote_service.vehicle_type_for_slug(self.selected_vehicle)
        if vehicle_type is None:
            raise FlowStateError('The selected vehicle is no longer available')

        total = Decimal(self.selected_price()['final_price'])
        try:
            plan = payment_service.plan(
                user, total, selection['method'],
                credit_amount=selection.get('credit_amount'),
                payment_intent_id=selection.get('payment_intent_id') or None,
                payment_metadata={'flow_id': self.flow_id},
            )
        except PaymentError as e:
            self.payment_error = str(e)
            logger.warning(f'[FLOW] {self.flow_id} payment failed: {e}')
            raise

        try:
            booking = booking_service.create_booking(
                passenger=user,
                vehicle_type=vehicle_type,
                trip=self._booking_trip(quote_service),
                total_amount=total,
                passenger_details=self.passenger,
                payment=plan,
            )
        except Exception as e:
            # The card may already be charged; give it back before surfacing the error
            self.payment_error = f'Your booking could not be completed: {e}'
            logger.error(f'[FLOW] {self.flow_id} booking failed after payment: {e}')
            try:
                payment_service.refund_card_payment(plan)
            except PaymentError as refund_error:
                logger.error(f'[FLOW] {self.flow_id} refund of {plan["payment_intent_id"]} failed: {refund_error}')
            raise
        self.payment_error = None
        self.booking_id = booking.id
        logger.info(f'[FLOW] {self.flow_id} finished with booking {booking.id}')
        return booking

    def back(self):
        self._ensure_open()
        self.step = max(FlowStep.TRIP_DETAILS, self.step - 1)
        return self.step

    def _booking_trip(self, quote_service):
        trip = quote_service.validate_trip(self.trip)
        scheduled = datetime.strptime(f"{self.quote['date']} {self.quote['time']}", '%Y-%m-%d %H:%M')
        if settings.USE_TZ:
            scheduled = timezone.make_aware(scheduled)

        is_transfer = trip['service_type'] == ServiceType.TRANSFER
        return {
            'booking_type': trip['service_type'],
            'pickup': dict(trip['pickup']),
            'destination': dict(trip['destination']) if is_transfer else None,
            'via_points': [dict(point) for point in trip.get('via_points', [])],
            'scheduled_date_time': scheduled,
            'estimated_distance': self.quote['distance_miles'],
            'estimated_duration': self.quote['duration_minutes'],
            'requested_hours': self.quote['hours'],
        }


class BookingFlowStore:
    """Keeps booking flows in the cache, keyed by flow id"""

    def __init__(self, timeout=None):
        self.timeout = timeout or settings.BOOKING_FLOW_TTL_SECONDS

    def create(self, user=None):
        flow = BookingFlow(user_id=user.id if user and user.is_authenticated else None)
        self.save(flow)
        return flow

    def load(self, flow_id):
        data = cache.get(CacheKeys.booking_flow(flow_id))
        return BookingFlow.from_dict(data) if data else None

    def save(self, flow):
        cache.set(CacheKeys.booking_flow(flow.flow_id), flow.to_dict(), timeout=self.timeout)

    def delete(self, flow_id):
        cache.delete(CacheKeys.booking_flow(flow_id))
