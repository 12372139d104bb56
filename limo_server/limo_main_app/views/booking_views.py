"""Booking-related views using BookingService"""
import logging

import stripe
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST
from rest_framework import mixins, viewsets, status
from rest_framework.decorators import action
from rest_framework.generics import get_object_or_404
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..models import Booking, Driver
from ..payment_gateways.stripe_payment_gateway import StripePaymentGateway
from ..permissions import IsAdminOrDispatcher, is_staff_user
from ..serializers import (
    BookingSerializer, StaffBookingCreateSerializer, AssignDriverSerializer,
    BookingActionSerializer, DriverPaymentSerializer,
)
from ..services import (
    BookingService, InvalidTransitionError, BookingPermissionError, PaymentError, InsufficientCreditError,
)
from ..utils.constants import PaymentStatus
from .responses import error_response

logger = logging.getLogger(__name__)


class BookingViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    authentication_classes = [JWTAuthentication]
    permission_classes = [IsAuthenticated]
    serializer_class = BookingSerializer

    def get_queryset(self):
        qs = BookingService().bookings_for(self.request.user)
        status_filter = self.request.query_params.get('status')
        if status_filter:
            qs = qs.filter(status=status_filter)
        return qs

    def create(self, request, *args, **kwargs):
        """Staff-entered bookings; passengers book through the booking flow"""
        if not is_staff_user(request.user):
            return error_response('FORBIDDEN', 'Passengers book through the booking flow', status.HTTP_403_FORBIDDEN)

        serializer = StaffBookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = BookingService().create_booking(
            passenger=data['passenger'],
            vehicle_type=data['vehicle_type'],
            trip={
                'booking_type': data['booking_type'],
                'pickup': data['pickup'],
                'destination': data.get('destination'),
                'via_points': data.get('via_points', []),
                'scheduled_date_time': data['scheduled_date_time'],
                'estimated_distance': data.get('estimated_distance'),
                'estimated_duration': data.get('estimated_duration'),
                'requested_hours': data.get('requested_hours'),
            },
            total_amount=data['total_amount'],
            passenger_details=data['passenger_details'],
            payment={
                'method': data['payment_method'],
                'credit_amount': 0,
                'payment_status': PaymentStatus.PENDING,
                'payment_intent_id': None,
            },
            created_by=request.user,
            driver=data.get('driver'),
            driver_payment=data.get('driver_payment'),
        )
        return Response(self.get_serializer(booking).data, status=status.HTTP_201_CREATED)

    def _perform(self, operation):
        """Run a lifecycle operation and map service errors to responses; the service checks who may act"""
        try:
            booking = operation()
        except InvalidTransitionError as e:
            return error_response('INVALID_TRANSITION', str(e), status.HTTP_400_BAD_REQUEST, status=e.status)
        except BookingPermissionError as e:
            return error_response('FORBIDDEN', str(e), status.HTTP_403_FORBIDDEN)
        except Driver.DoesNotExist:
            return error_response('NOT_FOUND', 'Driver not found', status.HTTP_404_NOT_FOUND)
        except InsufficientCreditError as e:
            return error_response('INSUFFICIENT_CREDIT', str(e), status.HTTP_400_BAD_REQUEST)
        except PaymentError as e:
            return error_response('PAYMENT_FAILED', str(e), status.HTTP_402_PAYMENT_REQUIRED)
        return Response(self.get_serializer(booking).data)

    @action(detail=True, methods=['POST'], url_path='assign-driver', permission_classes=[IsAuthenticated, IsAdminOrDispatcher])
    def assign_driver(self, request, pk=None):
        booking = get_object_or_404(Booking, pk=pk)
        serializer = AssignDriverSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._perform(lambda: BookingService().assign_driver(
            booking.id,
            serializer.validated_data['driver_id'],
            actor=request.user,
            driver_payment=serializer.validated_data.get('driver_payment'),
        ))

    @action(detail=True, methods=['POST'])
    def accept(self, request, pk=None):
        booking = get_object_or_404(Booking, pk=pk)
        return self._perform(lambda: BookingService().accept(booking.id, request.user))

    @action(detail=True, methods=['POST'])
    def decline(self, request, pk=None):
        booking = get_object_or_404(Booking, pk=pk)
        serializer = BookingActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._perform(lambda: BookingService().decline(booking.id, request.user, reason=serializer.validated_data.get('reason')))

    @action(detail=True, methods=['POST'])
    def start(self, request, pk=None):
        booking = get_object_or_404(Booking, pk=pk)
        return self._perform(lambda: BookingService().start(booking.id, request.user))

    @action(detail=True, methods=['POST'])
    def complete(self, request, pk=None):
        booking = get_object_or_404(Booking, pk=pk)
        return self._perform(lambda: BookingService().complete(booking.id, request.user))

    @action(detail=True, methods=['POST'])
    def cancel(self, request, pk=None):
        booking = get_object_or_404(Booking, pk=pk)
        serializer = BookingActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._perform(lambda: BookingService().cancel(booking.id, request.user, reason=serializer.validated_data.get('reason')))

    @action(detail=True, methods=['PATCH'], url_path='driver-payment', permission_classes=[IsAuthenticated, IsAdminOrDispatcher])
    def driver_payment(self, request, pk=None):
        booking = get_object_or_404(Booking, pk=pk)
        serializer = DriverPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._perform(lambda: BookingService().update_driver_payment(
            booking.id, request.user, serializer.validated_data['driver_payment'],
        ))


@csrf_exempt
@require_POST
def stripe_webhook(request):
    payload = request.body
    sig_header = request.META.get('HTTP_STRIPE_SIGNATURE', '')

    try:
        event = StripePaymentGateway().construct_event(payload, sig_header)
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except stripe.SignatureVerificationError as e:
        return JsonResponse({'error': str(e)}, status=400)

    if event['type'] == 'payment_intent.succeeded':
        BookingService().record_payment_result(event['data']['object']['id'], succeeded=True)
    elif event['type'] == 'payment_intent.payment_failed':
        BookingService().record_payment_result(event['data']['object']['id'], succeeded=False)

    return JsonResponse({'status': 'success'}, status=200)
