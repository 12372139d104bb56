"""Booking-related serializers"""
from decimal import Decimal

from django.contrib.auth.models import User
from rest_framework import serializers

from ..models import Booking, VehicleType, Driver
from ..permissions import get_role
from ..utils.constants import ServiceType, UserRole, BusinessRules, PaymentMethod
from .fleet_serializers import DriverSerializer
from .flow_serializers import PassengerDetailsSerializer
from .quote_serializers import LocationSerializer, HOURS_ERROR
from .user_serializers import UserSerializer


class BookingSerializer(serializers.ModelSerializer):
    passenger = UserSerializer(read_only=True)
    driver = DriverSerializer(read_only=True)
    vehicle_type = serializers.StringRelatedField()
    remaining_amount = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    # Amounts drivers should not see
    PASSENGER_FINANCIALS = ['total_amount', 'credit_amount_applied', 'remaining_amount', 'payment_intent_id']

    class Meta:
        model = Booking
        fields = [
            'id', 'passenger', 'driver', 'vehicle_type', 'booking_type', 'status',
            'pickup_address', 'pickup_lat', 'pickup_lon',
            'destination_address', 'destination_lat', 'destination_lon', 'via_points',
            'scheduled_date_time', 'estimated_distance', 'estimated_duration', 'requested_hours',
            'total_amount', 'credit_amount_applied', 'remaining_amount', 'driver_payment',
            'payment_method', 'payment_status', 'payment_intent_id',
            'passenger_name', 'passenger_phone', 'passenger_email', 'passenger_count', 'luggage_count',
            'baby_seat', 'flight_info', 'special_instructions', 'bill_reference',
            'assigned_at', 'accepted_at', 'started_at', 'completed_at', 'cancelled_at', 'cancel_reason',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        request = self.context.get('request')
        if request and get_role(request.user) == UserRole.DRIVER:
            for field in self.PASSENGER_FINANCIALS:
                data.pop(field, None)
        return data


class StaffBookingCreateSerializer(serializers.Serializer):
    """Bookings entered by admins and dispatchers on behalf of a passenger"""
    passenger_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), source='passenger')
    vehicle_type = serializers.PrimaryKeyRelatedField(queryset=VehicleType.objects.filter(is_active=True))
    booking_type = serializers.ChoiceField(choices=ServiceType.CHOICES)
    pickup = LocationSerializer()
    destination = LocationSerializer(required=False, allow_null=True)
    via_points = serializers.ListField(child=LocationSerializer(), required=False, default=list, max_length=BusinessRules.MAX_VIA_POINTS)
    scheduled_date_time = serializers.DateTimeField()
    estimated_distance = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, allow_null=True)
    estimated_duration = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    requested_hours = serializers.IntegerField(
        required=False, allow_null=True,
        min_value=BusinessRules.MIN_HOURLY_HOURS, max_value=BusinessRules.MAX_HOURLY_HOURS,
        error_messages={'min_value': HOURS_ERROR, 'max_value': HOURS_ERROR},
    )
    total_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
    passenger_details = PassengerDetailsSerializer()
    payment_method = serializers.ChoiceField(
        choices=[(PaymentMethod.PAY_LATER, 'Pay Later'), (PaymentMethod.CASH, 'Cash')],
        default=PaymentMethod.PAY_LATER,
    )
    driver_id = serializers.PrimaryKeyRelatedField(queryset=Driver.objects.filter(is_active=True), source='driver', required=False, allow_null=True)
    driver_payment = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True)

    def validate(self, data):
        if data['booking_type'] == ServiceType.TRANSFER and not data.get('destination'):
            raise serializers.ValidationError({'destination': 'A destination is required for transfers'})
        if data['booking_type'] == ServiceType.HOURLY and data.get('requested_hours') is None:
            raise serializers.ValidationError({'requested_hours': HOURS_ERROR})
        return data


class AssignDriverSerializer(serializers.Serializer):
    driver_id = serializers.IntegerField()
    driver_payment = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True)


class BookingActionSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class DriverPaymentSerializer(serializers.Serializer):
    driver_payment = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
