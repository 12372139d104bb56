"""Serializers for the booking flow steps"""
from decimal import Decimal

from django.core.validators import RegexValidator
from rest_framework import serializers

from ..utils.constants import PaymentMethod, BusinessRules
from .quote_serializers import QuoteSerializer, VehicleOptionSerializer


class FlightInfoSerializer(serializers.Serializer):
    flight_number = serializers.CharField(max_length=20)
    airline = serializers.CharField(max_length=100, required=False, allow_blank=True)
    departure_airport = serializers.CharField(max_length=100, required=False, allow_blank=True)
    arrival_airport = serializers.CharField(max_length=100, required=False, allow_blank=True)
    scheduled_arrival = serializers.CharField(max_length=40, required=False, allow_blank=True)
    status = serializers.CharField(max_length=40, required=False, allow_blank=True)


class PassengerDetailsSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    phone = serializers.CharField(max_length=20)
    email = serializers.CharField(
        max_length=254,
        validators=[RegexValidator(BusinessRules.EMAIL_PATTERN, message='Enter a valid email address')],
    )
    passenger_count = serializers.IntegerField(min_value=BusinessRules.MIN_PASSENGER_COUNT, default=1)
    luggage_count = serializers.IntegerField(min_value=0, default=0)
    baby_seat = serializers.BooleanField(default=False)
    flight_info = FlightInfoSerializer(required=False, allow_null=True)
    bill_reference = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    special_instructions = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class PaymentSelectionSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=PaymentMethod.CHOICES)
    credit_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True)
    payment_intent_id = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)


class SelectVehicleSerializer(serializers.Serializer):
    vehicle_type = serializers.CharField(max_length=50)


class BookingFlowSerializer(serializers.Serializer):
    """Read-only view of a booking flow for the client"""
    flow_id = serializers.CharField()
    step = serializers.IntegerField()
    trip = serializers.DictField(allow_null=True)
    quote = QuoteSerializer(allow_null=True)
    vehicle_options = VehicleOptionSerializer(many=True)
    selected_vehicle = serializers.CharField(allow_null=True)
    passenger = serializers.DictField(allow_null=True)
    payment_error = serializers.CharField(allow_null=True)
    booking_id = serializers.IntegerField(allow_null=True)
