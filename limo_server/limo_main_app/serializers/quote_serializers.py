"""Serializers for trip parameters, quotes and price lookups"""
from decimal import Decimal

from django.core.validators import RegexValidator
from rest_framework import serializers

from ..utils.constants import ServiceType, BusinessRules


HOURS_ERROR = f'Hourly bookings must be between {BusinessRules.MIN_HOURLY_HOURS} and {BusinessRules.MAX_HOURLY_HOURS} hours'
UNRESOLVED_ADDRESS_ERROR = 'Please select a valid address from the suggestions'


class LocationSerializer(serializers.Serializer):
    address = serializers.CharField(max_length=500)
    lat = serializers.FloatField(min_value=-90, max_value=90, error_messages={'required': UNRESOLVED_ADDRESS_ERROR, 'null': UNRESOLVED_ADDRESS_ERROR})
    lon = serializers.FloatField(min_value=-180, max_value=180, error_messages={'required': UNRESOLVED_ADDRESS_ERROR, 'null': UNRESOLVED_ADDRESS_ERROR})


class TripParametersSerializer(serializers.Serializer):
    service_type = serializers.ChoiceField(choices=ServiceType.CHOICES)
    pickup = LocationSerializer()
    destination = LocationSerializer(required=False, allow_null=True)
    via_points = serializers.ListField(
        child=LocationSerializer(), required=False, default=list,
        max_length=BusinessRules.MAX_VIA_POINTS,
    )
    date = serializers.DateField()
    time = serializers.TimeField(format='%H:%M')
    hours = serializers.IntegerField(
        required=False, allow_null=True,
        min_value=BusinessRules.MIN_HOURLY_HOURS, max_value=BusinessRules.MAX_HOURLY_HOURS,
        error_messages={'min_value': HOURS_ERROR, 'max_value': HOURS_ERROR},
    )
    airport_code = serializers.CharField(max_length=10, required=False, allow_blank=True, allow_null=True)

    def validate(self, data):
        if data['service_type'] == ServiceType.TRANSFER:
            if not data.get('destination'):
                raise serializers.ValidationError({'destination': 'A destination is required for transfers'})
            data['hours'] = None
        else:
            if data.get('hours') is None:
                raise serializers.ValidationError({'hours': HOURS_ERROR})
        return data


class DistanceRequestSerializer(serializers.Serializer):
    origins = serializers.CharField()
    destinations = serializers.CharField()

    def _parse(self, value):
        try:
            lat, lon = [float(part) for part in value.split(',')]
        except ValueError:
            raise serializers.ValidationError('Coordinates must be given as "lat,lon"')
        if not (-90 <= lat <= 90 and -180 <= lon <= 180):
            raise serializers.ValidationError('Coordinates are out of range')
        return (lat, lon)

    def validate_origins(self, value):
        return self._parse(value)

    def validate_destinations(self, value):
        return self._parse(value)


class FlightSearchSerializer(serializers.Serializer):
    flight_number = serializers.CharField(
        max_length=10,
        validators=[RegexValidator(r'^[A-Za-z0-9 ]+$', message='Enter a flight number such as BA 117')],
    )
    date = serializers.DateField(required=False, allow_null=True)


class PriceRequestSerializer(serializers.Serializer):
    vehicle_type = serializers.CharField(max_length=50)
    service_type = serializers.ChoiceField(choices=ServiceType.CHOICES)
    distance = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True)
    hours = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    date = serializers.DateField(required=False, allow_null=True)
    time = serializers.TimeField(format='%H:%M', required=False, allow_null=True)
    airport_code = serializers.CharField(max_length=10, required=False, allow_blank=True, allow_null=True)
    user_id = serializers.IntegerField(required=False, allow_null=True)

    def validate(self, data):
        if data['service_type'] == ServiceType.TRANSFER and data.get('distance') is None:
            raise serializers.ValidationError({'distance': 'distance is required for transfer service'})
        if data['service_type'] == ServiceType.HOURLY and data.get('hours') is None:
            raise serializers.ValidationError({'hours': 'hours is required for hourly service'})
        return data


class PriceBreakdownSerializer(serializers.Serializer):
    base_fare = serializers.DecimalField(max_digits=10, decimal_places=2)
    gratuity = serializers.DecimalField(max_digits=10, decimal_places=2)
    airport_fee = serializers.DecimalField(max_digits=10, decimal_places=2)
    meet_and_greet = serializers.DecimalField(max_digits=10, decimal_places=2)
    surge_multiplier = serializers.DecimalField(max_digits=5, decimal_places=2)


class PriceSerializer(serializers.Serializer):
    vehicle_type = serializers.CharField()
    service_type = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, source='final_price')
    regular_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    discount_amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    final_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    breakdown = PriceBreakdownSerializer()


class VehicleOptionSerializer(serializers.Serializer):
    """
    One vehicle card in the quote.

    Cards without a discount carry the plain price only; discounted cards
    carry regular price, discount and final price so the client can show
    the strike-through.
    """
    slug = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()
    passenger_capacity = serializers.IntegerField()
    luggage_capacity = serializers.CharField()
    image_url = serializers.CharField(allow_null=True)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        discount_amount = Decimal(str(instance['discount_amount']))
        data['price'] = str(instance['final_price'])
        data['has_discount'] = discount_amount > 0
        if data['has_discount']:
            data['regular_price'] = str(instance['regular_price'])
            data['discount_amount'] = str(instance['discount_amount'])
            data['final_price'] = str(instance['final_price'])
        return data


class QuoteSerializer(serializers.Serializer):
    service_type = serializers.CharField()
    distance_miles = serializers.CharField(allow_null=True)
    duration_minutes = serializers.IntegerField(allow_null=True)
    hours = serializers.IntegerField(allow_null=True)
    date = serializers.CharField()
    time = serializers.CharField()
