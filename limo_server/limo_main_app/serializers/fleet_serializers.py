"""Vehicle type, pricing rule and driver serializers"""
from decimal import Decimal

from rest_framework import serializers

from ..models import VehicleType, PricingRule, Driver
from ..utils.constants import ServiceType
from .user_serializers import UserSerializer


class VehicleTypeSerializer(serializers.ModelSerializer):
    slug = serializers.CharField(read_only=True)

    class Meta:
        model = VehicleType
        fields = ['id', 'name', 'slug', 'description', 'passenger_capacity', 'luggage_capacity', 'hourly_rate', 'image_url', 'is_active']


class DistanceTierSerializer(serializers.Serializer):
    miles = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True)
    rate_per_mile = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
    is_remaining = serializers.BooleanField(default=False)


class AirportFeeSerializer(serializers.Serializer):
    airport_code = serializers.CharField(max_length=10)
    fee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))


class SurgeWindowSerializer(serializers.Serializer):
    day_of_week = serializers.IntegerField(min_value=0, max_value=6)
    start_time = serializers.RegexField(r'^\d{2}:\d{2}$')
    end_time = serializers.RegexField(r'^\d{2}:\d{2}$')
    multiplier = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=Decimal('0'))


class PricingRuleSerializer(serializers.ModelSerializer):
    distance_tiers = DistanceTierSerializer(many=True, required=False)
    airport_fees = AirportFeeSerializer(many=True, required=False)
    surge_pricing = SurgeWindowSerializer(many=True, required=False)

    class Meta:
        model = PricingRule
        fields = [
            'id', 'vehicle_type', 'service_type', 'base_rate', 'per_mile_rate', 'distance_tiers',
            'hourly_rate', 'minimum_hours', 'minimum_fare', 'gratuity_percent', 'airport_fees',
            'meet_and_greet', 'surge_pricing', 'effective_start', 'effective_end', 'is_active',
        ]

    def to_internal_value(self, data):
        validated = super().to_internal_value(data)
        # JSON columns hold plain numbers and strings, not Decimals
        for field in ('distance_tiers', 'airport_fees', 'surge_pricing'):
            if field in validated:
                validated[field] = [
                    {key: str(value) if key in ('miles', 'rate_per_mile', 'fee', 'multiplier') and value is not None else value
                     for key, value in item.items()}
                    for item in validated[field]
                ]
        return validated

    def validate(self, data):
        service_type = data.get('service_type', getattr(self.instance, 'service_type', None))

        def get(field):
            return data.get(field, getattr(self.instance, field, None))

        if service_type == ServiceType.TRANSFER:
            if get('base_rate') is None or not (get('per_mile_rate') is not None or get('distance_tiers')):
                raise serializers.ValidationError('Transfer service requires base_rate and either per_mile_rate or distance tiers')
            tiers = get('distance_tiers') or []
            remaining = [i for i, tier in enumerate(tiers) if tier.get('is_remaining')]
            if len(remaining) > 1 or (remaining and remaining[0] != len(tiers) - 1):
                raise serializers.ValidationError('Remaining tier must be the last tier')
        elif service_type == ServiceType.HOURLY:
            if get('hourly_rate') is None or get('minimum_hours') is None:
                raise serializers.ValidationError('Hourly service requires hourly_rate and minimum_hours')
        return data


class PricingRuleSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = PricingRule
        fields = ['vehicle_type', 'service_type', 'base_rate', 'per_mile_rate', 'hourly_rate', 'minimum_hours', 'minimum_fare']


class DriverSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)
    vehicle_type = serializers.StringRelatedField()

    class Meta:
        model = Driver
        fields = ['id', 'user', 'phone', 'vehicle_type', 'vehicle_plate', 'rating', 'total_rides', 'is_available']
