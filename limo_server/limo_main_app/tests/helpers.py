"""Shared fixtures for the booking tests"""
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth.models import User
from django.utils import timezone

from ..models import Profile, VehicleType, Driver, PricingRule, Booking
from ..utils.constants import UserRole, ServiceType, BookingStatus


def make_user(username, role=UserRole.PASSENGER, **profile_fields):
    user = User.objects.create_user(username, email=f'{username}@example.com', password='secret-pass-123')
    Profile.objects.filter(user=user).update(role=role, **profile_fields)
    return User.objects.get(pk=user.pk)


def make_driver(username, vehicle_type=None, **fields):
    user = make_user(username, role=UserRole.DRIVER)
    fields.setdefault('phone', '+15550001111')
    return Driver.objects.create(user=user, vehicle_type=vehicle_type, **fields)


def make_fleet():
    """Business Sedan and Business SUV with transfer and hourly rules"""
    sedan = VehicleType.objects.create(name='Business Sedan', passenger_capacity=3, luggage_capacity='2 large', hourly_rate=Decimal('75.00'))
    suv = VehicleType.objects.create(name='Business SUV', passenger_capacity=6, luggage_capacity='4 large', hourly_rate=Decimal('95.00'))

    PricingRule.objects.create(vehicle_type='business_sedan', service_type=ServiceType.TRANSFER,
                               base_rate=Decimal('45.00'), per_mile_rate=Decimal('3.50'), minimum_fare=Decimal('75.00'))
    PricingRule.objects.create(vehicle_type='business_suv', service_type=ServiceType.TRANSFER,
                               base_rate=Decimal('55.00'), per_mile_rate=Decimal('4.50'), minimum_fare=Decimal('95.00'))
    PricingRule.objects.create(vehicle_type='business_sedan', service_type=ServiceType.HOURLY,
                               hourly_rate=Decimal('75.00'), minimum_hours=3, minimum_fare=Decimal('225.00'))
    PricingRule.objects.create(vehicle_type='business_suv', service_type=ServiceType.HOURLY,
                               hourly_rate=Decimal('95.00'), minimum_hours=3, minimum_fare=Decimal('285.00'))
    return sedan, suv


def trip_data(service_type=ServiceType.TRANSFER, **overrides):
    data = {
        'service_type': service_type,
        'pickup': {'address': 'JFK Airport, Queens, NY', 'lat': 40.6413, 'lon': -73.7781},
        'date': (timezone.now() + timedelta(days=3)).date().isoformat(),
        'time': '09:30',
    }
    if service_type == ServiceType.TRANSFER:
        data['destination'] = {'address': 'Times Square, New York, NY', 'lat': 40.758, 'lon': -73.9855}
    else:
        data['hours'] = 4
    data.update(overrides)
    return data


def passenger_details(**overrides):
    data = {
        'name': 'Jordan Smith',
        'phone': '+15551234567',
        'email': 'jordan@example.com',
        'passenger_count': 2,
        'luggage_count': 1,
        'baby_seat': False,
    }
    data.update(overrides)
    return data


def make_booking(passenger, vehicle_type, status=BookingStatus.PENDING, driver=None, **fields):
    defaults = {
        'booking_type': ServiceType.TRANSFER,
        'pickup_address': 'JFK Airport, Queens, NY',
        'pickup_lat': Decimal('40.6413000'),
        'pickup_lon': Decimal('-73.7781000'),
        'destination_address': 'Times Square, New York, NY',
        'scheduled_date_time': timezone.now() + timedelta(days=3),
        'total_amount': Decimal('100.00'),
        'passenger_name': 'Jordan Smith',
        'passenger_phone': '+15551234567',
        'passenger_email': 'jordan@example.com',
    }
    defaults.update(fields)
    return Booking.objects.create(passenger=passenger, vehicle_type=vehicle_type, status=status, driver=driver, **defaults)
