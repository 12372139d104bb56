"""Booking-related models"""
from decimal import Decimal

from django.db import models
from django.contrib.auth.models import User

from ..utils.constants import BookingStatus, ServiceType, PaymentMethod, PaymentStatus


class Booking(models.Model):
    passenger = models.ForeignKey(User, on_delete=models.CASCADE, related_name='bookings')
    driver = models.ForeignKey('Driver', on_delete=models.SET_NULL, null=True, blank=True, related_name='bookings')
    vehicle_type = models.ForeignKey('VehicleType', on_delete=models.PROTECT, related_name='bookings')
    booking_type = models.CharField(max_length=20, choices=ServiceType.CHOICES)
    status = models.CharField(max_length=32, choices=BookingStatus.CHOICES, default=BookingStatus.PENDING, db_index=True)

    # Trip details
    pickup_address = models.TextField()
    pickup_lat = models.DecimalField(max_digits=10, decimal_places=7, null=True, blank=True)
    pickup_lon = models.DecimalField(max_digits=10, decimal_places=7, null=True, blank=True)
    destination_address = models.TextField(null=True, blank=True)
    destination_lat = models.DecimalField(max_digits=10, decimal_places=7, null=True, blank=True)
    destination_lon = models.DecimalField(max_digits=10, decimal_places=7, null=True, blank=True)
    via_points = models.JSONField(default=list, blank=True)

    # Scheduling
    scheduled_date_time = models.DateTimeField()
    estimated_distance = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    estimated_duration = models.PositiveIntegerField(null=True, blank=True)
    requested_hours = models.PositiveIntegerField(null=True, blank=True)

    # Pricing
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    credit_amount_applied = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    driver_payment = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    # Payment
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.CHOICES, default=PaymentMethod.CARD)
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.CHOICES, default=PaymentStatus.PENDING)
    payment_intent_id = models.CharField(max_length=64, null=True, blank=True, unique=True)

    # Passenger (may differ from the account holder)
    passenger_name = models.CharField(max_length=100)
    passenger_phone = models.CharField(max_length=20)
    passenger_email = models.EmailField()
    passenger_count = models.PositiveIntegerField(default=1)
    luggage_count = models.PositiveIntegerField(default=0)
    baby_seat = models.BooleanField(default=False)
    flight_info = models.JSONField(null=True, blank=True)
    special_instructions = models.TextField(null=True, blank=True)
    bill_reference = models.CharField(max_length=100, null=True, blank=True)

    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, related_name='created_bookings', null=True, blank=True)
    assigned_at = models.DateTimeField(null=True, blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-scheduled_date_time']
        indexes = [
            models.Index(fields=['passenger', '-created_at'], name='booking_passenger_created_idx'),
            models.Index(fields=['driver', 'status'], name='booking_driver_status_idx'),
        ]

    def __str__(self):
        return f"Booking #{self.id} {self.booking_type} for {self.passenger.username} ({self.status})"

    @property
    def remaining_amount(self):
        return (self.total_amount or Decimal('0')) - (self.credit_amount_applied or Decimal('0'))

    @property
    def is_terminal(self):
        return self.status in BookingStatus.TERMINAL


class BookingDecline(models.Model):
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='declines')
    driver = models.ForeignKey('Driver', on_delete=models.CASCADE, related_name='declines')
    reason = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.driver} declined booking #{self.booking_id}"
