"""Fleet-related models (VehicleType, Driver)"""
from django.db import models
from django.contrib.auth.models import User

from ..utils.slugs import vehicle_slug


class VehicleType(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, default='')
    passenger_capacity = models.PositiveIntegerField()
    luggage_capacity = models.CharField(max_length=50, blank=True, default='')
    hourly_rate = models.DecimalField(max_digits=10, decimal_places=2)
    image_url = models.URLField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def slug(self):
        return vehicle_slug(self.name)


class Driver(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='driver')
    phone = models.CharField(max_length=20, null=True, blank=True)
    license_number = models.CharField(max_length=32, null=True, blank=True)
    vehicle_type = models.ForeignKey(VehicleType, on_delete=models.SET_NULL, null=True, blank=True, related_name='drivers')
    vehicle_plate = models.CharField(max_length=16, null=True, blank=True)
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=0)
    total_rides = models.PositiveIntegerField(default=0)
    is_available = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    current_lat = models.DecimalField(max_digits=10, decimal_places=7, null=True, blank=True)
    current_lon = models.DecimalField(max_digits=10, decimal_places=7, null=True, blank=True)

    def __str__(self):
        full_name = self.user.get_full_name()
        return full_name or self.user.username
