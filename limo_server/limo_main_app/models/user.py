"""User-related models"""
from django.db import models
from django.contrib.auth.models import User

from ..utils.constants import UserRole, DiscountType


class Profile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE)
    phone = models.CharField(max_length=20, null=True, blank=True)
    role = models.CharField(max_length=20, choices=UserRole.CHOICES, default=UserRole.PASSENGER, db_index=True)
    discount_type = models.CharField(max_length=20, choices=DiscountType.CHOICES, null=True, blank=True)
    discount_value = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    pay_later_enabled = models.BooleanField(default=False)
    cash_payment_enabled = models.BooleanField(default=False)
    stripe_customer_id = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user.username} ({self.role})"

    @property
    def is_staff_role(self):
        return self.role in UserRole.STAFF
