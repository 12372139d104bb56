"""Pricing rule model"""
from django.db import models
from django.db.models import Q
from django.utils import timezone

from ..utils.constants import ServiceType, BusinessRules


class PricingRuleQuerySet(models.QuerySet):
    def available(self, service_type=None, at=None):
        """Active rules whose effective window contains `at` (defaults to now)"""
        at = at or timezone.now()
        qs = self.filter(is_active=True).filter(
            Q(effective_start__isnull=True) | Q(effective_start__lte=at),
            Q(effective_end__isnull=True) | Q(effective_end__gte=at),
        )
        if service_type:
            qs = qs.filter(service_type=service_type)
        return qs


class PricingRule(models.Model):
    vehicle_type = models.CharField(max_length=50, help_text='Vehicle type slug, e.g. business_sedan')
    service_type = models.CharField(max_length=20, choices=ServiceType.CHOICES)

    # Transfer pricing
    base_rate = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    per_mile_rate = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    distance_tiers = models.JSONField(default=list, blank=True)

    # Hourly pricing
    hourly_rate = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    minimum_hours = models.PositiveIntegerField(null=True, blank=True)

    minimum_fare = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    gratuity_percent = models.DecimalField(max_digits=5, decimal_places=2, default=BusinessRules.DEFAULT_GRATUITY_PERCENT)
    airport_fees = models.JSONField(default=list, blank=True)
    meet_and_greet = models.JSONField(default=dict, blank=True)
    surge_pricing = models.JSONField(default=list, blank=True)

    effective_start = models.DateTimeField(null=True, blank=True)
    effective_end = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PricingRuleQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['vehicle_type', 'service_type'], name='unique_vehicle_service'),
        ]

    def __str__(self):
        return f"{self.vehicle_type} / {self.service_type}"
