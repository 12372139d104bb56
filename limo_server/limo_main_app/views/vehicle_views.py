"""Vehicle types, pricing rules and drivers"""
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..models import VehicleType, PricingRule, Driver
from ..permissions import IsAdminOrReadOnly, IsAdminRole, IsAdminOrDispatcher, get_role
from ..serializers import VehicleTypeSerializer, PricingRuleSerializer, DriverSerializer
from ..utils.constants import UserRole


class VehicleTypeViewSet(viewsets.ModelViewSet):
    authentication_classes = [JWTAuthentication]
    permission_classes = [IsAdminOrReadOnly]
    serializer_class = VehicleTypeSerializer

    def get_queryset(self):
        if get_role(self.request.user) == UserRole.ADMIN:
            return VehicleType.objects.all()
        return VehicleType.objects.filter(is_active=True)


class PricingRuleViewSet(viewsets.ModelViewSet):
    authentication_classes = [JWTAuthentication]
    permission_classes = [IsAuthenticated, IsAdminRole]
    serializer_class = PricingRuleSerializer

    def get_queryset(self):
        qs = PricingRule.objects.all().order_by('vehicle_type', 'service_type')
        service_type = self.request.query_params.get('service_type')
        if service_type:
            qs = qs.filter(service_type=service_type)
        return qs


class DriverViewSet(viewsets.ReadOnlyModelViewSet):
    """Driver roster for dispatchers picking who to assign"""
    authentication_classes = [JWTAuthentication]
    permission_classes = [IsAuthenticated, IsAdminOrDispatcher]
    serializer_class = DriverSerializer

    def get_queryset(self):
        qs = Driver.objects.filter(is_active=True).select_related('user', 'vehicle_type')
        if self.request.query_params.get('available') == 'true':
            qs = qs.filter(is_available=True)
        return qs
