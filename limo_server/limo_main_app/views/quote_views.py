"""Distance, price, address and flight lookups used while building a quote"""
import logging

from django.contrib.auth.models import User
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..permissions import is_staff_user
from ..serializers import DistanceRequestSerializer, FlightSearchSerializer, PriceRequestSerializer, PriceSerializer, PricingRuleSummarySerializer
from ..services import (
    DistanceService, DistanceLookupError, FlightService, FlightLookupError,
    PricingService, PricingRuleNotFound, PriceCalculationError,
)
from ..throttles import QuoteRateThrottle, FlightLookupRateThrottle
from ..utils.constants import ServiceType
from .responses import error_response

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([QuoteRateThrottle])
def calculate_distance(request):
    serializer = DistanceRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        route = DistanceService().measure(serializer.validated_data['origins'], serializer.validated_data['destinations'])
    except DistanceLookupError as e:
        return error_response('DISTANCE_LOOKUP_FAILED', str(e), status.HTTP_502_BAD_GATEWAY)

    return Response({'distance': route['distance_miles'], 'duration': route['duration_minutes']})


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([QuoteRateThrottle])
def calculate_price(request):
    serializer = PriceRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    # Only staff may price a trip with another passenger's discount
    user = request.user
    if data.get('user_id') and is_staff_user(request.user):
        user = User.objects.filter(pk=data['user_id']).first()

    try:
        result = PricingService().calculate_price(
            data['vehicle_type'],
            data['service_type'],
            user=user,
            distance=data.get('distance'),
            hours=data.get('hours'),
            date=data.get('date'),
            time=data.get('time'),
            airport_code=data.get('airport_code'),
        )
    except PricingRuleNotFound as e:
        return error_response('PRICING_RULE_NOT_FOUND', str(e), status.HTTP_404_NOT_FOUND)
    except PriceCalculationError as e:
        return error_response('VALIDATION_ERROR', str(e), status.HTTP_400_BAD_REQUEST)

    return Response(PriceSerializer(result).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def available_pricing_rules(request):
    service_type = request.query_params.get('service_type', ServiceType.TRANSFER)
    if service_type not in dict(ServiceType.CHOICES):
        return error_response('VALIDATION_ERROR', f'Unknown service type: {service_type}', status.HTTP_400_BAD_REQUEST)

    rules = PricingService().available_rules(service_type)
    return Response({slug: PricingRuleSummarySerializer(rule).data for slug, rule in rules.items()})


@api_view(['GET'])
@permission_classes([AllowAny])
@throttle_classes([QuoteRateThrottle])
def geocode(request):
    query = request.query_params.get('q', '').strip()
    if len(query) < 3:
        return Response([])
    try:
        limit = max(1, min(10, int(request.query_params.get('limit', 5))))
    except ValueError:
        limit = 5

    try:
        suggestions = DistanceService().suggest_addresses(query, limit=limit)
    except DistanceLookupError as e:
        return error_response('ADDRESS_LOOKUP_FAILED', str(e), status.HTTP_502_BAD_GATEWAY)
    return Response(suggestions)


@api_view(['GET'])
@permission_classes([AllowAny])
@throttle_classes([FlightLookupRateThrottle])
def flight_search(request):
    serializer = FlightSearchSerializer(data={
        'flight_number': request.query_params.get('flight_number', ''),
        'date': request.query_params.get('date') or None,
    })
    serializer.is_valid(raise_exception=True)

    try:
        flights = FlightService().search(serializer.validated_data['flight_number'], date=serializer.validated_data.get('date'))
    except FlightLookupError as e:
        return error_response('FLIGHT_LOOKUP_FAILED', e.message, e.status_code)
    return Response(flights)
