"""Quote service - prices every eligible vehicle for one trip"""
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from decimal import Decimal

from django.conf import settings

from ..models import VehicleType
from ..serializers.quote_serializers import TripParametersSerializer
from ..utils.constants import ServiceType
from .distance_service import DistanceService
from .pricing_service import PricingService

logger = logging.getLogger(__name__)


class QuoteValidationError(Exception):
    """Raised when trip parameters are invalid, before any lookup is made"""
    def __init__(self, errors):
        super().__init__(str(errors))
        self.errors = errors


class PricingConfigurationError(Exception):
    """Raised when no pricing rule is available for the requested service"""
    pass


class QuoteService:
    def __init__(self, pricing_service=None, distance_service=None, price_timeout=None):
        self.pricing_service = pricing_service or PricingService()
        self._distance_service = distance_service
        self.price_timeout = price_timeout or settings.QUOTE_PRICE_TIMEOUT_SECONDS

    @property
    def distance_service(self):
        if self._distance_service is None:
            self._distance_service = DistanceService()
        return self._distance_service

    def validate_trip(self, data):
        serializer = TripParametersSerializer(data=data)
        if not serializer.is_valid():
            raise QuoteValidationError(serializer.errors)
        return serializer.validated_data

    def get_quote(self, data, user=None, price_fn=None):
        """
        Validate the trip, measure it once and price every available vehicle.

        Returns a plain dict so it can be cached as part of the booking flow:
            {service_type, distance_miles, duration_minutes, hours, date, time,
             prices: {slug: {regular_price, discount_amount, final_price}}}

        Raises:
            QuoteValidationError: invalid trip parameters
            PricingConfigurationError: no rules for the service type
            DistanceLookupError: the route could not be measured
        """
        trip = self.validate_trip(data)
        service_type = trip['service_type']

        rules = self.pricing_service.available_rules(service_type)
        if not rules:
            logger.error(f'[QUOTE] No pricing rules available for {service_type}')
            raise PricingConfigurationError('No pricing rules configured. Please contact support.')

        if service_type == ServiceType.TRANSFER:
            pickup, destination = trip['pickup'], trip['destination']
            route = self.distance_service.measure(
                (pickup['lat'], pickup['lon']),
                (destination['lat'], destination['lon']),
            )
            distance = route['distance_miles']
            duration = route['duration_minutes']
            hours = None
        else:
            distance = None
            hours = trip['hours']
            duration = hours * 60

        trip_inputs = {
            'distance': distance,
            'hours': hours,
            'date': trip['date'],
            'time': trip['time'].strftime('%H:%M'),
            'airport_code': trip.get('airport_code') or None,
            'discount': self.pricing_service.discount_for_user(user),
        }
        prices = self._price_all(rules, price_fn or self.pricing_service.calculate, trip_inputs)
        logger.info(f'[QUOTE] {service_type} quote: {len(prices)}/{len(rules)} vehicles priced')

        return {
            'service_type': service_type,
            'distance_miles': str(distance) if distance is not None else None,
            'duration_minutes': duration,
            'hours': hours,
            'date': trip['date'].isoformat(),
            'time': trip_inputs['time'],
            'prices': prices,
        }

    def _price_all(self, rules, price_fn, trip_inputs):
        """One task per vehicle; failed or unfinished tasks are logged and left out"""
        prices = {}
        executor = ThreadPoolExecutor(max_workers=len(rules))
        try:
            futures = {executor.submit(price_fn, rule, **trip_inputs): slug for slug, rule in rules.items()}
            done, not_done = wait(futures, timeout=self.price_timeout)

            for future in not_done:
                future.cancel()
                logger.warning(f'[QUOTE] Price calculation for {futures[future]} timed out')

            for future in done:
                slug = futures[future]
                try:
                    result = future.result()
                except Exception as e:
                    logger.warning(f'[QUOTE] Price calculation for {slug} failed: {e}')
                    continue
                prices[slug] = {
                    'regular_price': str(result['regular_price']),
                    'discount_amount': str(result['discount_amount']),
                    'final_price': str(result['final_price']),
                }
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return prices

    def vehicle_options(self, quote):
        """Active vehicle types that have a computed price, cheapest first"""
        if not quote:
            return []
        prices = quote['prices']
        options = []
        for vehicle_type in VehicleType.objects.filter(is_active=True):
            price = prices.get(vehicle_type.slug)
            if not price:
                continue
            options.append({
                'slug': vehicle_type.slug,
                'name': vehicle_type.name,
                'description': vehicle_type.description,
                'passenger_capacity': vehicle_type.passenger_capacity,
                'luggage_capacity': vehicle_type.luggage_capacity,
                'image_url': vehicle_type.image_url,
                **price,
            })
        options.sort(key=lambda option: Decimal(option['final_price']))
        return options

    def vehicle_type_for_slug(self, slug):
        for vehicle_type in VehicleType.objects.filter(is_active=True):
            if vehicle_type.slug == slug:
                return vehicle_type
        return None
