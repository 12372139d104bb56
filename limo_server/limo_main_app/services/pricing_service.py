"""Pricing service - fare calculation from pricing rules"""
import logging
from datetime import date as date_cls, datetime
from decimal import Decimal, ROUND_HALF_UP

from ..models import PricingRule, Profile
from ..utils.constants import ServiceType, DiscountType

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


class PricingRuleNotFound(Exception):
    """Raised when no active rule exists for a vehicle/service pair"""
    pass


class PriceCalculationError(Exception):
    """Raised when the trip is missing an input the rule needs"""
    pass


def to_money(value):
    if value is None:
        return Decimal('0.00')
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def _decimal(value, default='0'):
    if value is None or value == '':
        return Decimal(default)
    return Decimal(str(value))


class PricingService:
    """Computes regular price, discount and final price for one vehicle"""

    def available_rules(self, service_type):
        """
        Active, currently effective rules keyed by vehicle slug.

        Rules are fully loaded here so price calculation never goes back to the database.
        """
        return {rule.vehicle_type: rule for rule in PricingRule.objects.available(service_type=service_type)}

    def get_rule(self, vehicle_slug, service_type):
        rule = PricingRule.objects.available(service_type=service_type).filter(vehicle_type=vehicle_slug).first()
        if not rule:
            raise PricingRuleNotFound(f'No pricing rule found for {vehicle_slug} ({service_type})')
        return rule

    def discount_for_user(self, user):
        """Return (discount_type, discount_value) for the user, or None"""
        if not user or not getattr(user, 'is_authenticated', False):
            return None
        profile = Profile.objects.filter(user=user).first()
        if not profile or not profile.discount_type or not profile.discount_value:
            return None
        return (profile.discount_type, profile.discount_value)

    def calculate(self, rule, distance=None, hours=None, date=None, time=None, airport_code=None, discount=None):
        """
        Price one trip with one rule.

        Args:
            rule: PricingRule (read only, no queries are made)
            distance: trip distance in miles, required for transfers
            hours: requested hours, required for hourly bookings
            date: pickup date (date or 'YYYY-MM-DD'), used for surge windows
            time: pickup time 'HH:MM', used for surge windows
            airport_code: pickup/dropoff airport code, matched case-insensitively
            discount: (discount_type, discount_value) tuple or None

        Returns:
            dict with regular_price, discount_amount, final_price and the breakdown
        """
        if rule.service_type == ServiceType.TRANSFER:
            base_fare = self._transfer_fare(rule, distance)
        else:
            base_fare = self._hourly_fare(rule, hours)

        gratuity = base_fare * _decimal(rule.gratuity_percent) / Decimal('100')
        airport_fee = self._airport_fee(rule, airport_code)
        meet_and_greet = self._meet_and_greet(rule)

        total = base_fare + gratuity + airport_fee + meet_and_greet
        multiplier = self._surge_multiplier(rule, date, time)
        regular_price = to_money(total * multiplier)

        discount_amount = self._discount_amount(regular_price, discount)
        final_price = regular_price - discount_amount

        return {
            'vehicle_type': rule.vehicle_type,
            'service_type': rule.service_type,
            'regular_price': regular_price,
            'discount_amount': discount_amount,
            'final_price': final_price,
            'breakdown': {
                'base_fare': to_money(base_fare),
                'gratuity': to_money(gratuity),
                'airport_fee': to_money(airport_fee),
                'meet_and_greet': to_money(meet_and_greet),
                'surge_multiplier': multiplier,
            },
        }

    def calculate_price(self, vehicle_slug, service_type, user=None, **trip):
        """Look up the rule and the user's discount, then price the trip"""
        rule = self.get_rule(vehicle_slug, service_type)
        return self.calculate(rule, discount=self.discount_for_user(user), **trip)

    def _transfer_fare(self, rule, distance):
        if distance is None:
            raise PriceCalculationError('Distance is required for transfer pricing')
        distance = _decimal(distance)

        fare = _decimal(rule.base_rate)
        if rule.distance_tiers:
            fare += self._tiered_distance_cost(rule.distance_tiers, distance)
        else:
            fare += distance * _decimal(rule.per_mile_rate)

        minimum_fare = _decimal(rule.minimum_fare)
        return max(fare, minimum_fare)

    def _tiered_distance_cost(self, tiers, distance):
        """Tiers are consumed in order; an `is_remaining` tier takes every mile left"""
        remaining = distance
        cost = Decimal('0')
        for tier in tiers:
            rate = _decimal(tier.get('rate_per_mile'))
            if tier.get('is_remaining'):
                cost += remaining * rate
                break
            used = min(remaining, _decimal(tier.get('miles')))
            cost += used * rate
            remaining -= used
            if remaining <= 0:
                break
        return cost

    def _hourly_fare(self, rule, hours):
        if hours is None:
            raise PriceCalculationError('Hours are required for hourly pricing')
        billed_hours = max(_decimal(hours), _decimal(rule.minimum_hours))
        return billed_hours * _decimal(rule.hourly_rate)

    def _airport_fee(self, rule, airport_code):
        if not airport_code or not rule.airport_fees:
            return Decimal('0')
        code = airport_code.strip().upper()
        for fee in rule.airport_fees:
            if str(fee.get('airport_code', '')).strip().upper() == code:
                return _decimal(fee.get('fee'))
        return Decimal('0')

    def _meet_and_greet(self, rule):
        meet_and_greet = rule.meet_and_greet or {}
        if meet_and_greet.get('enabled'):
            return _decimal(meet_and_greet.get('charge'))
        return Decimal('0')

    def _surge_multiplier(self, rule, date, time):
        """First matching window wins; day_of_week counts from 0 = Sunday"""
        if not rule.surge_pricing or not date or not time:
            return Decimal('1')

        if isinstance(date, str):
            date = datetime.strptime(date, '%Y-%m-%d').date()
        elif isinstance(date, datetime):
            date = date.date()
        if not isinstance(date, date_cls):
            return Decimal('1')

        day_of_week = (date.weekday() + 1) % 7
        pickup_time = time.strftime('%H:%M') if hasattr(time, 'strftime') else str(time)[:5]

        for window in rule.surge_pricing:
            if window.get('day_of_week') != day_of_week:
                continue
            if window.get('start_time', '00:00') <= pickup_time <= window.get('end_time', '23:59'):
                return _decimal(window.get('multiplier'), default='1')
        return Decimal('1')

    def _discount_amount(self, regular_price, discount):
        """Discount never exceeds the regular price"""
        if not discount:
            return Decimal('0.00')
        discount_type, discount_value = discount
        discount_value = _decimal(discount_value)
        if discount_value <= 0:
            return Decimal('0.00')

        if discount_type == DiscountType.PERCENTAGE:
            amount = regular_price * discount_value / Decimal('100')
        elif discount_type == DiscountType.FIXED:
            amount = discount_value
        else:
            logger.warning(f'[PRICING] Unknown discount type {discount_type}, ignoring')
            return Decimal('0.00')
        return min(to_money(amount), regular_price)
