"""Payment service - resolves a payment selection into a booking payment plan"""
import logging
from decimal import Decimal

from django.conf import settings

from credits import ledger
from ..models import Booking, Profile
from ..payment_gateways.payment_gateway import PaymentError
from ..payment_gateways.stripe_payment_gateway import StripePaymentGateway
from ..utils.constants import PaymentMethod, PaymentStatus
from .pricing_service import to_money

logger = logging.getLogger(__name__)


class PaymentService:
    """Service for payment operations"""

    def __init__(self, stripe_gateway=None):
        self._stripe_gateway = stripe_gateway

    @property
    def stripe_gateway(self):
        if self._stripe_gateway is None:
            self._stripe_gateway = StripePaymentGateway()
        return self._stripe_gateway

    def _profile(self, user):
        return Profile.objects.filter(user=user).first()

    def has_card_on_file(self, profile):
        return bool(profile and profile.stripe_customer_id)

    def resolve_credit(self, user, total_amount, method, credit_amount=None):
        """
        Credit applied to this booking: never more than the balance or the total.

        Paying fully by credit with no explicit amount uses as much as possible.
        """
        available = min(ledger.get_balance(user), total_amount)
        if credit_amount is None:
            return to_money(available) if method == PaymentMethod.CREDIT else Decimal('0.00')

        credit_amount = to_money(credit_amount)
        if credit_amount < 0:
            raise PaymentError('Credit amount cannot be negative')
        if credit_amount > available:
            raise PaymentError(f'Requested credit {credit_amount} exceeds the available {to_money(available)}')
        return credit_amount

    def plan(self, user, total_amount, method, credit_amount=None, payment_intent_id=None, payment_metadata=None):
        """
        Validate a payment selection and take any card payment it needs.

        A card PaymentIntent must have been created for this user, carry the
        given `payment_metadata` and not already pay for another booking.

        Returns:
            dict with method, credit_amount, remaining_amount, payment_status, payment_intent_id

        Raises:
            PaymentError: the selection is not allowed or the card payment did not go through
        """
        total_amount = to_money(total_amount)
        credit = self.resolve_credit(user, total_amount, method, credit_amount)
        remaining = total_amount - credit
        profile = self._profile(user)

        if method == PaymentMethod.CREDIT:
            if remaining > 0:
                raise PaymentError(f'Ride credit does not cover the total. Choose another method for the remaining {remaining}')
            payment_status = PaymentStatus.PAID

        elif method == PaymentMethod.CARD:
            if remaining > 0:
                if payment_intent_id and Booking.objects.filter(payment_intent_id=payment_intent_id).exists():
                    logger.warning(f'[PAYMENT] PaymentIntent {payment_intent_id} already used by another booking')
                    raise PaymentError('This card payment has already been used for another booking')
                self.stripe_gateway.confirm_payment(
                    payment_intent_id, remaining,
                    expected_metadata={'user_id': user.id, **(payment_metadata or {})},
                )
            payment_status = PaymentStatus.PAID

        elif method == PaymentMethod.PAY_LATER:
            if not (profile and profile.pay_later_enabled):
                raise PaymentError('Pay later is not enabled for this account')
            if settings.REQUIRE_CARD_FOR_PAY_LATER and not self.has_card_on_file(profile):
                raise PaymentError('Please add a card to your account to use pay later')
            payment_status = PaymentStatus.PAID if remaining == 0 else PaymentStatus.PENDING

        elif method == PaymentMethod.CASH:
            if not (profile and profile.cash_payment_enabled):
                raise PaymentError('Cash payment is not enabled for this account')
            payment_status = PaymentStatus.PAID if remaining == 0 else PaymentStatus.PENDING

        else:
            raise PaymentError(f'Unsupported payment method: {method}')

        logger.info(f'[PAYMENT] {user.username} pays {total_amount} by {method} (credit {credit}, remaining {remaining})')
        return {
            'method': method,
            'credit_amount': credit,
            'remaining_amount': remaining,
            'payment_status': payment_status,
            'payment_intent_id': payment_intent_id if method == PaymentMethod.CARD and remaining > 0 else None,
        }

    def create_payment_intent(self, user, amount, metadata=None):
        """Start a card payment for the amount left after credit"""
        amount = to_money(amount)
        if amount <= 0:
            raise PaymentError('Nothing left to pay by card')
        profile = self._profile(user)
        return self.stripe_gateway.initiate_payment({
            'amount': amount,
            'customer_id': profile.stripe_customer_id if profile else None,
            'metadata': {'user_id': user.id, **(metadata or {})},
        })

    def refund_card_payment(self, plan):
        """Give back a confirmed card payment whose booking could not be created"""
        if plan['method'] != PaymentMethod.CARD or not plan.get('payment_intent_id'):
            return None
        if Booking.objects.filter(payment_intent_id=plan['payment_intent_id']).exists():
            # Another request already booked with this payment
            return None
        logger.warning(f'[PAYMENT] Refunding PaymentIntent {plan["payment_intent_id"]} for {plan["remaining_amount"]}')
        return self.stripe_gateway.refund({
            'payment_intent_id': plan['payment_intent_id'],
            'amount': plan['remaining_amount'],
        })
