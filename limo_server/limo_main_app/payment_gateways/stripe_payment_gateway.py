import logging
from decimal import Decimal

import stripe
from django.conf import settings

from .payment_gateway import PaymentGateway, PaymentError

logger = logging.getLogger(__name__)


def to_cents(amount):
    return int((Decimal(str(amount)) * 100).quantize(Decimal('1')))


class StripePaymentGateway(PaymentGateway):

    def __init__(self):
        stripe.api_key = settings.STRIPE_SECRET_KEY

    def initiate_payment(self, payment_details):
        """Create a PaymentIntent the client confirms with its card"""
        metadata = {key: str(value) for key, value in payment_details.get('metadata', {}).items()}
        params = {
            'amount': to_cents(payment_details['amount']),
            'currency': settings.STRIPE_CURRENCY,
            'automatic_payment_methods': {'enabled': True},
            'metadata': metadata,
        }
        if payment_details.get('customer_id'):
            params['customer'] = payment_details['customer_id']

        try:
            intent = stripe.PaymentIntent.create(**params)
        except stripe.StripeError as e:
            logger.warning(f'[PAYMENT] PaymentIntent creation failed: {e}')
            raise PaymentError(getattr(e, 'user_message', None) or 'Unable to start card payment') from e

        return {'client_secret': intent['client_secret'], 'payment_intent_id': intent['id']}

    def confirm_payment(self, payment_intent_id, expected_amount, expected_metadata=None):
        """
        Check that the PaymentIntent was paid in full and was created for this payment.

        `expected_metadata` values must match the metadata stored on the intent
        when it was created. Raises PaymentError with the processor's message
        when the payment did not go through.
        """
        if not payment_intent_id:
            raise PaymentError('Card payment has not been completed')

        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id)
        except stripe.StripeError as e:
            logger.warning(f'[PAYMENT] Could not retrieve PaymentIntent {payment_intent_id}: {e}')
            raise PaymentError(getattr(e, 'user_message', None) or 'Unable to verify card payment') from e

        metadata = intent.get('metadata') or {}
        for key, value in (expected_metadata or {}).items():
            if metadata.get(key) != str(value):
                logger.warning(f'[PAYMENT] PaymentIntent {payment_intent_id} metadata {key}={metadata.get(key)!r} does not match {value!r}')
                raise PaymentError('This card payment does not belong to this booking')

        if intent['status'] != 'succeeded':
            last_error = intent['last_payment_error'] if 'last_payment_error' in intent else None
            message = last_error['message'] if last_error else f'Payment not completed (status: {intent["status"]})'
            logger.warning(f'[PAYMENT] PaymentIntent {payment_intent_id} not succeeded: {message}')
            raise PaymentError(message)

        if intent['amount'] != to_cents(expected_amount):
            logger.warning(f'[PAYMENT] PaymentIntent {payment_intent_id} amount {intent["amount"]} != {to_cents(expected_amount)}')
            raise PaymentError('Payment amount does not match the booking total')

        return intent

    def refund(self, payment_details):
        try:
            return stripe.Refund.create(
                payment_intent=payment_details['payment_intent_id'],
                amount=to_cents(payment_details['amount']),
            )
        except stripe.StripeError as e:
            logger.error(f'[PAYMENT] Refund for {payment_details["payment_intent_id"]} failed: {e}')
            raise PaymentError(getattr(e, 'user_message', None) or 'Card refund failed') from e

    def construct_event(self, payload, sig_header):
        """Verify and parse a webhook call; raises ValueError or stripe.SignatureVerificationError"""
        return stripe.Webhook.construct_event(payload, sig_header, settings.STRIPE_WEBHOOK_SECRET)
