from credits import ledger

from .payment_gateway import PaymentGateway


class CreditPaymentGateway(PaymentGateway):
    """Pays (part of) a booking from the passenger's ride credit balance"""

    def initiate_payment(self, payment_details):
        return ledger.debit(
            payment_details['user'],
            payment_details['amount'],
            reference_id=payment_details['booking_id'],
            title='booking',
            description=f'Ride credit applied to booking #{payment_details["booking_id"]}',
        )

    def refund(self, payment_details):
        return ledger.credit(
            payment_details['user'],
            payment_details['amount'],
            reference_id=payment_details['booking_id'],
            title='refund',
            description=f'Ride credit refunded for cancelled booking #{payment_details["booking_id"]}',
        )
