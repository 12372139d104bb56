from abc import ABC, abstractmethod


class PaymentError(Exception):
    """Raised when a payment cannot be taken; the message is shown to the user as-is"""
    pass


class PaymentGateway(ABC):
    @abstractmethod
    def initiate_payment(self, payment_details):
        pass

    @abstractmethod
    def refund(self, payment_details):
        pass
