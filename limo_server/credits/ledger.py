"""Ride credit ledger - every balance change goes through here"""
import logging
from decimal import Decimal

from django.db import transaction

from .models import RideCreditAccount, RideCreditTransaction

logger = logging.getLogger(__name__)


class InsufficientCreditError(Exception):
    """Raised when a debit would take the balance below zero"""
    pass


def get_balance(user):
    account = RideCreditAccount.objects.filter(user=user).first()
    return account.balance if account else Decimal('0.00')


@transaction.atomic
def debit(user, amount, reference_id='', title='booking', description=''):
    """Deduct `amount` from the user's balance under a row lock"""
    amount = Decimal(amount)
    if amount <= 0:
        raise ValueError('Debit amount must be greater than 0')

    account, _ = RideCreditAccount.objects.get_or_create(user=user)
    account = RideCreditAccount.objects.select_for_update().get(pk=account.pk)

    if account.balance < amount:
        raise InsufficientCreditError(f'Insufficient ride credit: balance {account.balance}, requested {amount}')

    account.balance -= amount
    account.save(update_fields=['balance', 'updated_at'])

    RideCreditTransaction.objects.create(
        account=account,
        transaction_type=RideCreditTransaction.DEBIT,
        amount=amount,
        title=title,
        description=description,
        reference_id=str(reference_id),
    )
    logger.info(f'[CREDIT] Debited {amount} from {user.username}, balance {account.balance}')
    return account


@transaction.atomic
def credit(user, amount, reference_id='', title='adjustment', description=''):
    """Add `amount` to the user's balance under a row lock"""
    amount = Decimal(amount)
    if amount <= 0:
        raise ValueError('Credit amount must be greater than 0')

    account, _ = RideCreditAccount.objects.get_or_create(user=user)
    account = RideCreditAccount.objects.select_for_update().get(pk=account.pk)
    account.balance += amount
    account.save(update_fields=['balance', 'updated_at'])

    RideCreditTransaction.objects.create(
        account=account,
        transaction_type=RideCreditTransaction.CREDIT,
        amount=amount,
        title=title,
        description=description,
        reference_id=str(reference_id),
    )
    logger.info(f'[CREDIT] Credited {amount} to {user.username}, balance {account.balance}')
    return account
