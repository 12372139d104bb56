from decimal import Decimal

from django.contrib.auth.models import User
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from limo_main_app.models import Profile
from limo_main_app.utils.constants import UserRole
from . import ledger
from .models import RideCreditAccount, RideCreditTransaction


class LedgerTest(TestCase):
    def setUp(self):
        self.user = User.objects.create_user('rider', password='secret-pass-123')

    def test_new_user_has_empty_account(self):
        self.assertTrue(RideCreditAccount.objects.filter(user=self.user).exists())
        self.assertEqual(ledger.get_balance(self.user), Decimal('0.00'))

    def test_credit_and_debit_are_recorded(self):
        ledger.credit(self.user, '50.00', reference_id='grant-1', title='grant')
        ledger.debit(self.user, '20.00', reference_id='42')

        self.assertEqual(ledger.get_balance(self.user), Decimal('30.00'))
        debit = RideCreditTransaction.objects.get(transaction_type=RideCreditTransaction.DEBIT)
        self.assertEqual(debit.amount, Decimal('20.00'))
        self.assertEqual(debit.reference_id, '42')
        self.assertEqual(debit.title, 'booking')

    def test_debit_never_goes_negative(self):
        ledger.credit(self.user, '10.00')
        with self.assertRaises(ledger.InsufficientCreditError):
            ledger.debit(self.user, '10.01')
        self.assertEqual(ledger.get_balance(self.user), Decimal('10.00'))
        self.assertFalse(RideCreditTransaction.objects.filter(transaction_type=RideCreditTransaction.DEBIT).exists())

    def test_amounts_must_be_positive(self):
        with self.assertRaises(ValueError):
            ledger.credit(self.user, '0')
        with self.assertRaises(ValueError):
            ledger.debit(self.user, '-5')


class RideCreditAPITest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user('rider', password='secret-pass-123')
        admin = User.objects.create_user('boss', password='secret-pass-123')
        Profile.objects.filter(user=admin).update(role=UserRole.ADMIN)
        self.admin = User.objects.get(pk=admin.pk)
        ledger.credit(self.user, '25.00')

    def test_balance(self):
        self.client.force_authenticate(self.user)
        response = self.client.get('/api/credits/balance/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['balance']), Decimal('25.00'))

    def test_transactions_are_private(self):
        other = User.objects.create_user('other', password='secret-pass-123')
        ledger.credit(other, '5.00')
        self.client.force_authenticate(self.user)
        response = self.client.get('/api/credits/transactions/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        results = response.data['results'] if isinstance(response.data, dict) else response.data
        self.assertEqual(len(results), 1)

    def test_only_staff_grant_credit(self):
        account = self.user.ride_credit
        self.client.force_authenticate(self.user)
        response = self.client.post(f'/api/credits/balance/{account.id}/grant/', {'amount': '100.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.post(f'/api/credits/balance/{account.id}/grant/', {'amount': '100.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(ledger.get_balance(self.user), Decimal('125.00'))
