"""Tests for booking creation and the booking lifecycle"""
from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.test import TestCase
from django.utils import timezone

from credits import ledger
from credits.ledger import InsufficientCreditError
from ..models import Booking, BookingDecline, Driver
from ..services.booking_service import (
    BookingService, InvalidTransitionError, BookingPermissionError, default_driver_payment,
)
from ..utils.constants import BookingStatus, PaymentMethod, PaymentStatus, ServiceType, UserRole
from .helpers import make_fleet, make_user, make_driver, make_booking, passenger_details


def booking_trip():
    return {
        'booking_type': ServiceType.TRANSFER,
        'pickup': {'address': 'JFK Airport, Queens, NY', 'lat': 40.6413, 'lon': -73.7781},
        'destination': {'address': 'Times Square, New York, NY', 'lat': 40.758, 'lon': -73.9855},
        'via_points': [],
        'scheduled_date_time': timezone.now() + timedelta(days=3),
        'estimated_distance': '17.20',
        'estimated_duration': 45,
    }


class BookingCreationTest(TestCase):
    def setUp(self):
        self.sedan, _ = make_fleet()
        self.passenger = make_user('rider')
        self.notifications = mock.Mock()
        self.service = BookingService(notification_service=self.notifications)

    def credit_plan(self, amount):
        return {
            'method': PaymentMethod.CARD,
            'credit_amount': Decimal(amount),
            'payment_status': PaymentStatus.PAID,
            'payment_intent_id': 'pi_123',
        }

    def test_staff_booking_defaults_to_pay_later(self):
        booking = self.service.create_booking(self.passenger, self.sedan, booking_trip(), Decimal('96.00'), passenger_details())
        self.assertEqual(booking.status, BookingStatus.PENDING)
        self.assertEqual(booking.payment_method, PaymentMethod.PAY_LATER)
        self.assertEqual(booking.payment_status, PaymentStatus.PENDING)
        self.assertEqual(booking.created_by, self.passenger)

    def test_credit_is_debited_with_the_booking(self):
        ledger.credit(self.passenger, '50.00')
        booking = self.service.create_booking(
            self.passenger, self.sedan, booking_trip(), Decimal('96.00'), passenger_details(),
            payment=self.credit_plan('30.00'),
        )
        self.assertEqual(ledger.get_balance(self.passenger), Decimal('20.00'))
        self.assertEqual(booking.credit_amount_applied, Decimal('30.00'))
        self.assertEqual(booking.remaining_amount, Decimal('66.00'))
        txn = self.passenger.ride_credit.transactions.get(transaction_type='debit')
        self.assertEqual(txn.reference_id, str(booking.id))

    def test_insufficient_credit_leaves_no_booking(self):
        ledger.credit(self.passenger, '10.00')
        with self.assertRaises(InsufficientCreditError):
            self.service.create_booking(
                self.passenger, self.sedan, booking_trip(), Decimal('96.00'), passenger_details(),
                payment=self.credit_plan('30.00'),
            )
        self.assertFalse(Booking.objects.exists())
        self.assertEqual(ledger.get_balance(self.passenger), Decimal('10.00'))

    def test_pre_assigned_driver_waits_for_acceptance(self):
        driver = make_driver('driver1', vehicle_type=self.sedan)
        with self.captureOnCommitCallbacks(execute=True):
            booking = self.service.create_booking(
                self.passenger, self.sedan, booking_trip(), Decimal('100.00'), passenger_details(), driver=driver,
            )
        self.assertEqual(booking.status, BookingStatus.PENDING_DRIVER_ACCEPTANCE)
        self.assertEqual(booking.driver_payment, Decimal('70.00'))
        self.notifications.send_driver_assignment.assert_called_once_with(booking)

    def test_default_driver_payment_keeps_commission(self):
        self.assertEqual(default_driver_payment(Decimal('100.00')), Decimal('70.00'))
        self.assertEqual(default_driver_payment(Decimal('96.00')), Decimal('67.20'))


class BookingLifecycleTest(TestCase):
    def setUp(self):
        self.sedan, _ = make_fleet()
        self.passenger = make_user('rider')
        self.other_passenger = make_user('other_rider')
        self.dispatcher = make_user('dispatch', role=UserRole.DISPATCHER)
        self.driver = make_driver('driver1', vehicle_type=self.sedan)
        self.other_driver = make_driver('driver2', vehicle_type=self.sedan)
        self.notifications = mock.Mock()
        self.service = BookingService(notification_service=self.notifications)
        self.booking = make_booking(self.passenger, self.sedan)

    def refresh(self):
        self.booking.refresh_from_db()
        return self.booking

    def test_full_lifecycle(self):
        self.service.assign_driver(self.booking.id, self.driver.id, actor=self.dispatcher)
        self.assertEqual(self.refresh().status, BookingStatus.PENDING_DRIVER_ACCEPTANCE)
        self.assertEqual(self.booking.driver_payment, Decimal('70.00'))

        self.service.accept(self.booking.id, self.driver.user)
        self.assertEqual(self.refresh().status, BookingStatus.CONFIRMED)
        self.assertIsNotNone(self.booking.accepted_at)

        self.service.start(self.booking.id, self.driver.user)
        self.assertEqual(self.refresh().status, BookingStatus.IN_PROGRESS)

        self.service.complete(self.booking.id, self.driver.user)
        self.assertEqual(self.refresh().status, BookingStatus.COMPLETED)
        self.assertIsNotNone(self.booking.completed_at)

        self.driver.refresh_from_db()
        self.assertEqual(self.driver.total_rides, 1)

    def test_driver_payment_override_on_assignment(self):
        self.service.assign_driver(self.booking.id, self.driver.id, actor=self.dispatcher, driver_payment='55.50')
        self.assertEqual(self.refresh().driver_payment, Decimal('55.50'))

    def test_only_staff_assign_drivers(self):
        with self.assertRaises(BookingPermissionError):
            self.service.assign_driver(self.booking.id, self.driver.id, actor=self.passenger)
        self.assertEqual(self.refresh().status, BookingStatus.PENDING)

    def test_assigning_inactive_driver_fails(self):
        Driver.objects.filter(pk=self.driver.pk).update(is_active=False)
        with self.assertRaises(Driver.DoesNotExist):
            self.service.assign_driver(self.booking.id, self.driver.id, actor=self.dispatcher)

    def test_only_assigned_driver_accepts(self):
        self.service.assign_driver(self.booking.id, self.driver.id, actor=self.dispatcher)
        with self.assertRaises(BookingPermissionError):
            self.service.accept(self.booking.id, self.other_driver.user)
        with self.assertRaises(BookingPermissionError):
            self.service.accept(self.booking.id, self.passenger)
        self.assertEqual(self.refresh().status, BookingStatus.PENDING_DRIVER_ACCEPTANCE)

    def test_accept_without_assignment_is_invalid(self):
        with self.assertRaises(InvalidTransitionError) as ctx:
            self.service.accept(self.booking.id, self.driver.user)
        self.assertEqual(ctx.exception.status, BookingStatus.PENDING)
        self.assertEqual(str(ctx.exception), 'Cannot accept a booking that is pending')

    def test_second_response_to_an_offer_is_rejected(self):
        self.service.assign_driver(self.booking.id, self.driver.id, actor=self.dispatcher)
        self.service.accept(self.booking.id, self.driver.user)

        with self.assertRaises(InvalidTransitionError):
            self.service.decline(self.booking.id, self.driver.user, reason='too late')
        with self.assertRaises(InvalidTransitionError):
            self.service.accept(self.booking.id, self.driver.user)
        self.assertEqual(self.refresh().status, BookingStatus.CONFIRMED)
        self.assertFalse(BookingDecline.objects.exists())

    def test_decline_returns_booking_to_pending_and_reassigns(self):
        self.service.assign_driver(self.booking.id, self.driver.id, actor=self.dispatcher)
        policy = mock.Mock()

        with mock.patch('limo_main_app.services.reassignment.get_reassignment_policy', return_value=policy):
            with self.captureOnCommitCallbacks(execute=True):
                self.service.decline(self.booking.id, self.driver.user, reason='Vehicle in service')

        self.refresh()
        self.assertEqual(self.booking.status, BookingStatus.PENDING)
        self.assertIsNone(self.booking.driver)
        self.assertIsNone(self.booking.driver_payment)
        decline = BookingDecline.objects.get(booking=self.booking)
        self.assertEqual(decline.driver, self.driver)
        self.assertEqual(decline.reason, 'Vehicle in service')
        policy.reassign.assert_called_once_with(self.booking.id)
        self.notifications.send_driver_declined.assert_called_once()

    def test_start_requires_confirmed_booking(self):
        with self.assertRaises(InvalidTransitionError):
            self.service.start(self.booking.id, self.dispatcher)
        self.assertEqual(self.refresh().status, BookingStatus.PENDING)

    def test_passenger_cannot_start_or_complete(self):
        booking = make_booking(self.passenger, self.sedan, status=BookingStatus.CONFIRMED, driver=self.driver)
        with self.assertRaises(BookingPermissionError):
            self.service.start(booking.id, self.passenger)
        with self.assertRaises(BookingPermissionError):
            self.service.start(booking.id, self.other_driver.user)
        self.service.start(booking.id, self.dispatcher)
        booking.refresh_from_db()
        self.assertEqual(booking.status, BookingStatus.IN_PROGRESS)

    def test_terminal_bookings_are_final(self):
        completed = make_booking(self.passenger, self.sedan, status=BookingStatus.COMPLETED, driver=self.driver)
        cancelled = make_booking(self.passenger, self.sedan, status=BookingStatus.CANCELLED)

        for booking in (completed, cancelled):
            with self.assertRaises(InvalidTransitionError):
                self.service.cancel(booking.id, self.dispatcher)
            with self.assertRaises(InvalidTransitionError):
                self.service.assign_driver(booking.id, self.driver.id, actor=self.dispatcher)
            with self.assertRaises(InvalidTransitionError):
                self.service.update_driver_payment(booking.id, self.dispatcher, '10.00')

        completed.refresh_from_db()
        cancelled.refresh_from_db()
        self.assertEqual(completed.status, BookingStatus.COMPLETED)
        self.assertEqual(cancelled.status, BookingStatus.CANCELLED)

    def test_passenger_cancels_own_booking_only(self):
        with self.assertRaises(BookingPermissionError):
            self.service.cancel(self.booking.id, self.other_passenger)
        self.service.cancel(self.booking.id, self.passenger, reason='Plans changed')
        self.refresh()
        self.assertEqual(self.booking.status, BookingStatus.CANCELLED)
        self.assertEqual(self.booking.cancel_reason, 'Plans changed')

    def test_cancel_returns_credit(self):
        ledger.credit(self.passenger, '40.00')
        ledger.debit(self.passenger, '40.00', reference_id='x')
        booking = make_booking(self.passenger, self.sedan, credit_amount_applied=Decimal('40.00'),
                               payment_method=PaymentMethod.CREDIT, total_amount=Decimal('40.00'),
                               payment_status=PaymentStatus.PAID)

        self.service.cancel(booking.id, self.passenger)

        booking.refresh_from_db()
        self.assertEqual(ledger.get_balance(self.passenger), Decimal('40.00'))
        self.assertEqual(booking.payment_status, PaymentStatus.REFUNDED)

    @mock.patch('limo_main_app.services.booking_service.StripePaymentGateway')
    def test_cancel_refunds_card_payment(self, gateway_class):
        booking = make_booking(self.passenger, self.sedan, payment_method=PaymentMethod.CARD,
                               payment_status=PaymentStatus.PAID, payment_intent_id='pi_paid')

        self.service.cancel(booking.id, self.passenger)

        gateway_class.return_value.refund.assert_called_once_with({
            'payment_intent_id': 'pi_paid',
            'amount': Decimal('100.00'),
        })
        booking.refresh_from_db()
        self.assertEqual(booking.payment_status, PaymentStatus.REFUNDED)

    def test_update_driver_payment_is_staff_only(self):
        with self.assertRaises(BookingPermissionError):
            self.service.update_driver_payment(self.booking.id, self.driver.user, '80.00')
        self.service.update_driver_payment(self.booking.id, self.dispatcher, '80.00')
        self.assertEqual(self.refresh().driver_payment, Decimal('80.00'))

    def test_bookings_visible_by_role(self):
        assigned = make_booking(self.other_passenger, self.sedan, status=BookingStatus.CONFIRMED, driver=self.driver)

        self.assertEqual(list(self.service.bookings_for(self.passenger)), [self.booking])
        self.assertEqual(list(self.service.bookings_for(self.driver.user)), [assigned])
        self.assertEqual(self.service.bookings_for(self.dispatcher).count(), 2)

    def test_payment_result_from_webhook(self):
        booking = make_booking(self.passenger, self.sedan, payment_intent_id='pi_hook')
        self.service.record_payment_result('pi_hook', succeeded=True)
        booking.refresh_from_db()
        self.assertEqual(booking.payment_status, PaymentStatus.PAID)

        self.assertIsNone(self.service.record_payment_result('pi_unknown', succeeded=True))
