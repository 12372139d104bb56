"""Tests for the four-step booking flow"""
from decimal import Decimal
from unittest import mock

from django.contrib.auth.models import AnonymousUser
from django.core.cache import cache
from django.test import TestCase
from rest_framework.exceptions import ValidationError

from credits import ledger
from ..models import Booking, Profile
from ..payment_gateways.payment_gateway import PaymentError
from ..services.booking_flow import BookingFlow, BookingFlowStore, AuthenticationRequired, FlowStateError
from ..services.booking_service import BookingService
from ..services.payment_service import PaymentService
from ..services.quote_service import QuoteService, QuoteValidationError
from ..utils.constants import FlowStep, PaymentMethod, PaymentStatus, ServiceType
from .helpers import make_fleet, make_user, trip_data, passenger_details


class BookingFlowTest(TestCase):
    def setUp(self):
        cache.clear()
        make_fleet()
        self.user = make_user('rider')
        distance = mock.Mock()
        distance.measure.return_value = {'distance_miles': Decimal('10.00'), 'duration_minutes': 25}
        self.quote_service = QuoteService(distance_service=distance)
        self.stripe = mock.Mock()
        self.payment_service = PaymentService(stripe_gateway=self.stripe)
        self.booking_service = BookingService(notification_service=mock.Mock())
        self.store = BookingFlowStore()

    def flow_at_payment(self):
        flow = self.store.create(user=self.user)
        flow.request_quote(trip_data(), user=self.user, quote_service=self.quote_service)
        flow.select_vehicle('business_sedan', user=self.user)
        flow.submit_passenger_details(passenger_details(), user=self.user)
        return flow

    def finalize(self, flow, payment_data):
        return flow.finalize(
            payment_data, user=self.user,
            payment_service=self.payment_service,
            booking_service=self.booking_service,
            quote_service=self.quote_service,
        )

    def test_anonymous_visitor_logs_in_at_vehicle_step(self):
        flow = self.store.create(user=AnonymousUser())
        flow.request_quote(trip_data(), user=AnonymousUser(), quote_service=self.quote_service)
        self.assertEqual(flow.step, FlowStep.VEHICLE_SELECTION)

        with self.assertRaises(AuthenticationRequired) as ctx:
            flow.select_vehicle('business_sedan', user=AnonymousUser())
        self.assertEqual(ctx.exception.flow_id, flow.flow_id)
        self.assertEqual(ctx.exception.step, FlowStep.VEHICLE_SELECTION)
        self.store.save(flow)

        resumed = self.store.load(flow.flow_id)
        self.assertEqual(resumed.step, FlowStep.VEHICLE_SELECTION)
        self.assertEqual(resumed.selected_vehicle, 'business_sedan')
        self.assertEqual(resumed.quote, flow.quote)

        resumed.select_vehicle('business_sedan', user=self.user)
        self.assertEqual(resumed.step, FlowStep.PASSENGER_DETAILS)
        self.assertEqual(resumed.user_id, self.user.id)

    def test_flow_survives_a_round_trip_through_the_store(self):
        flow = self.flow_at_payment()
        self.store.save(flow)
        self.assertEqual(self.store.load(flow.flow_id).to_dict(), flow.to_dict())

    def test_unknown_vehicle_cannot_be_selected(self):
        flow = self.store.create(user=self.user)
        flow.request_quote(trip_data(), user=self.user, quote_service=self.quote_service)
        with self.assertRaises(FlowStateError):
            flow.select_vehicle('stretch_hummer', user=self.user)
        self.assertEqual(flow.step, FlowStep.VEHICLE_SELECTION)

    def test_failed_quote_stays_on_trip_details(self):
        flow = self.store.create(user=self.user)
        with self.assertRaises(QuoteValidationError):
            flow.request_quote(trip_data(ServiceType.HOURLY, hours=1), user=self.user, quote_service=self.quote_service)
        self.assertEqual(flow.step, FlowStep.TRIP_DETAILS)
        self.assertIsNone(flow.quote)

    def test_new_quote_clears_previous_selection(self):
        flow = self.flow_at_payment()
        flow.request_quote(trip_data(ServiceType.HOURLY), user=self.user, quote_service=self.quote_service)
        self.assertEqual(flow.step, FlowStep.VEHICLE_SELECTION)
        self.assertIsNone(flow.selected_vehicle)
        self.assertEqual(flow.quote['service_type'], ServiceType.HOURLY)

    def test_invalid_email_keeps_passenger_step(self):
        flow = self.store.create(user=self.user)
        flow.request_quote(trip_data(), user=self.user, quote_service=self.quote_service)
        flow.select_vehicle('business_sedan', user=self.user)

        with self.assertRaises(ValidationError) as ctx:
            flow.submit_passenger_details(passenger_details(email='not-an-email'), user=self.user)
        self.assertIn('email', ctx.exception.detail)
        self.assertEqual(flow.step, FlowStep.PASSENGER_DETAILS)
        self.assertIsNone(flow.passenger)

    def test_other_account_cannot_take_over_flow(self):
        flow = self.flow_at_payment()
        with self.assertRaises(FlowStateError):
            flow.submit_passenger_details(passenger_details(), user=make_user('intruder'))

    def test_payment_step_cannot_be_skipped(self):
        flow = self.store.create(user=self.user)
        flow.request_quote(trip_data(), user=self.user, quote_service=self.quote_service)
        with self.assertRaises(FlowStateError):
            self.finalize(flow, {'method': PaymentMethod.CASH})

    def test_back_never_goes_below_first_step(self):
        flow = self.flow_at_payment()
        self.assertEqual(flow.back(), FlowStep.PASSENGER_DETAILS)
        flow.back()
        flow.back()
        self.assertEqual(flow.back(), FlowStep.TRIP_DETAILS)
        self.assertEqual(flow.step, FlowStep.TRIP_DETAILS)

    def test_pay_later_requires_enabled_account(self):
        flow = self.flow_at_payment()
        with self.assertRaises(PaymentError):
            self.finalize(flow, {'method': PaymentMethod.PAY_LATER})
        self.assertEqual(flow.step, FlowStep.PAYMENT)
        self.assertFalse(Booking.objects.exists())

    def test_pay_later_when_enabled(self):
        Profile.objects.filter(user=self.user).update(pay_later_enabled=True)
        flow = self.flow_at_payment()
        booking = self.finalize(flow, {'method': PaymentMethod.PAY_LATER})
        self.assertEqual(booking.payment_status, PaymentStatus.PENDING)
        self.assertEqual(booking.total_amount, Decimal('96.00'))

    def test_declined_card_keeps_flow_on_payment(self):
        self.stripe.confirm_payment.side_effect = PaymentError('Your card was declined.')
        flow = self.flow_at_payment()

        with self.assertRaises(PaymentError):
            self.finalize(flow, {'method': PaymentMethod.CARD, 'payment_intent_id': 'pi_declined'})

        self.assertEqual(flow.step, FlowStep.PAYMENT)
        self.assertEqual(flow.payment_error, 'Your card was declined.')
        self.assertIsNone(flow.booking_id)
        self.assertFalse(Booking.objects.exists())

    def test_card_payment_places_booking_and_closes_flow(self):
        flow = self.flow_at_payment()
        booking = self.finalize(flow, {'method': PaymentMethod.CARD, 'payment_intent_id': 'pi_ok'})
        booking.refresh_from_db()

        self.stripe.confirm_payment.assert_called_once_with(
            'pi_ok', Decimal('96.00'), expected_metadata={'user_id': self.user.id, 'flow_id': flow.flow_id},
        )
        self.assertEqual(booking.payment_status, PaymentStatus.PAID)
        self.assertEqual(booking.payment_intent_id, 'pi_ok')
        self.assertEqual(booking.passenger, self.user)
        self.assertEqual(booking.passenger_email, 'jordan@example.com')
        self.assertEqual(booking.vehicle_type.slug, 'business_sedan')
        self.assertEqual(booking.estimated_distance, Decimal('10.00'))
        self.assertEqual(flow.booking_id, booking.id)

        with self.assertRaises(FlowStateError):
            flow.back()
        with self.assertRaises(FlowStateError):
            self.finalize(flow, {'method': PaymentMethod.CARD, 'payment_intent_id': 'pi_ok'})
        self.assertEqual(Booking.objects.count(), 1)

    def test_card_intent_covers_what_credit_does_not(self):
        ledger.credit(self.user, '20.00')
        self.stripe.initiate_payment.return_value = {'client_secret': 'secret', 'payment_intent_id': 'pi_new'}
        flow = self.flow_at_payment()

        intent = flow.prepare_card_payment(self.user, credit_amount=Decimal('20.00'), payment_service=self.payment_service)

        self.assertEqual(intent['payment_intent_id'], 'pi_new')
        details = self.stripe.initiate_payment.call_args[0][0]
        self.assertEqual(details['amount'], Decimal('76.00'))
        self.assertEqual(details['metadata']['flow_id'], flow.flow_id)

    def test_full_credit_payment(self):
        ledger.credit(self.user, '200.00')
        flow = self.flow_at_payment()

        booking = self.finalize(flow, {'method': PaymentMethod.CREDIT})

        self.assertEqual(booking.credit_amount_applied, Decimal('96.00'))
        self.assertEqual(booking.payment_status, PaymentStatus.PAID)
        self.assertEqual(ledger.get_balance(self.user), Decimal('104.00'))
        self.stripe.confirm_payment.assert_not_called()

    def test_partial_credit_alone_is_rejected(self):
        ledger.credit(self.user, '50.00')
        flow = self.flow_at_payment()
        with self.assertRaises(PaymentError):
            self.finalize(flow, {'method': PaymentMethod.CREDIT})
        self.assertEqual(ledger.get_balance(self.user), Decimal('50.00'))

    def test_credit_above_balance_is_rejected(self):
        ledger.credit(self.user, '10.00')
        flow = self.flow_at_payment()
        with self.assertRaises(PaymentError):
            self.finalize(flow, {'method': PaymentMethod.CARD, 'credit_amount': '30.00', 'payment_intent_id': 'pi_ok'})
        self.assertIsNotNone(flow.payment_error)

    @mock.patch('limo_main_app.payment_gateways.stripe_payment_gateway.stripe.PaymentIntent.retrieve')
    def test_card_payment_cannot_pay_for_two_bookings(self, mock_retrieve):
        self.payment_service = PaymentService()
        first = self.flow_at_payment()
        mock_retrieve.return_value = {
            'id': 'pi_1', 'status': 'succeeded', 'amount': 9600,
            'metadata': {'flow_id': first.flow_id, 'user_id': str(self.user.id)},
        }
        self.finalize(first, {'method': PaymentMethod.CARD, 'payment_intent_id': 'pi_1'})

        second = self.flow_at_payment()
        with self.assertRaises(PaymentError):
            self.finalize(second, {'method': PaymentMethod.CARD, 'payment_intent_id': 'pi_1'})

        self.assertEqual(Booking.objects.count(), 1)
        self.assertEqual(second.step, FlowStep.PAYMENT)
        self.assertIsNone(second.booking_id)
        self.assertIsNotNone(second.payment_error)

    @mock.patch('limo_main_app.payment_gateways.stripe_payment_gateway.stripe.PaymentIntent.retrieve')
    def test_card_payment_made_for_another_flow_is_rejected(self, mock_retrieve):
        self.payment_service = PaymentService()
        mock_retrieve.return_value = {
            'id': 'pi_1', 'status': 'succeeded', 'amount': 9600,
            'metadata': {'flow_id': 'someone-elses-flow', 'user_id': str(self.user.id)},
        }
        flow = self.flow_at_payment()

        with self.assertRaises(PaymentError):
            self.finalize(flow, {'method': PaymentMethod.CARD, 'payment_intent_id': 'pi_1'})
        self.assertFalse(Booking.objects.exists())
        self.assertEqual(flow.payment_error, 'This card payment does not belong to this booking')

    @mock.patch('credits.ledger.get_balance')
    def test_card_is_refunded_when_booking_cannot_be_created(self, mock_balance):
        # Balance read says 20.00 but the account is empty, so the credit debit fails
        mock_balance.return_value = Decimal('20.00')
        flow = self.flow_at_payment()

        with self.assertRaises(ledger.InsufficientCreditError):
            self.finalize(flow, {'method': PaymentMethod.CARD, 'credit_amount': '20.00', 'payment_intent_id': 'pi_x'})

        self.stripe.confirm_payment.assert_called_once()
        self.stripe.refund.assert_called_once_with({'payment_intent_id': 'pi_x', 'amount': Decimal('76.00')})
        self.assertFalse(Booking.objects.exists())
        self.assertEqual(flow.step, FlowStep.PAYMENT)
        self.assertIsNone(flow.booking_id)
        self.assertIn('could not be completed', flow.payment_error)

    def test_booking_failure_without_card_does_not_refund(self):
        Profile.objects.filter(user=self.user).update(cash_payment_enabled=True)
        flow = self.flow_at_payment()
        booking_service = mock.Mock()
        booking_service.create_booking.side_effect = ValueError('boom')

        with self.assertRaises(ValueError):
            flow.finalize(
                {'method': PaymentMethod.CASH}, user=self.user,
                payment_service=self.payment_service,
                booking_service=booking_service,
                quote_service=self.quote_service,
            )
        self.stripe.refund.assert_not_called()
        self.assertIsNotNone(flow.payment_error)


class BookingFlowStateTest(TestCase):
    def test_to_dict_is_a_copy(self):
        flow = BookingFlow(trip={'service_type': 'transfer'})
        data = flow.to_dict()
        data['trip']['service_type'] = 'hourly'
        self.assertEqual(flow.trip['service_type'], 'transfer')

    def test_expired_flow_is_gone(self):
        cache.clear()
        self.assertIsNone(BookingFlowStore().load('missing'))
