"""API tests for the booking flow, booking lifecycle and lookup endpoints"""
from decimal import Decimal
from unittest import mock

import requests
from django.core.cache import cache
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from ..models import Booking
from ..utils.constants import BookingStatus, PaymentStatus, UserRole
from .helpers import make_fleet, make_user, make_driver, make_booking, trip_data


@mock.patch('limo_main_app.services.quote_service.DistanceService')
class BookingFlowAPITest(APITestCase):
    def setUp(self):
        cache.clear()
        make_fleet()
        self.user = make_user('rider')

    def configure_distance(self, distance_class):
        distance_class.return_value.measure.return_value = {
            'distance_miles': Decimal('10.00'),
            'duration_minutes': 25,
        }

    def test_anonymous_quote_then_login_to_continue(self, distance_class):
        self.configure_distance(distance_class)

        response = self.client.post('/api/booking-flow/', trip_data(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['step'], 2)
        self.assertEqual([option['slug'] for option in response.data['vehicle_options']], ['business_sedan', 'business_suv'])
        self.assertEqual(response.data['vehicle_options'][0]['price'], '96.00')
        flow_id = response.data['flow_id']

        response = self.client.post(f'/api/booking-flow/{flow_id}/select-vehicle/', {'vehicle_type': 'business_sedan'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'REQUIRE_AUTH')
        self.assertEqual(response.data['flow_id'], flow_id)
        self.assertEqual(response.data['step'], 2)

        self.client.force_authenticate(self.user)
        response = self.client.get(f'/api/booking-flow/{flow_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['selected_vehicle'], 'business_sedan')

        response = self.client.post(f'/api/booking-flow/{flow_id}/select-vehicle/', {'vehicle_type': 'business_sedan'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['step'], 3)

    def test_flow_is_private_once_bound(self, distance_class):
        self.configure_distance(distance_class)
        self.client.force_authenticate(self.user)
        flow_id = self.client.post('/api/booking-flow/', trip_data(), format='json').data['flow_id']

        self.client.force_authenticate(make_user('someone_else'))
        response = self.client.get(f'/api/booking-flow/{flow_id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_invalid_trip_returns_field_errors(self, distance_class):
        response = self.client.post('/api/booking-flow/', trip_data(pickup={'address': 'typed'}), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'VALIDATION_ERROR')
        self.assertIn('pickup', response.data['errors'])
        self.assertEqual(response.data['flow']['step'], 1)
        distance_class.return_value.measure.assert_not_called()

    def test_unknown_flow(self, distance_class):
        response = self.client.get('/api/booking-flow/does-not-exist/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class BookingAPITest(APITestCase):
    def setUp(self):
        self.sedan, _ = make_fleet()
        self.passenger = make_user('rider')
        self.driver = make_driver('driver1', vehicle_type=self.sedan)
        self.dispatcher = make_user('dispatch', role=UserRole.DISPATCHER)
        self.booking = make_booking(self.passenger, self.sedan, status=BookingStatus.PENDING_DRIVER_ACCEPTANCE,
                                    driver=self.driver, driver_payment=Decimal('70.00'))

    def test_driver_accepts_once(self):
        self.client.force_authenticate(self.driver.user)

        response = self.client.post(f'/api/bookings/{self.booking.id}/accept/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], BookingStatus.CONFIRMED)

        response = self.client.post(f'/api/bookings/{self.booking.id}/accept/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'INVALID_TRANSITION')
        self.assertEqual(response.data['status'], BookingStatus.CONFIRMED)

    def test_passenger_cannot_accept(self):
        self.client.force_authenticate(self.passenger)
        response = self.client.post(f'/api/bookings/{self.booking.id}/accept/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_passengers_cannot_create_bookings_directly(self):
        self.client.force_authenticate(self.passenger)
        response = self.client.post('/api/bookings/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_create_booking_with_driver(self):
        self.client.force_authenticate(self.dispatcher)
        payload = {
            'passenger_id': self.passenger.id,
            'vehicle_type': self.sedan.id,
            'booking_type': 'transfer',
            'pickup': {'address': 'JFK Airport', 'lat': 40.6413, 'lon': -73.7781},
            'destination': {'address': 'Times Square', 'lat': 40.758, 'lon': -73.9855},
            'scheduled_date_time': '2030-06-02T09:00:00Z',
            'total_amount': '150.00',
            'passenger_details': {'name': 'Jordan Smith', 'phone': '+15551234567', 'email': 'jordan@example.com'},
            'payment_method': 'pay_later',
            'driver_id': self.driver.id,
        }
        response = self.client.post('/api/bookings/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data['status'], BookingStatus.PENDING_DRIVER_ACCEPTANCE)
        self.assertEqual(response.data['driver_payment'], '105.00')

    def test_bookings_list_is_scoped_to_passenger(self):
        make_booking(make_user('other_rider'), self.sedan)
        self.client.force_authenticate(self.passenger)
        response = self.client.get('/api/bookings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        results = response.data['results'] if isinstance(response.data, dict) else response.data
        self.assertEqual([item['id'] for item in results], [self.booking.id])

    def test_staff_update_driver_payment(self):
        self.client.force_authenticate(self.dispatcher)
        response = self.client.patch(f'/api/bookings/{self.booking.id}/driver-payment/', {'driver_payment': '82.50'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['driver_payment'], '82.50')

    @mock.patch('limo_main_app.views.booking_views.StripePaymentGateway')
    def test_stripe_webhook_marks_booking_paid(self, gateway_class):
        booking = make_booking(self.passenger, self.sedan, payment_intent_id='pi_webhook')
        gateway_class.return_value.construct_event.return_value = {
            'type': 'payment_intent.succeeded',
            'data': {'object': {'id': 'pi_webhook'}},
        }

        response = self.client.post('/api/webhook/stripe/', data=b'{}', content_type='application/json',
                                    HTTP_STRIPE_SIGNATURE='t=1,v1=sig')

        self.assertEqual(response.status_code, 200)
        booking.refresh_from_db()
        self.assertEqual(booking.payment_status, PaymentStatus.PAID)

    @mock.patch('limo_main_app.views.booking_views.StripePaymentGateway')
    def test_stripe_webhook_rejects_bad_payload(self, gateway_class):
        gateway_class.return_value.construct_event.side_effect = ValueError('Invalid payload')
        response = self.client.post('/api/webhook/stripe/', data=b'nope', content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Booking.objects.filter(payment_status=PaymentStatus.PAID).count(), 0)


class LookupAPITest(APITestCase):
    def setUp(self):
        cache.clear()
        make_fleet()

    def test_available_pricing_rules(self):
        response = self.client.get('/api/pricing-rules/available/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(response.data), ['business_sedan', 'business_suv'])
        self.assertEqual(response.data['business_sedan']['service_type'], 'transfer')

        response = self.client.get('/api/pricing-rules/available/', {'service_type': 'hourly'})
        self.assertEqual(response.data['business_suv']['minimum_hours'], 3)

    def test_calculate_price(self):
        response = self.client.post('/api/calculate-price/', {
            'vehicle_type': 'business_sedan', 'service_type': 'transfer', 'distance': '10',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['price'], '96.00')
        self.assertEqual(response.data['breakdown']['gratuity'], '16.00')

    def test_calculate_price_unknown_vehicle(self):
        response = self.client.post('/api/calculate-price/', {
            'vehicle_type': 'stretch_hummer', 'service_type': 'transfer', 'distance': '10',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'PRICING_RULE_NOT_FOUND')

    @override_settings(RAPIDAPI_KEY='test-key')
    @mock.patch('limo_main_app.services.flight_service.requests.get', side_effect=requests.Timeout)
    def test_flight_search_timeout(self, _get):
        response = self.client.get('/api/flights/search/', {'flight_number': 'BA 117'})
        self.assertEqual(response.status_code, status.HTTP_504_GATEWAY_TIMEOUT)
        self.assertEqual(response.data['error'], 'FLIGHT_LOOKUP_FAILED')

    @override_settings(RAPIDAPI_KEY='test-key')
    @mock.patch('limo_main_app.services.flight_service.requests.get')
    def test_flight_search_falls_back_to_term_search(self, get):
        missing = mock.Mock(status_code=404)
        found = mock.Mock(status_code=200)
        found.json.return_value = {'items': [{'number': 'BA 117'}]}
        get.side_effect = [missing, found]

        response = self.client.get('/api/flights/search/', {'flight_number': 'ba117', 'date': '2030-06-02'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [{'number': 'BA 117'}])
        self.assertIn('/flights/number/BA117/2030-06-02', get.call_args_list[0][0][0])

    def test_flight_search_requires_number(self):
        response = self.client.get('/api/flights/search/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(RAPIDAPI_KEY='test-key')
    @mock.patch('limo_main_app.services.flight_service.requests.get')
    def test_flight_search_rejects_malformed_input(self, get):
        for params in ({'flight_number': 'BA117', 'date': '../../airports'},
                       {'flight_number': 'BA117', 'date': '2030-13-40'},
                       {'flight_number': 'BA117/../x'}):
            response = self.client.get('/api/flights/search/', params)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        get.assert_not_called()
