"""Booking flow endpoints - one URL per flow transition"""
import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.authentication import JWTAuthentication

from ..serializers import (
    BookingFlowSerializer, BookingSerializer, SelectVehicleSerializer, PaymentSelectionSerializer,
)
from ..services import (
    BookingFlowStore, QuoteService, QuoteValidationError, PricingConfigurationError,
    DistanceLookupError, AuthenticationRequired, FlowStateError, PaymentError, InsufficientCreditError,
)
from ..throttles import QuoteRateThrottle
from ..utils.constants import PaymentMethod
from .responses import error_response

logger = logging.getLogger(__name__)


class BookingFlowViewSet(viewsets.ViewSet):
    """
    create   POST /booking-flow/                         trip details -> new flow with a quote
    retrieve GET  /booking-flow/{flow_id}/               resume a flow (e.g. after logging in)
    actions  quote, select-vehicle, passenger, payment-intent, finalize, back
    """
    authentication_classes = [JWTAuthentication]
    permission_classes = [AllowAny]
    store_class = BookingFlowStore

    def get_throttles(self):
        if self.action in ('create', 'quote'):
            return [QuoteRateThrottle()]
        return super().get_throttles()

    def get_flow(self, pk):
        """Flows bound to an account are only visible to that account"""
        flow = self.store_class().load(pk)
        user = self.request.user
        if flow is None or (flow.user_id is not None and (not user.is_authenticated or user.id != flow.user_id)):
            raise NotFound('Booking flow not found or expired')
        return flow

    def flow_data(self, flow):
        data = flow.to_dict()
        data['vehicle_options'] = QuoteService().vehicle_options(flow.quote)
        return BookingFlowSerializer(data).data

    def run_transition(self, flow, transition, success_status=status.HTTP_200_OK):
        """
        Apply a transition and save the flow whatever the outcome.

        `transition` returns extra response fields or None. A failed transition
        leaves the flow on its last good step; that state is saved and returned.
        """
        try:
            extra = transition()
        except QuoteValidationError as e:
            return error_response('VALIDATION_ERROR', 'Invalid trip details', status.HTTP_400_BAD_REQUEST,
                                  errors=e.errors, flow=self.flow_data(flow))
        except PricingConfigurationError as e:
            return error_response('PRICING_NOT_CONFIGURED', str(e), status.HTTP_503_SERVICE_UNAVAILABLE,
                                  flow=self.flow_data(flow))
        except DistanceLookupError as e:
            return error_response('DISTANCE_LOOKUP_FAILED', str(e), status.HTTP_502_BAD_GATEWAY,
                                  flow=self.flow_data(flow))
        except AuthenticationRequired as e:
            return error_response('REQUIRE_AUTH', str(e), status.HTTP_401_UNAUTHORIZED,
                                  flow_id=e.flow_id, step=e.step)
        except PaymentError as e:
            return error_response('PAYMENT_FAILED', str(e), status.HTTP_402_PAYMENT_REQUIRED,
                                  flow=self.flow_data(flow))
        except InsufficientCreditError as e:
            return error_response('INSUFFICIENT_CREDIT', str(e), status.HTTP_400_BAD_REQUEST,
                                  flow=self.flow_data(flow))
        except FlowStateError as e:
            return error_response('INVALID_STEP', str(e), status.HTTP_400_BAD_REQUEST,
                                  flow=self.flow_data(flow))
        finally:
            self.store_class().save(flow)

        return Response({**self.flow_data(flow), **(extra or {})}, status=success_status)

    def create(self, request):
        flow = self.store_class().create(user=request.user)

        def quote():
            flow.request_quote(request.data, user=request.user)
        return self.run_transition(flow, quote, success_status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        return Response(self.flow_data(self.get_flow(pk)))

    @action(detail=True, methods=['POST'])
    def quote(self, request, pk=None):
        flow = self.get_flow(pk)

        def quote():
            flow.request_quote(request.data, user=request.user)
        return self.run_transition(flow, quote)

    @action(detail=True, methods=['POST'], url_path='select-vehicle')
    def select_vehicle(self, request, pk=None):
        flow = self.get_flow(pk)
        serializer = SelectVehicleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        def select():
            flow.select_vehicle(serializer.validated_data['vehicle_type'], user=request.user)
        return self.run_transition(flow, select)

    @action(detail=True, methods=['POST'])
    def passenger(self, request, pk=None):
        flow = self.get_flow(pk)

        def submit():
            flow.submit_passenger_details(request.data, user=request.user)
        return self.run_transition(flow, submit)

    @action(detail=True, methods=['POST'], url_path='payment-intent')
    def payment_intent(self, request, pk=None):
        flow = self.get_flow(pk)
        selection = PaymentSelectionSerializer(data={'method': PaymentMethod.CARD, 'credit_amount': request.data.get('credit_amount')})
        selection.is_valid(raise_exception=True)

        def create_intent():
            intent = flow.prepare_card_payment(request.user, credit_amount=selection.validated_data.get('credit_amount'))
            return {'payment_intent': intent}
        return self.run_transition(flow, create_intent)

    @action(detail=True, methods=['POST'])
    def finalize(self, request, pk=None):
        flow = self.get_flow(pk)

        def place_booking():
            booking = flow.finalize(request.data, user=request.user)
            return {'booking': BookingSerializer(booking, context={'request': request}).data}
        return self.run_transition(flow, place_booking, success_status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['POST'])
    def back(self, request, pk=None):
        flow = self.get_flow(pk)

        def step_back():
            flow.back()
        return self.run_transition(flow, step_back)
