"""Reassignment policies run after a driver declines a booking"""
import logging
import math
from abc import ABC, abstractmethod

from django.conf import settings
from django.utils.module_loading import import_string
from geopy.distance import geodesic

from ..models import Booking, Driver
from ..utils.constants import BookingStatus, BusinessRules
from .booking_service import BookingService, InvalidTransitionError
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


def get_reassignment_policy():
    return import_string(settings.BOOKING_REASSIGNMENT_POLICY)()


class ReassignmentPolicy(ABC):
    @abstractmethod
    def reassign(self, booking_id):
        """Return the reassigned booking, or None if it stays in the pending pool"""
        pass


class DispatcherQueuePolicy(ReassignmentPolicy):
    """Leave the booking pending and ask dispatchers to pick a new driver"""

    def __init__(self, notification_service=None):
        self.notifications = notification_service or NotificationService()

    def reassign(self, booking_id):
        booking = Booking.objects.select_related('vehicle_type').get(pk=booking_id)
        if booking.status != BookingStatus.PENDING:
            return None
        self.notifications.send_reassignment_needed(booking)
        logger.info(f'[REASSIGN] Booking {booking_id} queued for dispatchers')
        return None


class NearestAvailableDriverPolicy(ReassignmentPolicy):
    """
    Offer the booking to the best-scoring active driver who has not declined it.

    Score (0-100): availability, rating, experience, current workload and
    distance from the pickup. Falls back to the dispatcher queue when no
    driver qualifies.
    """
    ACTIVE_STATUSES = [BookingStatus.PENDING_DRIVER_ACCEPTANCE, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS]

    def __init__(self, booking_service=None, fallback=None):
        self.booking_service = booking_service or BookingService()
        self.fallback = fallback or DispatcherQueuePolicy()

    def candidates(self, booking):
        declined = booking.declines.values_list('driver_id', flat=True)
        qs = Driver.objects.filter(is_active=True).exclude(pk__in=declined).select_related('user')
        if booking.vehicle_type_id:
            qs = qs.filter(vehicle_type_id=booking.vehicle_type_id)
        return qs

    def distance_km(self, booking, driver):
        if None in (booking.pickup_lat, booking.pickup_lon, driver.current_lat, driver.current_lon):
            return None
        return geodesic(
            (float(booking.pickup_lat), float(booking.pickup_lon)),
            (float(driver.current_lat), float(driver.current_lon)),
        ).km

    def score(self, booking, driver):
        score = 30 if driver.is_available else 5
        score += float(driver.rating or 0) / 5 * 20
        score += min(15, math.log(driver.total_rides + 1) * 5)

        active_rides = driver.bookings.filter(status__in=self.ACTIVE_STATUSES).exclude(pk=booking.pk).count()
        score += 5 if active_rides == 0 else -min(15, active_rides * 5)

        distance = self.distance_km(booking, driver)
        if distance is not None:
            if distance > BusinessRules.MAX_REASSIGN_DISTANCE_KM:
                return None
            if distance < 5:
                score += 20
            elif distance < 10:
                score += 15
            elif distance < 20:
                score += 10
            elif distance < 50:
                score += 5
        return max(0, min(100, round(score)))

    def rank(self, booking):
        ranked = []
        for driver in self.candidates(booking):
            score = self.score(booking, driver)
            if score is not None:
                ranked.append((score, driver))
        ranked.sort(key=lambda item: item[0], reverse=True)
        return [driver for _, driver in ranked]

    def reassign(self, booking_id):
        booking = Booking.objects.get(pk=booking_id)
        if booking.status != BookingStatus.PENDING:
            return None

        ranked = self.rank(booking)
        if not ranked:
            logger.info(f'[REASSIGN] No eligible driver for booking {booking_id}')
            return self.fallback.reassign(booking_id)

        driver = ranked[0]
        try:
            booking = self.booking_service.assign_driver(booking_id, driver.id)
        except InvalidTransitionError:
            logger.info(f'[REASSIGN] Booking {booking_id} changed before reassignment, skipping')
            return None
        logger.info(f'[REASSIGN] Booking {booking_id} offered to driver {driver.id}')
        return booking
