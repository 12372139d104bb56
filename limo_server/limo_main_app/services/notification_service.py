"""Notification service for SMS and email alerts around booking changes"""
import logging

from django.conf import settings
from django.contrib.auth.models import User
from django.core.mail import send_mail

from ..utils.constants import UserRole
from ..utils.sms import send_sms

logger = logging.getLogger(__name__)


class NotificationService:
    """Every method is fire-and-forget: failures are logged, never raised"""

    def _sms(self, phone, body, context):
        result = send_sms(phone, body)
        if result['status'] != 'success':
            logger.error(f'[NOTIFY] SMS for {context} not sent: {result["message"]}')
        return result

    def _staff_emails(self):
        emails = list(settings.ADMIN_NOTIFICATION_EMAILS)
        emails += list(
            User.objects.filter(profile__role__in=UserRole.STAFF, is_active=True)
            .exclude(email='')
            .values_list('email', flat=True)
        )
        return sorted(set(emails))

    def _email_staff(self, subject, message, context):
        recipients = self._staff_emails()
        if not recipients:
            logger.warning(f'[NOTIFY] No staff recipients for {context}')
            return 0
        try:
            return send_mail(subject, message, settings.DEFAULT_FROM_EMAIL, recipients)
        except Exception as e:
            logger.error(f'[NOTIFY] Email for {context} failed: {e}')
            return 0

    def send_driver_assignment(self, booking):
        driver = booking.driver
        if not driver:
            return None
        body = (
            f"New ride #{booking.id}: pickup {booking.pickup_address} on "
            f"{booking.scheduled_date_time:%Y-%m-%d %H:%M}. Your payout: {booking.driver_payment}. "
            f"Please accept or decline in the app."
        )
        return self._sms(driver.phone, body, f'booking {booking.id} assignment')

    def send_driver_accepted(self, booking):
        driver_name = str(booking.driver) if booking.driver else 'Your driver'
        body = (
            f"Your ride #{booking.id} on {booking.scheduled_date_time:%Y-%m-%d %H:%M} is confirmed. "
            f"{driver_name} will pick you up at {booking.pickup_address}."
        )
        return self._sms(booking.passenger_phone, body, f'booking {booking.id} confirmation')

    def send_driver_declined(self, booking, driver, reason=None):
        message = (
            f"Driver {driver} declined booking #{booking.id} "
            f"({booking.pickup_address}, {booking.scheduled_date_time:%Y-%m-%d %H:%M}).\n"
            f"Reason: {reason or 'not given'}\n"
            f"The booking is back in the pending queue."
        )
        return self._email_staff(f'Booking #{booking.id} declined', message, f'booking {booking.id} decline')

    def send_reassignment_needed(self, booking):
        message = (
            f"Booking #{booking.id} needs a driver.\n"
            f"Pickup: {booking.pickup_address}\n"
            f"When: {booking.scheduled_date_time:%Y-%m-%d %H:%M}\n"
            f"Vehicle: {booking.vehicle_type}"
        )
        return self._email_staff(f'Booking #{booking.id} needs a driver', message, f'booking {booking.id} reassignment')
