import logging

from django.contrib.auth.models import User
from django.db.models import F
from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from credits.models import RideCreditAccount
from .models import Profile, Booking, Driver
from .utils.constants import BookingStatus

logger = logging.getLogger(__name__)


@receiver(post_save, sender=User)
def create_user_accounts(sender, instance, created, **kwargs):
    """Every new user gets a profile and an empty ride credit account"""
    if not created:
        return
    Profile.objects.get_or_create(user=instance)
    RideCreditAccount.objects.get_or_create(user=instance)
    logger.info(f'[SIGNAL] Created profile and credit account for {instance.username}')


@receiver(pre_save, sender=Booking)
def remember_previous_status(sender, instance, **kwargs):
    if instance.pk:
        instance._previous_status = Booking.objects.filter(pk=instance.pk).values_list('status', flat=True).first()
    else:
        instance._previous_status = None


@receiver(post_save, sender=Booking)
def count_completed_ride(sender, instance, created, **kwargs):
    """Bump the driver's ride counter once per completed booking"""
    previous_status = getattr(instance, '_previous_status', None)
    if instance.status == BookingStatus.COMPLETED and previous_status != BookingStatus.COMPLETED and instance.driver_id:
        Driver.objects.filter(pk=instance.driver_id).update(total_rides=F('total_rides') + 1)
        logger.info(f'[SIGNAL] Booking {instance.id} completed, driver {instance.driver_id} ride count updated')
