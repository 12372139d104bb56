from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from limo_main_app.models import VehicleType, PricingRule
from limo_main_app.utils.constants import ServiceType

# name, description, passengers, luggage, hourly rate,
# transfer (base, per mile, minimum), hourly (rate, minimum hours, minimum fare)
FLEET = [
    ('Business Sedan', 'Comfortable sedan for business travel. Perfect for airport transfers and corporate transportation.',
     3, '2 large, 2 small', '75.00', ('45.00', '3.50', '75.00'), ('75.00', 3, '225.00')),
    ('Business SUV', 'Spacious SUV for groups. Ideal for families or business teams traveling together.',
     6, '4 large, 4 small', '95.00', ('55.00', '4.50', '95.00'), ('95.00', 3, '285.00')),
    ('First Class Sedan', 'Premium luxury sedan with top amenities. For the discerning traveler who expects the best.',
     3, '2 large, 2 small', '125.00', ('75.00', '5.50', '125.00'), ('125.00', 3, '375.00')),
    ('First Class SUV', 'Premium luxury SUV with executive features. Ultimate comfort for important occasions.',
     6, '4 large, 4 small', '150.00', ('95.00', '6.50', '150.00'), ('150.00', 3, '450.00')),
    ('Business Van', 'Large capacity van for groups up to 10. Perfect for corporate events or family outings.',
     10, '10 large, 10 small', '175.00', ('95.00', '7.50', '175.00'), ('175.00', 3, '525.00')),
]


class Command(BaseCommand):
    help = 'Seed the default vehicle types and their transfer and hourly pricing rules'

    def add_arguments(self, parser):
        parser.add_argument('--update', action='store_true', help='Overwrite rates of rules that already exist')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding vehicle types and pricing rules...')
        created_types = created_rules = 0

        for name, description, passengers, luggage, hourly_rate, transfer, hourly in FLEET:
            vehicle_type, created = VehicleType.objects.get_or_create(
                name=name,
                defaults={
                    'description': description,
                    'passenger_capacity': passengers,
                    'luggage_capacity': luggage,
                    'hourly_rate': Decimal(hourly_rate),
                },
            )
            created_types += created

            base_rate, per_mile_rate, transfer_minimum = transfer
            rates = {
                ServiceType.TRANSFER: {
                    'base_rate': Decimal(base_rate),
                    'per_mile_rate': Decimal(per_mile_rate),
                    'minimum_fare': Decimal(transfer_minimum),
                    'gratuity_percent': Decimal('20.00'),
                },
                ServiceType.HOURLY: {
                    'hourly_rate': Decimal(hourly[0]),
                    'minimum_hours': hourly[1],
                    'minimum_fare': Decimal(hourly[2]),
                    'gratuity_percent': Decimal('20.00'),
                },
            }
            for service_type, defaults in rates.items():
                if options['update']:
                    _, created = PricingRule.objects.update_or_create(
                        vehicle_type=vehicle_type.slug, service_type=service_type, defaults=defaults,
                    )
                else:
                    _, created = PricingRule.objects.get_or_create(
                        vehicle_type=vehicle_type.slug, service_type=service_type, defaults=defaults,
                    )
                created_rules += created

        self.stdout.write(self.style.SUCCESS(f'Created {created_types} vehicle types and {created_rules} pricing rules'))
