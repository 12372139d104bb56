from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='VehicleType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True)),
                ('description', models.TextField(blank=True, default='')),
                ('passenger_capacity', models.PositiveIntegerField()),
                ('luggage_capacity', models.CharField(blank=True, default='', max_length=50)),
                ('hourly_rate', models.DecimalField(decimal_places=2, max_digits=10)),
                ('image_url', models.URLField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='PricingRule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('vehicle_type', models.CharField(help_text='Vehicle type slug, e.g. business_sedan', max_length=50)),
                ('service_type', models.CharField(choices=[('transfer', 'Transfer'), ('hourly', 'Hourly')], max_length=20)),
                ('base_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('per_mile_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('distance_tiers', models.JSONField(blank=True, default=list)),
                ('hourly_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('minimum_hours', models.PositiveIntegerField(blank=True, null=True)),
                ('minimum_fare', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('gratuity_percent', models.DecimalField(decimal_places=2, default=20, max_digits=5)),
                ('airport_fees', models.JSONField(blank=True, default=list)),
                ('meet_and_greet', models.JSONField(blank=True, default=dict)),
                ('surge_pricing', models.JSONField(blank=True, default=list)),
                ('effective_start', models.DateTimeField(blank=True, null=True)),
                ('effective_end', models.DateTimeField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.AddConstraint(
            model_name='pricingrule',
            constraint=models.UniqueConstraint(fields=('vehicle_type', 'service_type'), name='unique_vehicle_service'),
        ),
        migrations.CreateModel(
            name='Profile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('phone', models.CharField(blank=True, max_length=20, null=True)),
                ('role', models.CharField(choices=[('passenger', 'Passenger'), ('driver', 'Driver'), ('dispatcher', 'Dispatcher'), ('admin', 'Admin')], db_index=True, default='passenger', max_length=20)),
                ('discount_type', models.CharField(blank=True, choices=[('percentage', 'Percentage'), ('fixed', 'Fixed Amount')], max_length=20, null=True)),
                ('discount_value', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('pay_later_enabled', models.BooleanField(default=False)),
                ('cash_payment_enabled', models.BooleanField(default=False)),
                ('stripe_customer_id', models.CharField(blank=True, max_length=64, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Driver',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('phone', models.CharField(blank=True, max_length=20, null=True)),
                ('license_number', models.CharField(blank=True, max_length=32, null=True)),
                ('vehicle_plate', models.CharField(blank=True, max_length=16, null=True)),
                ('rating', models.DecimalField(decimal_places=2, default=0, max_digits=3)),
                ('total_rides', models.PositiveIntegerField(default=0)),
                ('is_available', models.BooleanField(default=False)),
                ('is_active', models.BooleanField(default=True)),
                ('current_lat', models.DecimalField(blank=True, decimal_places=7, max_digits=10, null=True)),
                ('current_lon', models.DecimalField(blank=True, decimal_places=7, max_digits=10, null=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='driver', to=settings.AUTH_USER_MODEL)),
                ('vehicle_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='drivers', to='limo_main_app.vehicletype')),
            ],
        ),
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('booking_type', models.CharField(choices=[('transfer', 'Transfer'), ('hourly', 'Hourly')], max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('pending_driver_acceptance', 'Pending Driver Acceptance'), ('confirmed', 'Confirmed'), ('in_progress', 'In Progress'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], db_index=True, default='pending', max_length=32)),
                ('pickup_address', models.TextField()),
                ('pickup_lat', models.DecimalField(blank=True, decimal_places=7, max_digits=10, null=True)),
                ('pickup_lon', models.DecimalField(blank=True, decimal_places=7, max_digits=10, null=True)),
                ('destination_address', models.TextField(blank=True, null=True)),
                ('destination_lat', models.DecimalField(blank=True, decimal_places=7, max_digits=10, null=True)),
                ('destination_lon', models.DecimalField(blank=True, decimal_places=7, max_digits=10, null=True)),
                ('via_points', models.JSONField(blank=True, default=list)),
                ('scheduled_date_time', models.DateTimeField()),
                ('estimated_distance', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ('estimated_duration', models.PositiveIntegerField(blank=True, null=True)),
                ('requested_hours', models.PositiveIntegerField(blank=True, null=True)),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('credit_amount_applied', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('driver_payment', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('payment_method', models.CharField(choices=[('card', 'Card (Pay Now)'), ('pay_later', 'Pay Later'), ('cash', 'Cash'), ('credit', 'Ride Credit')], default='card', max_length=20)),
                ('payment_status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid'), ('failed', 'Failed'), ('refunded', 'Refunded')], default='pending', max_length=20)),
                ('payment_intent_id', models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ('passenger_name', models.CharField(max_length=100)),
                ('passenger_phone', models.CharField(max_length=20)),
                ('passenger_email', models.EmailField(max_length=254)),
                ('passenger_count', models.PositiveIntegerField(default=1)),
                ('luggage_count', models.PositiveIntegerField(default=0)),
                ('baby_seat', models.BooleanField(default=False)),
                ('flight_info', models.JSONField(blank=True, null=True)),
                ('special_instructions', models.TextField(blank=True, null=True)),
                ('bill_reference', models.CharField(blank=True, max_length=100, null=True)),
                ('assigned_at', models.DateTimeField(blank=True, null=True)),
                ('accepted_at', models.DateTimeField(blank=True, null=True)),
                ('started_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('cancel_reason', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_bookings', to=settings.AUTH_USER_MODEL)),
                ('driver', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bookings', to='limo_main_app.driver')),
                ('passenger', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bookings', to=settings.AUTH_USER_MODEL)),
                ('vehicle_type', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bookings', to='limo_main_app.vehicletype')),
            ],
            options={
                'ordering': ['-scheduled_date_time'],
                'indexes': [
                    models.Index(fields=['passenger', '-created_at'], name='booking_passenger_created_idx'),
                    models.Index(fields=['driver', 'status'], name='booking_driver_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='BookingDecline',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reason', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('booking', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='declines', to='limo_main_app.booking')),
                ('driver', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='declines', to='limo_main_app.driver')),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
    ]
