from django.contrib import admin

from .models import Profile, VehicleType, Driver, PricingRule, Booking, BookingDecline
from .services import BookingService, InvalidTransitionError, BookingPermissionError

# Customize admin site
admin.site.site_header = "Limo Booking Administration"
admin.site.site_title = "Limo Booking Admin"
admin.site.index_title = "Bookings, fleet and pricing"


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'role', 'phone', 'discount_type', 'discount_value', 'pay_later_enabled', 'cash_payment_enabled']
    list_filter = ['role', 'pay_later_enabled', 'cash_payment_enabled']
    search_fields = ['user__username', 'user__email', 'phone']
    list_per_page = 50


@admin.register(VehicleType)
class VehicleTypeAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'get_slug', 'passenger_capacity', 'luggage_capacity', 'hourly_rate', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name']

    def get_slug(self, obj):
        return obj.slug
    get_slug.short_description = 'Pricing key'


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'get_username', 'vehicle_type', 'vehicle_plate', 'rating', 'total_rides', 'is_available', 'is_active']
    list_filter = ['is_available', 'is_active', 'vehicle_type']
    search_fields = ['user__username', 'user__email', 'user__first_name', 'user__last_name', 'vehicle_plate']
    ordering = ['id']
    list_per_page = 50

    def get_username(self, obj):
        return obj.user.username
    get_username.short_description = 'Username'
    get_username.admin_order_field = 'user__username'


@admin.register(PricingRule)
class PricingRuleAdmin(admin.ModelAdmin):
    list_display = ['id', 'vehicle_type', 'service_type', 'base_rate', 'per_mile_rate', 'hourly_rate', 'minimum_fare', 'is_active', 'effective_start', 'effective_end']
    list_filter = ['service_type', 'is_active']
    search_fields = ['vehicle_type']
    readonly_fields = ['created_at', 'updated_at']


class BookingDeclineInline(admin.TabularInline):
    model = BookingDecline
    extra = 0
    readonly_fields = ['driver', 'reason', 'created_at']
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['id', 'passenger', 'booking_type', 'vehicle_type', 'status', 'scheduled_date_time', 'total_amount', 'payment_method', 'payment_status', 'driver']
    list_filter = ['status', 'booking_type', 'payment_method', 'payment_status', 'scheduled_date_time']
    search_fields = ['id', 'passenger__username', 'passenger_name', 'passenger_email', 'pickup_address', 'destination_address']
    ordering = ['-scheduled_date_time']
    date_hierarchy = 'scheduled_date_time'
    list_per_page = 50
    # Status changes go through the lifecycle actions, never direct edits
    readonly_fields = [
        'status', 'driver', 'total_amount', 'credit_amount_applied', 'payment_intent_id',
        'assigned_at', 'accepted_at', 'started_at', 'completed_at', 'cancelled_at', 'created_at', 'updated_at',
    ]
    inlines = [BookingDeclineInline]
    actions = ['cancel_bookings']

    def cancel_bookings(self, request, queryset):
        service = BookingService()
        cancelled = 0
        for booking in queryset:
            try:
                service.cancel(booking.id, request.user, reason='Cancelled from admin')
                cancelled += 1
            except (InvalidTransitionError, BookingPermissionError):
                continue
        self.message_user(request, f"{cancelled}/{queryset.count()} bookings cancelled.")
    cancel_bookings.short_description = "Cancel selected bookings"
