from django.contrib import admin
from .models import RideCreditAccount, RideCreditTransaction


class RideCreditTransactionInline(admin.TabularInline):
    model = RideCreditTransaction
    extra = 0
    readonly_fields = ['transaction_type', 'amount', 'title', 'description', 'reference_id', 'timestamp']
    can_delete = False


@admin.register(RideCreditAccount)
class RideCreditAccountAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'balance', 'updated_at']
    search_fields = ['user__username', 'user__email']
    readonly_fields = ['balance']
    inlines = [RideCreditTransactionInline]
