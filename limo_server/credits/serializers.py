from decimal import Decimal

from rest_framework import serializers
from .models import RideCreditAccount, RideCreditTransaction


class RideCreditAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = RideCreditAccount
        fields = ['id', 'user', 'balance', 'updated_at']
        read_only_fields = fields


class RideCreditTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = RideCreditTransaction
        fields = ['id', 'title', 'description', 'reference_id', 'account', 'transaction_type', 'amount', 'timestamp']
        read_only_fields = fields


class CreditGrantSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    description = serializers.CharField(max_length=150, required=False, allow_blank=True)
