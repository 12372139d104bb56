"""User-related serializers"""
from rest_framework import serializers
from django.contrib.auth.models import User
from ..models import Profile


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name"]


class ProfileSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = Profile
        fields = ['id', 'user', 'phone', 'role', 'discount_type', 'discount_value', 'pay_later_enabled', 'cash_payment_enabled']
        read_only_fields = fields
