"""
Users — Serializers

JWT login with role claims, and read/write serializers for staff
accounts.

@file users/serializers.py
"""

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import User
from .services import AuthService


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Adds email, name and role to the token payload."""

    username_field = User.USERNAME_FIELD

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['name'] = user.name
        token['role'] = user.role
        return token

    def validate(self, attrs):
        user = AuthService.authenticate(
            email=attrs.get('email', ''),
            password=attrs.get('password', ''),
        )
        if user is None:
            raise serializers.ValidationError(
                {'detail': 'Invalid credentials or account deactivated.'},
                code='authentication_failed',
            )

        data = super().validate(attrs)
        data['user'] = UserReadSerializer(self.user).data
        return data


class UserReadSerializer(serializers.ModelSerializer):
    role_display = serializers.CharField(source='get_role_display', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'name', 'role', 'role_display',
            'is_staff', 'is_active', 'date_joined', 'last_login',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class UserWriteSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False, min_length=10)

    class Meta:
        model = User
        fields = ['email', 'name', 'role', 'is_staff', 'password']

    def validate_email(self, value):
        value = value.strip().lower()
        qs = User.objects.filter(email__iexact=value)
        if self.instance:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError('Email already in use.')
        return value

    def validate(self, attrs):
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': 'A password is required for new accounts.'})
        return attrs
