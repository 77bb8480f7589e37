"""
Users — Views

Auth endpoints (login, refresh, logout, me) and the staff account
ViewSet.

@file users/views.py
"""

import logging

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from core.constants import AUDIT_ACTION_LOGIN, AUDIT_ACTION_LOGOUT
from core.services import AuditService

from .models import User
from .permissions import IsActiveUser, IsAdmin
from .serializers import CustomTokenObtainPairSerializer, UserReadSerializer, UserWriteSerializer
from .services import AuthService, UserService

logger = logging.getLogger('voltstock')


# ---------------------------------------------------------------------------
# Auth views
# ---------------------------------------------------------------------------

class LoginView(APIView):
    """POST /api/v1/auth/login/ — exchange email + password for a JWT pair."""
    permission_classes = [AllowAny]
    throttle_scope = 'anon'

    def post(self, request):
        serializer = CustomTokenObtainPairSerializer(
            data=request.data, context={'request': request},
        )
        serializer.is_valid(raise_exception=True)

        AuthService.log_auth_event(
            action=AUDIT_ACTION_LOGIN,
            user=serializer.user,
            ip_address=AuditService.get_client_ip(request),
        )

        return Response({
            'access': serializer.validated_data['access'],
            'refresh': serializer.validated_data['refresh'],
            'user': serializer.validated_data['user'],
        })


class LogoutView(APIView):
    """POST /api/v1/auth/logout/ — blacklist the refresh token."""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        refresh_token = request.data.get('refresh')
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as exc:
                logger.info('Logout with unusable refresh token for %s: %s', request.user.pk, exc)

        AuthService.log_auth_event(
            action=AUDIT_ACTION_LOGOUT,
            user=request.user,
            ip_address=AuditService.get_client_ip(request),
        )
        return Response(None, status=status.HTTP_200_OK)


class TokenRefreshAPIView(TokenRefreshView):
    """POST /api/v1/auth/refresh/ — rotate the refresh token."""
    pass


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserReadSerializer(request.user).data)


# ---------------------------------------------------------------------------
# Staff accounts
# ---------------------------------------------------------------------------

class UserViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Account management, ADMIN only. Accounts are never deleted; use the
    deactivate action so historic orders keep their placing user.
    """

    permission_classes = [IsActiveUser, IsAdmin]
    filterset_fields = ['role', 'is_active']
    search_fields = ['email', 'name']
    ordering_fields = ['name', 'email', 'created_at']
    ordering = ['name']

    def get_queryset(self):
        return User.objects.all()

    def get_serializer_class(self):
        if self.action in ('list', 'retrieve', 'deactivate'):
            return UserReadSerializer
        return UserWriteSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserService.create_user(actor=request.user, **serializer.validated_data)
        return Response(UserReadSerializer(user).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(
            instance, data=request.data, partial=kwargs.get('partial', False),
        )
        serializer.is_valid(raise_exception=True)
        user = UserService.update_user(
            user_id=instance.pk,
            actor=request.user,
            **serializer.validated_data,
        )
        return Response(UserReadSerializer(user).data)

    @action(detail=True, methods=['post'], url_path='deactivate')
    def deactivate(self, request, pk=None):
        user = UserService.deactivate_user(user_id=self.get_object().pk, actor=request.user)
        return Response(UserReadSerializer(user).data)
