"""User API views."""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore
from rest_framework_simplejwt.tokens import RefreshToken  # type: ignore

from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import ValidationError

from .events import UserRegistered
from .serializers import RegisterSerializer, UserSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


def _tokens_for_user(user) -> dict[str, str]:
    refresh = RefreshToken.for_user(user)
    return {"refresh": str(refresh), "access": str(refresh.access_token)}


class IsAdminRole(permissions.BasePermission):
    """Only platform administrators."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin_role())


class RegisterView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):  # type: ignore
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with DjangoUnitOfWork() as uow:
            user = serializer.save()
            uow.add_event(UserRegistered(aggregate_id=user.pk, user_id=user.pk, email=user.email))
        logger.info(f"Registered user {user.pk} ({user.email})")
        data = {
            "user": UserSerializer(user).data,
            "tokens": _tokens_for_user(user),
        }
        return Response(data, status=status.HTTP_201_CREATED)


class MeView(APIView):
    """Current user's profile; PATCH updates contact data and the push token."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):  # type: ignore
        return Response(UserSerializer(request.user).data)

    def patch(self, request):  # type: ignore
        serializer = UserSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class UserViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """User directory for administrators.

    ``set_role`` promotes a user to manager or admin.
    """

    serializer_class = UserSerializer
    queryset = User.objects.all().order_by("email")
    permission_classes = [IsAdminRole]
    lookup_value_regex = r"\d+"

    @action(detail=True, methods=["post"], url_path="set-role")
    def set_role(self, request, pk=None):  # type: ignore
        user = self.get_object()
        role = request.data.get("role")
        if role not in User.RoleChoices.values:
            raise ValidationError("Unknown role.", details={"role": role})
        user.role = role
        user.save(update_fields=["role", "updated_at"])
        logger.info(f"User {user.pk} role changed to {role} by {request.user.pk}")
        return Response(UserSerializer(user).data)
