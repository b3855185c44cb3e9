"""API views for notifications."""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.domain.errors import InvalidTransition

from .models import Notification
from .serializers import NotificationSerializer


class NotificationViewSet(viewsets.ReadOnlyModelViewSet):
    """Notifications of the authenticated user. Other users' rows are 404."""

    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ['status', 'type', 'channel']
    lookup_value_regex = r'\d+'

    def get_queryset(self):  # type: ignore
        return Notification.objects.filter(user=self.request.user)

    def _advance(self, mark, target):
        notification = self.get_object()
        if notification.status != target and not mark(notification):
            raise InvalidTransition(
                f"Cannot mark a {notification.status} notification as {target}",
                details={'from': notification.status, 'to': target},
            )
        return Response(self.get_serializer(notification).data)

    @action(detail=True, methods=['post'], url_path='mark-read')
    def mark_read(self, request, pk=None):  # type: ignore
        return self._advance(Notification.mark_read, Notification.Status.READ)

    @action(detail=True, methods=['post'], url_path='mark-delivered')
    def mark_delivered(self, request, pk=None):  # type: ignore
        return self._advance(Notification.mark_delivered, Notification.Status.DELIVERED)
