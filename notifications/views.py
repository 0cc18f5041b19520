# notifications/views.py - Notification inbox API

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import Notification
from .serializers import MarkReadSerializer, NotificationSerializer

TRUTHY = ("1", "true", "yes")


class NotificationViewSet(viewsets.GenericViewSet):
    """
    Inbox API

    GET  /api/notifications/me/             newest first
    GET  /api/notifications/me/?unread=true only unread
    GET  /api/notifications/me/?team=<id>   only about one team
    POST /api/notifications/me/read/        {"ids": [...]} or {} for all
    """
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Notification.objects.filter(user=self.request.user)

    @action(detail=False, methods=['get'])
    def me(self, request):
        qs = self.get_queryset()

        if request.query_params.get('unread', '').lower() in TRUTHY:
            qs = qs.filter(is_read=False)

        team_id = request.query_params.get('team')
        if team_id:
            if not team_id.isdigit():
                raise ValidationError({"team": "Must be an integer id."})
            qs = qs.filter(team_id=int(team_id))

        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=False, methods=['post'], url_path='me/read')
    def read(self, request):
        serializer = MarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        qs = self.get_queryset().filter(is_read=False)
        ids = serializer.validated_data.get('ids')
        if ids:
            qs = qs.filter(id__in=ids)

        return Response({"marked_read": qs.update(is_read=True)})
