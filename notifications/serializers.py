from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ["id", "type", "title", "body", "is_read", "team", "created_at"]
        read_only_fields = fields


class MarkReadSerializer(serializers.Serializer):
    """Omit ``ids`` (or send an empty list) to mark everything read."""
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), required=False, allow_empty=True)
