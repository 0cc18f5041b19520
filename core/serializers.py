from rest_framework import serializers
from .models import DomainActivity


class DomainActivitySerializer(serializers.ModelSerializer):
    actor_name = serializers.CharField(source='actor.name', read_only=True)

    class Meta:
        model = DomainActivity
        fields = ['id', 'actor', 'actor_name', 'verb', 'object_id', 'metadata', 'timestamp']
        read_only_fields = fields
