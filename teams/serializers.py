# teams/serializers.py

from django.db.models import Prefetch
from rest_framework import serializers

from core.constants import GOAL_CHOICES, TIME_CHOICES, SKILLS
from users.models import User
from . import matching, rules
from .models import Team, TeamMember, JoinRequest, TeamInvite
from .policies import permissions_for


def with_members(queryset):
    """Prefetch memberships in join order for TeamSerializer."""
    return queryset.select_related("creator").prefetch_related(
        Prefetch(
            "memberships",
            queryset=TeamMember.objects.select_related("user").order_by("joined_at", "id"),
        )
    )


class TeamMemberSerializer(serializers.ModelSerializer):
    """Public view of a team member"""
    user_id = serializers.IntegerField(source='user.id', read_only=True)
    display_name = serializers.CharField(source='user.name', read_only=True)
    primary_skills = serializers.ListField(source='user.primary_skills', read_only=True)
    secondary_skills = serializers.ListField(source='user.secondary_skills', read_only=True)
    role = serializers.CharField(source='user.role', read_only=True)
    is_creator = serializers.SerializerMethodField()

    class Meta:
        model = TeamMember
        fields = ['user_id', 'display_name', 'primary_skills', 'secondary_skills', 'role', 'is_creator', 'joined_at']

    def get_is_creator(self, obj):
        return obj.user_id == obj.team.creator_id


class TeamSerializer(serializers.ModelSerializer):
    """Team with roster, skill coverage and the caller's permissions"""
    members = serializers.SerializerMethodField()
    current_size = serializers.SerializerMethodField()
    max_size = serializers.SerializerMethodField()
    is_full = serializers.SerializerMethodField()
    skill_coverage = serializers.SerializerMethodField()
    missing_skills = serializers.SerializerMethodField()
    permissions = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = [
            'id', 'name', 'creator', 'creator_name', 'skills_needed', 'goal', 'time_commitment',
            'state', 'whatsapp_link', 'discord_link', 'members', 'current_size', 'max_size',
            'is_full', 'skill_coverage', 'missing_skills', 'permissions', 'created_at',
        ]
        read_only_fields = fields

    def _memberships(self, obj):
        return list(obj.memberships.all())

    def _member_primary_skills(self, obj):
        return [m.user.primary_skills or [] for m in self._memberships(obj)]

    def get_members(self, obj):
        return TeamMemberSerializer(self._memberships(obj), many=True).data

    def get_current_size(self, obj):
        return len(self._memberships(obj))

    def get_max_size(self, obj):
        return rules.max_team_size()

    def get_is_full(self, obj):
        return len(self._memberships(obj)) >= rules.max_team_size()

    def get_skill_coverage(self, obj):
        return matching.skill_coverage(obj.skills_needed, self._member_primary_skills(obj))

    def get_missing_skills(self, obj):
        return matching.missing_skills(obj.skills_needed, self._member_primary_skills(obj))

    def get_permissions(self, obj):
        request = self.context.get('request')
        user = getattr(request, 'user', None)
        return permissions_for(obj, user, member_count=len(self._memberships(obj)))

    def to_representation(self, obj):
        data = super().to_representation(obj)
        request = self.context.get('request')
        user = getattr(request, 'user', None)
        # Chat links are for members only
        member_ids = {m.user_id for m in self._memberships(obj)}
        if not user or user.id not in member_ids:
            data['whatsapp_link'] = None
            data['discord_link'] = None
        return data


class TeamCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    skills_needed = serializers.ListField(
        child=serializers.ChoiceField(choices=SKILLS),
        allow_empty=False,
    )
    goal = serializers.ChoiceField(choices=GOAL_CHOICES, required=False, allow_blank=True, default="")
    time_commitment = serializers.ChoiceField(choices=TIME_CHOICES, required=False, allow_blank=True, default="")
    whatsapp_link = serializers.URLField(required=False, allow_blank=True, allow_null=True)
    discord_link = serializers.URLField(required=False, allow_blank=True, allow_null=True)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Please enter a team name")
        return value


class TeamLinksSerializer(serializers.Serializer):
    whatsapp_link = serializers.URLField(required=False, allow_blank=True, allow_null=True)
    discord_link = serializers.URLField(required=False, allow_blank=True, allow_null=True)


class LeaveTeamSerializer(serializers.Serializer):
    promoted_creator_id = serializers.IntegerField(required=False, allow_null=True)


class JoinRequestCreateSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, default="", trim_whitespace=True)


class JoinRequestSerializer(serializers.ModelSerializer):
    """Join request with the requester snapshot taken at creation time"""

    class Meta:
        model = JoinRequest
        fields = [
            'id', 'team', 'team_name', 'user', 'user_name', 'user_skills', 'note',
            'status', 'created_at', 'resolved_at',
        ]
        read_only_fields = fields


class TeamInviteCreateSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()

    def validate_user_id(self, value):
        if not User.objects.filter(pk=value).exists():
            raise serializers.ValidationError("User not found")
        return value


class TeamInviteSerializer(serializers.ModelSerializer):

    class Meta:
        model = TeamInvite
        fields = [
            'id', 'team', 'team_name', 'invited_by', 'invited_by_name', 'invited_user',
            'invited_user_name', 'status', 'created_at', 'resolved_at',
        ]
        read_only_fields = fields


class MatchSerializer(serializers.Serializer):
    team_id = serializers.IntegerField()
    score = serializers.IntegerField()
    exact_primary_matches = serializers.ListField(child=serializers.CharField())
    exact_secondary_matches = serializers.ListField(child=serializers.CharField())
    fuzzy_matches = serializers.ListField(child=serializers.CharField())
