from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from core.constants import GOAL_CHOICES, TIME_CHOICES, SKILLS
from teams import rules
from .models import User


def validate_primary_skills(value):
    limit = rules.max_primary_skills()
    if not value:
        raise serializers.ValidationError("Select at least one primary skill.")
    if len(value) > limit:
        raise serializers.ValidationError(f"Select at most {limit} primary skills.")
    if len(set(value)) != len(value):
        raise serializers.ValidationError("Primary skills must not repeat.")
    return value


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'email',
            'display_name',
            'bio',
            'primary_skills',
            'secondary_skills',
            'role',
            'goal',
            'time_availability',
            'intent',
            'profile_completed',
            'current_team',
            'date_joined',
        ]
        read_only_fields = fields


class PublicUserSerializer(serializers.ModelSerializer):
    """What team leaders see about a candidate"""
    display_name = serializers.CharField(source='name', read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'display_name',
            'bio',
            'primary_skills',
            'secondary_skills',
            'role',
            'goal',
            'time_availability',
        ]
        read_only_fields = fields


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'password', 'display_name']
        read_only_fields = ['id']

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)


class OnboardingSerializer(serializers.ModelSerializer):
    """
    Completes the profile. Intent cannot change afterwards.
    """
    display_name = serializers.CharField(max_length=100)
    intent = serializers.ChoiceField(choices=User.INTENT_CHOICES)
    primary_skills = serializers.ListField(child=serializers.ChoiceField(choices=SKILLS))
    secondary_skills = serializers.ListField(
        child=serializers.ChoiceField(choices=SKILLS), required=False, default=list
    )
    goal = serializers.ChoiceField(choices=GOAL_CHOICES)
    time_availability = serializers.ChoiceField(choices=TIME_CHOICES)
    role = serializers.CharField(max_length=50)

    class Meta:
        model = User
        fields = [
            'display_name',
            'bio',
            'intent',
            'primary_skills',
            'secondary_skills',
            'role',
            'goal',
            'time_availability',
        ]

    def validate_primary_skills(self, value):
        return validate_primary_skills(value)

    def validate(self, attrs):
        if self.instance is not None and self.instance.profile_completed:
            raise serializers.ValidationError("Onboarding is already complete.")
        # A skill is either primary or secondary
        secondary = []
        for skill in attrs.get('secondary_skills', []):
            if skill not in attrs['primary_skills'] and skill not in secondary:
                secondary.append(skill)
        attrs['secondary_skills'] = secondary
        return attrs

    def update(self, instance, validated_data):
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.profile_completed = True
        instance.save()
        return instance


class UpdateProfileSerializer(serializers.ModelSerializer):
    """
    Profile edits after onboarding. Intent and team are not editable here.
    """
    primary_skills = serializers.ListField(
        child=serializers.ChoiceField(choices=SKILLS), required=False
    )
    secondary_skills = serializers.ListField(
        child=serializers.ChoiceField(choices=SKILLS), required=False
    )

    class Meta:
        model = User
        fields = [
            'display_name',
            'bio',
            'primary_skills',
            'secondary_skills',
            'role',
            'goal',
            'time_availability',
        ]

    def validate_primary_skills(self, value):
        return validate_primary_skills(value)
