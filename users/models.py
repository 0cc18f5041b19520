# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models

from core.constants import GOAL_CHOICES, TIME_CHOICES


class User(AbstractUser):
    INTENT_JOIN = 'join'
    INTENT_CREATE = 'create'

    INTENT_CHOICES = (
        (INTENT_JOIN, 'Join a team'),
        (INTENT_CREATE, 'Create a team'),
    )

    display_name = models.CharField(max_length=100, blank=True, default='')
    bio = models.TextField(blank=True, null=True)

    # Technical Profile
    primary_skills = models.JSONField(default=list, blank=True, help_text="Ordered list, at most 3 skills")
    secondary_skills = models.JSONField(default=list, blank=True, help_text="Unordered list of supporting skills")
    role = models.CharField(max_length=50, blank=True, default='')
    goal = models.CharField(max_length=10, choices=GOAL_CHOICES, blank=True, default='')
    time_availability = models.CharField(max_length=10, choices=TIME_CHOICES, blank=True, default='')

    # Fixed once onboarding completes
    intent = models.CharField(max_length=10, choices=INTENT_CHOICES, blank=True, null=True)
    profile_completed = models.BooleanField(default=False, help_text="Has the user completed onboarding?")

    # Mirrors TeamMember; written only by teams.services
    current_team = models.ForeignKey(
        'teams.Team',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )

    def __str__(self):
        return self.display_name or self.username

    @property
    def name(self):
        return self.display_name or self.username

    @property
    def is_looking_for_team(self):
        return self.profile_completed and self.intent == self.INTENT_JOIN and self.current_team_id is None
