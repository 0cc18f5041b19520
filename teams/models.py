# teams/models.py
from django.conf import settings
from django.db import models
from django.db.models import Q

from core.constants import GOAL_CHOICES, TIME_CHOICES


class Team(models.Model):
    """
    A hackathon team of 1 to 5 members led by its creator.

    Membership lives in TeamMember rows; each member's ``current_team``
    pointer mirrors it. Both sides are written together by teams.services
    and nowhere else.
    """
    STATE_DRAFT = "DRAFT"
    STATE_OPEN = "OPEN"
    STATE_FINALIZED = "FINALIZED"
    STATE_LOCKED = "LOCKED"

    STATE_CHOICES = [
        (STATE_DRAFT, "Draft"),
        (STATE_OPEN, "Open"),
        (STATE_FINALIZED, "Finalized"),
        (STATE_LOCKED, "Locked"),
    ]

    name = models.CharField(max_length=100)
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="created_teams",
    )
    creator_name = models.CharField(max_length=100, blank=True, default="")

    skills_needed = models.JSONField(default=list, blank=True, help_text="Skills the team is looking for")
    goal = models.CharField(max_length=10, choices=GOAL_CHOICES, blank=True, default="")
    time_commitment = models.CharField(max_length=10, choices=TIME_CHOICES, blank=True, default="")

    state = models.CharField(max_length=16, choices=STATE_CHOICES, default=STATE_OPEN, db_index=True)

    # Communication links
    whatsapp_link = models.URLField(blank=True, null=True)
    discord_link = models.URLField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["state", "created_at"], name="team_state_created_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.state})"

    def member_ids(self):
        """User ids in join order."""
        return list(self.memberships.order_by("joined_at", "id").values_list("user_id", flat=True))

    def member_users(self):
        return [m.user for m in self.memberships.select_related("user").order_by("joined_at", "id")]

    def has_member(self, user_id):
        return self.memberships.filter(user_id=user_id).exists()

    @property
    def current_size(self):
        return self.memberships.count()

    def is_creator(self, user):
        return user is not None and getattr(user, "pk", None) == self.creator_id


class TeamMember(models.Model):
    """
    One row per (team, user). The one-to-one on ``user`` keeps every user
    on at most one team system-wide.
    """
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="memberships")
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="team_membership",
    )
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["joined_at", "id"]
        indexes = [
            models.Index(fields=["team", "joined_at"], name="teammember_team_joined_idx"),
        ]

    def __str__(self):
        return f"{self.user} in {self.team.name}"


class JoinRequest(models.Model):
    """
    A user's ask to join an open team.

    ``user_name`` and ``user_skills`` are copied from the requester when the
    request is created and are never refreshed.
    """
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_REJECTED = "rejected"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_REJECTED, "Rejected"),
    ]

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="join_requests")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="join_requests",
    )

    # Snapshots taken at creation time
    team_name = models.CharField(max_length=100, blank=True, default="")
    user_name = models.CharField(max_length=100, blank=True, default="")
    user_skills = models.JSONField(default=list, blank=True)

    note = models.CharField(max_length=120, blank=True, default="")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["team", "user"],
                condition=Q(status="pending"),
                name="unique_pending_join_request",
            ),
        ]
        indexes = [
            models.Index(fields=["team", "status"], name="joinreq_team_status_idx"),
            models.Index(fields=["user", "status"], name="joinreq_user_status_idx"),
        ]

    def __str__(self):
        return f"{self.user_name or self.user_id} -> {self.team_name or self.team_id} ({self.status})"

    @property
    def is_pending(self):
        return self.status == self.STATUS_PENDING


class TeamInvite(models.Model):
    """
    A team creator's ask for a specific user to join.
    """
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_DECLINED = "declined"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_DECLINED, "Declined"),
    ]

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="invites")
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_team_invites",
    )
    invited_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="team_invites",
    )

    team_name = models.CharField(max_length=100, blank=True, default="")
    invited_by_name = models.CharField(max_length=100, blank=True, default="")
    invited_user_name = models.CharField(max_length=100, blank=True, default="")

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["team", "invited_user"],
                condition=Q(status="pending"),
                name="unique_pending_team_invite",
            ),
        ]
        indexes = [
            models.Index(fields=["invited_user", "status"], name="invite_user_status_idx"),
            models.Index(fields=["team", "status"], name="invite_team_status_idx"),
        ]

    def __str__(self):
        return f"{self.team_name or self.team_id} -> {self.invited_user_name or self.invited_user_id} ({self.status})"

    @property
    def is_pending(self):
        return self.status == self.STATUS_PENDING
