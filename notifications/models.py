# notifications/models.py
from django.db import models
from django.conf import settings


class Notification(models.Model):
    TYPE_JOIN_REQUEST_RECEIVED = "join_request_received"
    TYPE_JOIN_REQUEST_ACCEPTED = "join_request_accepted"
    TYPE_JOIN_REQUEST_REJECTED = "join_request_rejected"
    TYPE_INVITE_RECEIVED = "invite_received"
    TYPE_INVITE_ACCEPTED = "invite_accepted"
    TYPE_INVITE_DECLINED = "invite_declined"
    TYPE_MEMBER_REMOVED = "member_removed"
    TYPE_MEMBER_LEFT = "member_left"
    TYPE_LEADER_PROMOTED = "leader_promoted"
    TYPE_TEAM_FINALIZED = "team_finalized"
    TYPE_TEAM_DELETED = "team_deleted"

    TYPE_CHOICES = [
        (TYPE_JOIN_REQUEST_RECEIVED, "Join Request Received"),
        (TYPE_JOIN_REQUEST_ACCEPTED, "Join Request Accepted"),
        (TYPE_JOIN_REQUEST_REJECTED, "Join Request Rejected"),
        (TYPE_INVITE_RECEIVED, "Invite Received"),
        (TYPE_INVITE_ACCEPTED, "Invite Accepted"),
        (TYPE_INVITE_DECLINED, "Invite Declined"),
        (TYPE_MEMBER_REMOVED, "Member Removed"),
        (TYPE_MEMBER_LEFT, "Member Left"),
        (TYPE_LEADER_PROMOTED, "Leader Promoted"),
        (TYPE_TEAM_FINALIZED, "Team Finalized"),
        (TYPE_TEAM_DELETED, "Team Deleted"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=64, choices=TYPE_CHOICES)
    title = models.CharField(max_length=255)
    body = models.TextField(blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    # Optional linking to team
    team = models.ForeignKey(
        "teams.Team",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "is_read"], name="notif_user_read_idx"),
            models.Index(fields=["type"], name="notif_type_idx"),
        ]

    def __str__(self):
        return f"{self.user} - {self.type} - {self.title}"
