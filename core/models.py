#  core/models.py
from django.db import models
from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType


class DomainActivity(models.Model):
    """
    Immutable ledger of all business-significant team actions.
    Source of truth for: audit trail, activity feeds, notifications.
    """
    # Who did it?
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="activities",
    )

    # What happened? (e.g., 'team.finalized')
    verb = models.CharField(max_length=64, db_index=True)

    # To what? (Generic Foreign Key; may dangle once a team is deleted)
    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    object_id = models.PositiveIntegerField()
    content_object = GenericForeignKey("content_type", "object_id")

    # Extra data (Snapshot logic, e.g., team name at time of logging)
    metadata = models.JSONField(default=dict, blank=True)

    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name_plural = "Domain Activities"
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["actor", "-timestamp"], name="activity_actor_ts_idx"),
            models.Index(fields=["content_type", "object_id"], name="activity_target_idx"),
        ]

    def __str__(self):
        return f"{self.actor} - {self.verb} - {self.timestamp}"
