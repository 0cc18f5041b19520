# notifications/services.py
import logging

from django.db import transaction

from .models import Notification

logger = logging.getLogger("hackteam.notifications")


def notify(users, notif_type, title, body="", team=None):
    """
    Queue notifications for ``users`` once the surrounding transaction commits.

    Nothing is written if the transaction rolls back, so clients never see
    a notification for a change that did not happen. Delivery failures are
    logged and never affect the action that triggered them.
    """
    user_ids = sorted({getattr(u, "pk", u) for u in users if u is not None})
    if not user_ids:
        return

    team_id = getattr(team, "pk", None)

    def _deliver():
        try:
            Notification.objects.bulk_create([
                Notification(user_id=user_id, type=notif_type, title=title, body=body, team_id=team_id)
                for user_id in user_ids
            ])
        except Exception as e:
            logger.warning(f"Failed to deliver '{notif_type}' notification to users {user_ids}: {e}")

    transaction.on_commit(_deliver)
