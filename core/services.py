import logging

from django.contrib.contenttypes.models import ContentType

from .models import DomainActivity

logger = logging.getLogger("hackteam.core")


class ActivityService:
    @staticmethod
    def log_activity(actor, verb, target, metadata=None):
        """
        Logs a domain activity in the caller's transaction.

        The ledger row commits or rolls back together with the action it
        describes, so a refused action leaves no trace here.
        """
        if metadata is None:
            metadata = {}

        activity = DomainActivity.objects.create(
            actor=actor,
            verb=verb,
            content_type=ContentType.objects.get_for_model(target),
            object_id=target.pk,
            metadata=metadata,
        )

        logger.debug(f"Activity logged: verb={verb}, actor={actor.pk}, target={target.pk}")
        return activity

    @staticmethod
    def history_for(target):
        """Activities recorded against ``target``, newest first."""
        return DomainActivity.objects.filter(
            content_type=ContentType.objects.get_for_model(target),
            object_id=target.pk,
        ).select_related("actor")
