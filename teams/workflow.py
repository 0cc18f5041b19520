# teams/workflow.py
"""
Join requests (user → team) and invites (team → user).

Both are resolved exactly once:
    JoinRequest: pending → accepted | rejected
    TeamInvite:  pending → accepted | declined

Accepting runs the status change and the membership write in the same
transaction, so a refused accept leaves the record pending. Rejecting or
declining is a plain status write; repeating it is a no-op.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from core.constants import (
    ACTIVITY_INVITE_ACCEPTED,
    ACTIVITY_INVITE_DECLINED,
    ACTIVITY_INVITE_SENT,
    ACTIVITY_MEMBER_JOINED,
    ACTIVITY_REQUEST_ACCEPTED,
    ACTIVITY_REQUEST_REJECTED,
    ACTIVITY_REQUEST_SENT,
)
from core.services import ActivityService
from notifications.models import Notification
from notifications.services import notify

from . import errors, rules
from .models import Team, JoinRequest, TeamInvite
from .services import _add_member_locked, _pk, lock_team, lock_user

logger = logging.getLogger('hackteam.teams')

User = get_user_model()


def _lock_join_request(request_id) -> JoinRequest:
    try:
        return JoinRequest.objects.select_for_update().get(pk=request_id)
    except JoinRequest.DoesNotExist:
        raise errors.request_not_found()


def _lock_invite(invite_id) -> TeamInvite:
    try:
        return TeamInvite.objects.select_for_update().get(pk=invite_id)
    except TeamInvite.DoesNotExist:
        raise errors.invite_not_found()


def _team_id_of(model, pk, not_found):
    team_id = model.objects.filter(pk=pk).values_list("team_id", flat=True).first()
    if team_id is None:
        raise not_found()
    return team_id


# ─────────────────────────────────────────────────────────────
# Join requests
# ─────────────────────────────────────────────────────────────

def clean_note(note) -> str:
    note = (note or "").strip()
    limit = rules.join_note_max_length()
    if len(note) > limit:
        raise errors.validation("NOTE_TOO_LONG", f"Note must be {limit} characters or less.")
    return note


def create_join_request(user, team, note="") -> JoinRequest:
    """
    Ask to join an OPEN team.

    The requester's name and primary skills are copied onto the request and
    not refreshed afterwards. A user may hold a limited number of pending
    requests (3 by default) and one per team.
    """
    note = clean_note(note)

    with transaction.atomic():
        locked_team = lock_team(_pk(team))
        requester = lock_user(_pk(user))

        if not requester.profile_completed:
            raise errors.profile_incomplete()
        if requester.intent != User.INTENT_JOIN:
            raise errors.wrong_intent(User.INTENT_JOIN)
        if requester.current_team_id is not None:
            raise errors.already_on_a_team()

        if locked_team.state != Team.STATE_OPEN:
            raise errors.team_closed()
        if locked_team.memberships.count() >= rules.max_team_size():
            raise errors.team_full()

        latest_status = (
            JoinRequest.objects.filter(team=locked_team, user=requester)
            .order_by("-created_at", "-id")
            .values_list("status", flat=True)
            .first()
        )
        if latest_status == JoinRequest.STATUS_PENDING:
            raise errors.duplicate_request()
        if latest_status is not None:
            raise errors.request_already_resolved(latest_status)

        pending = JoinRequest.objects.filter(user=requester, status=JoinRequest.STATUS_PENDING).count()
        if pending >= rules.max_pending_requests():
            raise errors.too_many_pending_requests()

        try:
            with transaction.atomic():
                join_request = JoinRequest.objects.create(
                    team=locked_team,
                    user=requester,
                    team_name=locked_team.name,
                    user_name=requester.name,
                    user_skills=list(requester.primary_skills or []),
                    note=note,
                )
        except IntegrityError:
            raise errors.duplicate_request()

        ActivityService.log_activity(
            actor=requester,
            verb=ACTIVITY_REQUEST_SENT,
            target=locked_team,
            metadata={"request_id": join_request.id},
        )
        notify(
            [locked_team.creator_id],
            Notification.TYPE_JOIN_REQUEST_RECEIVED,
            title=f"{requester.name} wants to join {locked_team.name}",
            body=note,
            team=locked_team,
        )

    logger.info(f"Join request created: request={join_request.id}, team={locked_team.id}, user={requester.id}")
    return join_request


def accept_join_request(join_request, acting_user) -> JoinRequest:
    """
    Creator accepts a pending request, adding the requester to the team.

    The status write and the membership write commit together; any refusal
    (TEAM_FULL, TEAM_CLOSED, ALREADY_ON_A_TEAM, ...) leaves the request pending.
    """
    request_id = _pk(join_request)
    team_id = _team_id_of(JoinRequest, request_id, errors.request_not_found)

    with transaction.atomic():
        locked_team = lock_team(team_id)
        locked_request = _lock_join_request(request_id)

        if not locked_team.is_creator(acting_user):
            raise errors.not_authorized("Only the team leader can accept requests.")
        if not locked_request.is_pending:
            raise errors.already_resolved(locked_request.status)

        requester = lock_user(locked_request.user_id)
        _add_member_locked(locked_team, requester)

        locked_request.status = JoinRequest.STATUS_ACCEPTED
        locked_request.resolved_at = timezone.now()
        locked_request.resolved_by = acting_user
        locked_request.save(update_fields=["status", "resolved_at", "resolved_by"])

        ActivityService.log_activity(
            actor=acting_user,
            verb=ACTIVITY_REQUEST_ACCEPTED,
            target=locked_team,
            metadata={"request_id": locked_request.id, "user_id": requester.id},
        )
        ActivityService.log_activity(
            actor=requester,
            verb=ACTIVITY_MEMBER_JOINED,
            target=locked_team,
            metadata={"user_id": requester.id, "team_name": locked_team.name, "via": "request"},
        )
        notify(
            [requester],
            Notification.TYPE_JOIN_REQUEST_ACCEPTED,
            title=f"Welcome to {locked_team.name}!",
            team=locked_team,
        )

    logger.info(f"Join request accepted: request={request_id}, team={team_id}, by={acting_user.id}")
    return locked_request


def reject_join_request(join_request, acting_user) -> JoinRequest:
    """
    Creator rejects a pending request. Rejecting it again changes nothing.
    """
    request_id = _pk(join_request)
    team_id = _team_id_of(JoinRequest, request_id, errors.request_not_found)

    with transaction.atomic():
        locked_team = lock_team(team_id)
        locked_request = _lock_join_request(request_id)

        if not locked_team.is_creator(acting_user):
            raise errors.not_authorized("Only the team leader can reject requests.")
        if locked_request.status == JoinRequest.STATUS_REJECTED:
            return locked_request
        if not locked_request.is_pending:
            raise errors.already_resolved(locked_request.status)
        if locked_team.state != Team.STATE_OPEN:
            raise errors.team_closed()

        locked_request.status = JoinRequest.STATUS_REJECTED
        locked_request.resolved_at = timezone.now()
        locked_request.resolved_by = acting_user
        locked_request.save(update_fields=["status", "resolved_at", "resolved_by"])

        ActivityService.log_activity(
            actor=acting_user,
            verb=ACTIVITY_REQUEST_REJECTED,
            target=locked_team,
            metadata={"request_id": locked_request.id, "user_id": locked_request.user_id},
        )
        notify(
            [locked_request.user_id],
            Notification.TYPE_JOIN_REQUEST_REJECTED,
            title=f"Your request to join {locked_team.name} was declined",
            team=locked_team,
        )

    logger.info(f"Join request rejected: request={request_id}, team={team_id}, by={acting_user.id}")
    return locked_request


# ─────────────────────────────────────────────────────────────
# Invites
# ─────────────────────────────────────────────────────────────

def send_invite(team, acting_user, invited_user) -> TeamInvite:
    """
    Creator invites a user who is looking for a team.
    """
    with transaction.atomic():
        locked_team = lock_team(_pk(team))

        if not locked_team.is_creator(acting_user):
            raise errors.not_authorized("Only the team leader can send invites.")
        if locked_team.state != Team.STATE_OPEN:
            raise errors.team_closed()
        if locked_team.memberships.count() >= rules.max_team_size():
            raise errors.team_full()

        target = lock_user(_pk(invited_user))
        if target.id == acting_user.id:
            raise errors.validation("INVALID_INVITE", "You cannot invite yourself.")
        if not target.profile_completed or target.intent != User.INTENT_JOIN:
            raise errors.validation("NOT_LOOKING_FOR_TEAM", "This user is not looking for a team.")
        if target.current_team_id is not None:
            raise errors.already_on_a_team(f"{target.name} is")

        try:
            with transaction.atomic():
                invite = TeamInvite.objects.create(
                    team=locked_team,
                    invited_by=acting_user,
                    invited_user=target,
                    team_name=locked_team.name,
                    invited_by_name=acting_user.name,
                    invited_user_name=target.name,
                )
        except IntegrityError:
            raise errors.duplicate_invite()

        ActivityService.log_activity(
            actor=acting_user,
            verb=ACTIVITY_INVITE_SENT,
            target=locked_team,
            metadata={"invite_id": invite.id, "user_id": target.id},
        )
        notify(
            [target],
            Notification.TYPE_INVITE_RECEIVED,
            title=f"{acting_user.name} invited you to join {locked_team.name}",
            team=locked_team,
        )

    logger.info(f"Invite sent: invite={invite.id}, team={locked_team.id}, user={target.id}")
    return invite


def accept_invite(invite, acting_user) -> TeamInvite:
    """
    Invited user accepts, joining the team.

    The team is re-read inside the transaction: it must still exist, be OPEN
    and have room. Once committed, the user's other pending invites are
    declined on a best-effort basis.
    """
    invite_id = _pk(invite)
    team_id = _team_id_of(TeamInvite, invite_id, errors.invite_not_found)

    with transaction.atomic():
        locked_team = lock_team(team_id)
        locked_invite = _lock_invite(invite_id)

        if locked_invite.invited_user_id != acting_user.id:
            raise errors.not_authorized("This invite is not addressed to you.")
        if not locked_invite.is_pending:
            raise errors.already_resolved(locked_invite.status)

        member = lock_user(acting_user.id)
        _add_member_locked(locked_team, member)

        locked_invite.status = TeamInvite.STATUS_ACCEPTED
        locked_invite.resolved_at = timezone.now()
        locked_invite.save(update_fields=["status", "resolved_at"])

        ActivityService.log_activity(
            actor=member,
            verb=ACTIVITY_INVITE_ACCEPTED,
            target=locked_team,
            metadata={"invite_id": locked_invite.id},
        )
        ActivityService.log_activity(
            actor=member,
            verb=ACTIVITY_MEMBER_JOINED,
            target=locked_team,
            metadata={"user_id": member.id, "team_name": locked_team.name, "via": "invite"},
        )
        notify(
            [locked_team.creator_id],
            Notification.TYPE_INVITE_ACCEPTED,
            title=f"{member.name} joined {locked_team.name}",
            team=locked_team,
        )

    logger.info(f"Invite accepted: invite={invite_id}, team={team_id}, user={acting_user.id}")

    decline_other_invites(acting_user, exclude_id=invite_id)
    return locked_invite


def decline_other_invites(user, exclude_id=None) -> int:
    """
    Decline every other pending invite of ``user``, one at a time.

    Runs after the accept transaction has committed. Any database failure
    here is logged and swallowed; the accept it follows stays committed.
    """
    user_id = _pk(user)

    try:
        others = TeamInvite.objects.filter(invited_user_id=user_id, status=TeamInvite.STATUS_PENDING)
        if exclude_id is not None:
            others = others.exclude(pk=exclude_id)
        invite_ids = list(others.values_list("pk", flat=True))
    except DatabaseError as e:
        logger.warning(f"Could not load pending invites of user {user_id}: {e}")
        return 0

    declined = 0
    for invite_id in invite_ids:
        try:
            declined += TeamInvite.objects.filter(pk=invite_id, status=TeamInvite.STATUS_PENDING).update(
                status=TeamInvite.STATUS_DECLINED,
                resolved_at=timezone.now(),
            )
        except DatabaseError as e:
            logger.warning(f"Failed to decline invite {invite_id} for user {user_id}: {e}")

    if declined:
        logger.info(f"Declined {declined} other pending invites for user={user_id}")
    return declined


def decline_invite(invite, acting_user) -> TeamInvite:
    """
    Invited user declines. Declining it again changes nothing.
    """
    invite_id = _pk(invite)

    with transaction.atomic():
        locked_invite = _lock_invite(invite_id)

        if locked_invite.invited_user_id != acting_user.id:
            raise errors.not_authorized("This invite is not addressed to you.")
        if locked_invite.status == TeamInvite.STATUS_DECLINED:
            return locked_invite
        if not locked_invite.is_pending:
            raise errors.already_resolved(locked_invite.status)

        locked_invite.status = TeamInvite.STATUS_DECLINED
        locked_invite.resolved_at = timezone.now()
        locked_invite.save(update_fields=["status", "resolved_at"])

        ActivityService.log_activity(
            actor=acting_user,
            verb=ACTIVITY_INVITE_DECLINED,
            target=locked_invite.team,
            metadata={"invite_id": locked_invite.id},
        )
        notify(
            [locked_invite.invited_by_id],
            Notification.TYPE_INVITE_DECLINED,
            title=f"{acting_user.name} declined your invite to {locked_invite.team_name}",
            team=locked_invite.team,
        )

    logger.info(f"Invite declined: invite={invite_id}, user={acting_user.id}")
    return locked_invite


# ─────────────────────────────────────────────────────────────
# Read-side queries (snapshot reads, not transactional)
# ─────────────────────────────────────────────────────────────

def pending_requests_for_team(team):
    return JoinRequest.objects.filter(team_id=_pk(team), status=JoinRequest.STATUS_PENDING).order_by("created_at", "id")


def requests_for_user(user):
    return JoinRequest.objects.filter(user_id=_pk(user)).order_by("-created_at", "-id")


def pending_invites_for_user(user):
    return (
        TeamInvite.objects.filter(invited_user_id=_pk(user), status=TeamInvite.STATUS_PENDING)
        .select_related("team")
        .order_by("-created_at", "-id")
    )


def pending_invites_for_team(team):
    return TeamInvite.objects.filter(team_id=_pk(team), status=TeamInvite.STATUS_PENDING).order_by("-created_at", "-id")
