# teams/services.py
"""
Membership transactions.

Every function here runs in one ``transaction.atomic()`` block: it locks the
team row, then the user rows it touches, re-reads them inside the block and
raises a TeamActionError before writing anything if a rule is violated.
Team membership and ``User.current_team`` are only ever written here, so the
two sides never drift apart.

Lock order is always team first, then users, so concurrent actions on the
same team queue up instead of deadlocking.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from core.constants import (
    ACTIVITY_CREATOR_PROMOTED,
    ACTIVITY_MEMBER_JOINED,
    ACTIVITY_MEMBER_LEFT,
    ACTIVITY_MEMBER_REMOVED,
    ACTIVITY_TEAM_CREATED,
    ACTIVITY_TEAM_DELETED,
    ACTIVITY_TEAM_FINALIZED,
    ACTIVITY_TEAM_LINKS_UPDATED,
    ACTIVITY_TEAM_LOCKED,
    SKILLS,
)
from core.services import ActivityService
from notifications.models import Notification
from notifications.services import notify

from . import errors, rules
from . import state_machine
from .models import Team, TeamMember, JoinRequest, TeamInvite

logger = logging.getLogger('hackteam.teams')

User = get_user_model()

TEAM_NAME_MAX_LENGTH = 100


# ─────────────────────────────────────────────────────────────
# Locking helpers
# ─────────────────────────────────────────────────────────────

def lock_team(team_id) -> Team:
    try:
        return Team.objects.select_for_update().get(pk=team_id)
    except Team.DoesNotExist:
        raise errors.team_not_found()


def lock_user(user_id):
    try:
        return User.objects.select_for_update().get(pk=user_id)
    except User.DoesNotExist:
        raise errors.user_not_found()


def _pk(obj):
    return getattr(obj, "pk", obj)


# ─────────────────────────────────────────────────────────────
# Input validation (runs before any transaction)
# ─────────────────────────────────────────────────────────────

def clean_team_name(name) -> str:
    name = (name or "").strip()
    if not name:
        raise errors.validation("INVALID_TEAM_NAME", "Please enter a team name.")
    if len(name) > TEAM_NAME_MAX_LENGTH:
        raise errors.validation(
            "INVALID_TEAM_NAME",
            f"Team name must be {TEAM_NAME_MAX_LENGTH} characters or less.",
        )
    return name


def clean_skills(skills, required=True) -> list:
    """Known skills only, duplicates dropped, order kept."""
    cleaned = []
    for skill in skills or []:
        if skill not in SKILLS:
            raise errors.validation("INVALID_SKILL", f"Unknown skill: {skill}")
        if skill not in cleaned:
            cleaned.append(skill)
    if required and not cleaned:
        raise errors.validation("NO_SKILLS_SELECTED", "Please select at least one skill needed.")
    return cleaned


# ─────────────────────────────────────────────────────────────
# Core membership write
# ─────────────────────────────────────────────────────────────

def _add_member_locked(team: Team, user) -> TeamMember:
    """
    Append ``user`` to ``team``. Both rows must already be locked by the caller.
    """
    if team.memberships.count() >= rules.max_team_size():
        raise errors.team_full()

    if team.state != Team.STATE_OPEN:
        raise errors.team_closed()

    if user.current_team_id is not None or TeamMember.objects.filter(user=user).exists():
        raise errors.already_on_a_team()

    member = TeamMember.objects.create(team=team, user=user)
    user.current_team = team
    user.save(update_fields=["current_team"])

    logger.info(f"Member added: team={team.id}, user={user.id}, size={team.memberships.count()}")
    return member


def _remove_member_locked(team: Team, user) -> None:
    deleted, _ = TeamMember.objects.filter(team=team, user=user).delete()
    if not deleted:
        raise errors.not_a_member()

    user.current_team = None
    user.save(update_fields=["current_team"])


# ─────────────────────────────────────────────────────────────
# Operations
# ─────────────────────────────────────────────────────────────

def create_team(user, name, skills_needed, goal="", time_commitment="", whatsapp_link=None, discord_link=None) -> Team:
    """
    Create an OPEN team with ``user`` as creator and sole member.
    """
    name = clean_team_name(name)
    skills_needed = clean_skills(skills_needed)

    with transaction.atomic():
        creator = lock_user(_pk(user))

        if not creator.profile_completed:
            raise errors.profile_incomplete()
        if creator.intent != User.INTENT_CREATE:
            raise errors.wrong_intent(User.INTENT_CREATE)
        if creator.current_team_id is not None or TeamMember.objects.filter(user=creator).exists():
            raise errors.already_on_a_team()

        team = Team.objects.create(
            name=name,
            creator=creator,
            creator_name=creator.name,
            skills_needed=skills_needed,
            goal=goal or "",
            time_commitment=time_commitment or "",
            state=Team.STATE_OPEN,
            whatsapp_link=whatsapp_link or None,
            discord_link=discord_link or None,
        )
        TeamMember.objects.create(team=team, user=creator)
        creator.current_team = team
        creator.save(update_fields=["current_team"])

        ActivityService.log_activity(
            actor=creator,
            verb=ACTIVITY_TEAM_CREATED,
            target=team,
            metadata={"team_name": team.name, "skills_needed": skills_needed},
        )

    logger.info(f"Team created: team={team.id}, creator={creator.id}")
    return team


def add_member(team, user, actor=None) -> Team:
    """
    Add ``user`` to an OPEN team with room, setting their ``current_team``.

    Raises TEAM_FULL, TEAM_CLOSED or ALREADY_ON_A_TEAM.
    """
    with transaction.atomic():
        locked_team = lock_team(_pk(team))
        member = lock_user(_pk(user))

        _add_member_locked(locked_team, member)

        ActivityService.log_activity(
            actor=actor or member,
            verb=ACTIVITY_MEMBER_JOINED,
            target=locked_team,
            metadata={"user_id": member.id, "team_name": locked_team.name},
        )

    return locked_team


def remove_member(team, user, acting_user) -> Team:
    """
    Creator removes another member from an OPEN or FINALIZED team.

    Raises NOT_AUTHORIZED, CANNOT_REMOVE_CREATOR, TEAM_LOCKED or NOT_A_MEMBER.
    """
    user_id = _pk(user)

    with transaction.atomic():
        locked_team = lock_team(_pk(team))

        if not locked_team.is_creator(acting_user):
            raise errors.not_authorized("Only the team leader can remove members.")
        if user_id == locked_team.creator_id:
            raise errors.cannot_remove_creator()
        if locked_team.state not in state_machine.MEMBER_MANAGEMENT_STATES:
            if locked_team.state == Team.STATE_LOCKED:
                raise errors.team_locked()
            raise errors.wrong_state(f"Members cannot be removed while the team is {locked_team.state}.")

        removed = lock_user(user_id)
        _remove_member_locked(locked_team, removed)

        ActivityService.log_activity(
            actor=acting_user,
            verb=ACTIVITY_MEMBER_REMOVED,
            target=locked_team,
            metadata={"user_id": removed.id, "team_name": locked_team.name},
        )
        notify(
            [removed],
            Notification.TYPE_MEMBER_REMOVED,
            title=f"You were removed from {locked_team.name}",
            team=locked_team,
        )

    logger.info(f"Member removed: team={locked_team.id}, user={user_id}, by={acting_user.id}")
    return locked_team


def leave_team(team, user, promoted_creator_id=None) -> Team:
    """
    ``user`` leaves ``team``.

    A creator must hand leadership to another current member first; a
    creator who is the only member must delete the team instead.
    Raises NOT_A_MEMBER, TEAM_LOCKED, NO_OTHER_MEMBERS, MUST_PROMOTE_FIRST
    or INVALID_PROMOTION.
    """
    with transaction.atomic():
        locked_team = lock_team(_pk(team))
        leaver = lock_user(_pk(user))

        member_ids = locked_team.member_ids()
        if leaver.id not in member_ids:
            raise errors.not_a_member()
        if locked_team.state == Team.STATE_LOCKED:
            raise errors.team_locked()

        new_creator = None
        if locked_team.creator_id == leaver.id:
            if len(member_ids) <= 1:
                raise errors.no_other_members()
            if not promoted_creator_id:
                raise errors.must_promote_first()
            try:
                promoted_creator_id = int(promoted_creator_id)
            except (TypeError, ValueError):
                raise errors.invalid_promotion()
            if promoted_creator_id == leaver.id or promoted_creator_id not in member_ids:
                raise errors.invalid_promotion()

            new_creator = lock_user(promoted_creator_id)
            locked_team.creator = new_creator
            locked_team.creator_name = new_creator.name
            locked_team.save(update_fields=["creator", "creator_name", "updated_at"])

        _remove_member_locked(locked_team, leaver)

        ActivityService.log_activity(
            actor=leaver,
            verb=ACTIVITY_MEMBER_LEFT,
            target=locked_team,
            metadata={"team_name": locked_team.name},
        )
        if new_creator is not None:
            ActivityService.log_activity(
                actor=leaver,
                verb=ACTIVITY_CREATOR_PROMOTED,
                target=locked_team,
                metadata={"new_creator_id": new_creator.id, "old_creator_id": leaver.id},
            )
            notify(
                [new_creator],
                Notification.TYPE_LEADER_PROMOTED,
                title=f"You are now the leader of {locked_team.name}",
                team=locked_team,
            )
        notify(
            [locked_team.creator_id],
            Notification.TYPE_MEMBER_LEFT,
            title=f"{leaver.name} left {locked_team.name}",
            team=locked_team,
        )

    logger.info(
        f"Member left: team={locked_team.id}, user={leaver.id}, "
        f"new_creator={getattr(new_creator, 'id', None)}"
    )
    return locked_team


def delete_team(team, acting_user) -> dict:
    """
    Creator deletes a DRAFT or OPEN team.

    Clears every member's ``current_team`` and removes every join request
    and invite that references the team, all in one transaction.
    """
    with transaction.atomic():
        locked_team = lock_team(_pk(team))

        if not locked_team.is_creator(acting_user):
            raise errors.not_authorized("Only the team leader can delete the team.")
        if locked_team.state not in state_machine.DELETABLE_STATES:
            if locked_team.state == Team.STATE_LOCKED:
                raise errors.team_locked()
            raise errors.wrong_state("Finalized teams cannot be deleted.")

        member_ids = locked_team.member_ids()
        # Lock members before clearing their pointers
        list(User.objects.select_for_update().filter(pk__in=member_ids).values_list("pk", flat=True))
        User.objects.filter(pk__in=member_ids).update(current_team=None)

        requests_removed, _ = JoinRequest.objects.filter(team=locked_team).delete()
        invites_removed, _ = TeamInvite.objects.filter(team=locked_team).delete()

        summary = {
            "team_id": locked_team.id,
            "team_name": locked_team.name,
            "members_released": len(member_ids),
            "requests_removed": requests_removed,
            "invites_removed": invites_removed,
        }

        ActivityService.log_activity(
            actor=acting_user,
            verb=ACTIVITY_TEAM_DELETED,
            target=locked_team,
            metadata=summary,
        )
        notify(
            [uid for uid in member_ids if uid != acting_user.id],
            Notification.TYPE_TEAM_DELETED,
            title=f"{locked_team.name} was deleted by its leader",
        )

        locked_team.delete()

    logger.info(
        f"Team deleted: team={summary['team_id']}, members={summary['members_released']}, "
        f"requests={requests_removed}, invites={invites_removed}, by={acting_user.id}"
    )
    return summary


def finalize_team(team, acting_user) -> Team:
    """
    Creator moves an OPEN team with 3 to 5 members to FINALIZED.

    Raises NOT_AUTHORIZED, WRONG_STATE or TEAM_SIZE_OUT_OF_RANGE.
    """
    with transaction.atomic():
        locked_team = lock_team(_pk(team))

        if not locked_team.is_creator(acting_user):
            raise errors.not_authorized("Only the team leader can finalize the team.")
        if locked_team.state != Team.STATE_OPEN:
            raise errors.wrong_state(f"Only open teams can be finalized (team is {locked_team.state}).")

        member_ids = locked_team.member_ids()
        size = len(member_ids)
        if not rules.min_finalize_size() <= size <= rules.max_team_size():
            raise errors.team_size_out_of_range(size)

        ok, reason = state_machine.transition(locked_team, Team.STATE_FINALIZED, actor=acting_user)
        if not ok:
            raise errors.wrong_state(reason)

        ActivityService.log_activity(
            actor=acting_user,
            verb=ACTIVITY_TEAM_FINALIZED,
            target=locked_team,
            metadata={"team_name": locked_team.name, "size": size},
        )
        notify(
            [uid for uid in member_ids if uid != acting_user.id],
            Notification.TYPE_TEAM_FINALIZED,
            title=f"{locked_team.name} has been finalized",
            team=locked_team,
        )

    return locked_team


def update_links(team, acting_user, whatsapp_link=None, discord_link=None) -> Team:
    """
    Creator sets or clears the team's communication links. Blank clears.
    """
    with transaction.atomic():
        locked_team = lock_team(_pk(team))

        if not locked_team.is_creator(acting_user):
            raise errors.not_authorized("Only the team leader can edit team links.")
        if locked_team.state == Team.STATE_LOCKED:
            raise errors.team_locked()

        locked_team.whatsapp_link = (whatsapp_link or "").strip() or None
        locked_team.discord_link = (discord_link or "").strip() or None
        locked_team.save(update_fields=["whatsapp_link", "discord_link", "updated_at"])

        ActivityService.log_activity(
            actor=acting_user,
            verb=ACTIVITY_TEAM_LINKS_UPDATED,
            target=locked_team,
        )

    return locked_team


def lock_team_for_event(team, actor) -> Team:
    """
    Freeze a team for good. Only invoked by operators (Django admin), never
    by the participant-facing API.
    """
    with transaction.atomic():
        locked_team = lock_team(_pk(team))

        ok, reason = state_machine.transition(locked_team, Team.STATE_LOCKED, actor=actor)
        if not ok:
            raise errors.wrong_state(reason)

        ActivityService.log_activity(
            actor=actor,
            verb=ACTIVITY_TEAM_LOCKED,
            target=locked_team,
            metadata={"team_name": locked_team.name},
        )

    return locked_team


# ─────────────────────────────────────────────────────────────
# Consistency checks
# ─────────────────────────────────────────────────────────────

def find_membership_inconsistencies() -> list:
    """
    Users whose ``current_team`` disagrees with their TeamMember row, and
    teams whose creator is not a member or whose size is out of bounds.
    """
    problems = []

    memberships = dict(TeamMember.objects.values_list("user_id", "team_id"))
    for user_id, current_team_id in User.objects.values_list("id", "current_team_id"):
        if memberships.get(user_id) != current_team_id:
            problems.append({
                "kind": "user_pointer",
                "user_id": user_id,
                "current_team_id": current_team_id,
                "member_of": memberships.get(user_id),
            })

    for team in Team.objects.all():
        member_ids = team.member_ids()
        if team.creator_id not in member_ids:
            problems.append({"kind": "creator_not_member", "team_id": team.id})
        if not 1 <= len(member_ids) <= rules.max_team_size():
            problems.append({"kind": "team_size", "team_id": team.id, "size": len(member_ids)})

    return problems
