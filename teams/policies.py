# teams/policies.py
"""
Centralized team policy layer.

Guards for team actions, as predicates over a team and the acting user.
Views use these to decide what to offer; teams.services re-checks the same
rules inside its transactions before writing anything.

``member_count`` may be passed in when the caller already knows it;
otherwise it is read from the team.
"""
from typing import Optional

from . import rules
from .models import Team, JoinRequest
from .state_machine import DELETABLE_STATES, JOINABLE_STATES, MEMBER_MANAGEMENT_STATES

REQUEST_STATUS_NONE = "none"


def _size(team: Team, member_count: Optional[int]) -> int:
    return team.current_size if member_count is None else member_count


class TeamPolicy:
    """
    Permission checks for team lifecycle actions.
    All methods return bool.
    """

    @staticmethod
    def is_creator(team: Team, user) -> bool:
        if not user or not getattr(user, "is_authenticated", False) or team is None:
            return False
        return team.creator_id == user.id

    @staticmethod
    def can_delete(team: Team, user) -> bool:
        return TeamPolicy.is_creator(team, user) and team.state in DELETABLE_STATES

    @staticmethod
    def can_finalize(team: Team, user, member_count: Optional[int] = None) -> bool:
        if not TeamPolicy.is_creator(team, user) or team.state != Team.STATE_OPEN:
            return False
        size = _size(team, member_count)
        return rules.min_finalize_size() <= size <= rules.max_team_size()

    @staticmethod
    def can_manage_members(team: Team, user) -> bool:
        return TeamPolicy.is_creator(team, user) and team.state in MEMBER_MANAGEMENT_STATES

    @staticmethod
    def can_respond_to_requests(team: Team, user) -> bool:
        """Accepting/rejecting join requests and sending invites."""
        return TeamPolicy.is_creator(team, user) and team.state == Team.STATE_OPEN

    @staticmethod
    def can_join(team: Team, request_status: str = REQUEST_STATUS_NONE, member_count: Optional[int] = None) -> bool:
        """
        Whether a user whose latest request to ``team`` has ``request_status``
        may send a new join request.
        """
        if request_status != REQUEST_STATUS_NONE:
            return False
        if team.state not in JOINABLE_STATES:
            return False
        return _size(team, member_count) < rules.max_team_size()

    @staticmethod
    def can_edit_links(team: Team, user) -> bool:
        return TeamPolicy.is_creator(team, user) and team.state != Team.STATE_LOCKED


def request_status_for(team: Team, user) -> str:
    """Status of the user's most recent join request to ``team``, or 'none'."""
    if not user or not getattr(user, "is_authenticated", False):
        return REQUEST_STATUS_NONE
    latest = (
        JoinRequest.objects.filter(team=team, user=user)
        .order_by("-created_at", "-id")
        .values_list("status", flat=True)
        .first()
    )
    return latest or REQUEST_STATUS_NONE


def permissions_for(team: Team, user, member_count: Optional[int] = None) -> dict:
    """Snapshot of every guard, for API responses."""
    size = _size(team, member_count)
    return {
        "is_creator": TeamPolicy.is_creator(team, user),
        "can_delete": TeamPolicy.can_delete(team, user),
        "can_finalize": TeamPolicy.can_finalize(team, user, member_count=size),
        "can_manage_members": TeamPolicy.can_manage_members(team, user),
        "can_respond_to_requests": TeamPolicy.can_respond_to_requests(team, user),
        "can_join": TeamPolicy.can_join(team, request_status_for(team, user), member_count=size),
        "can_edit_links": TeamPolicy.can_edit_links(team, user),
    }
