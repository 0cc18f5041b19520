# teams/errors.py
"""
Refusals raised by teams.services and teams.workflow.

Each helper builds a TeamActionError with its kind, a stable code for API
clients and the message shown to the user.
"""
from core.exceptions import ErrorKind, TeamActionError

from . import rules


# NOT_FOUND

def team_not_found():
    return TeamActionError(ErrorKind.NOT_FOUND, "TEAM_NOT_FOUND", "This team no longer exists.")


def user_not_found():
    return TeamActionError(ErrorKind.NOT_FOUND, "USER_NOT_FOUND", "User not found.")


def request_not_found():
    return TeamActionError(ErrorKind.NOT_FOUND, "REQUEST_NOT_FOUND", "Join request not found.")


def invite_not_found():
    return TeamActionError(ErrorKind.NOT_FOUND, "INVITE_NOT_FOUND", "Invite not found.")


def not_a_member():
    return TeamActionError(ErrorKind.NOT_FOUND, "NOT_A_MEMBER", "That user is not a member of this team.")


# NOT_AUTHORIZED

def not_authorized(message="Only the team leader can do this."):
    return TeamActionError(ErrorKind.NOT_AUTHORIZED, "NOT_AUTHORIZED", message)


def cannot_remove_creator():
    return TeamActionError(
        ErrorKind.NOT_AUTHORIZED,
        "CANNOT_REMOVE_CREATOR",
        "The team leader cannot be removed. Leave the team with a new leader instead.",
    )


def wrong_intent(required):
    if required == "create":
        message = "Only users who chose to create a team can do this."
    else:
        message = "Only users looking to join a team can do this."
    return TeamActionError(ErrorKind.NOT_AUTHORIZED, "WRONG_INTENT", message)


# WRONG_STATE

def wrong_state(message):
    return TeamActionError(ErrorKind.WRONG_STATE, "WRONG_STATE", message)


def team_closed():
    return TeamActionError(ErrorKind.WRONG_STATE, "TEAM_CLOSED", "This team is no longer accepting members.")


def team_locked():
    return TeamActionError(ErrorKind.WRONG_STATE, "TEAM_LOCKED", "This team is locked and can no longer be changed.")


def team_size_out_of_range(size):
    return TeamActionError(
        ErrorKind.WRONG_STATE,
        "TEAM_SIZE_OUT_OF_RANGE",
        f"Team must have {rules.min_finalize_size()} to {rules.max_team_size()} members to finalize "
        f"(currently {size}).",
    )


def no_other_members():
    return TeamActionError(
        ErrorKind.WRONG_STATE,
        "NO_OTHER_MEMBERS",
        "You are the only member. Delete the team instead.",
    )


def already_resolved(status):
    return TeamActionError(ErrorKind.WRONG_STATE, "ALREADY_RESOLVED", f"This has already been {status}.")


def request_already_resolved(status):
    return TeamActionError(
        ErrorKind.WRONG_STATE,
        "REQUEST_ALREADY_RESOLVED",
        f"Your request to this team was already {status}.",
    )


# CAPACITY_EXCEEDED

def team_full():
    return TeamActionError(
        ErrorKind.CAPACITY_EXCEEDED,
        "TEAM_FULL",
        f"Team is full (max {rules.max_team_size()} members).",
    )


# ALREADY_ON_A_TEAM

def already_on_a_team(subject="You are"):
    return TeamActionError(
        ErrorKind.ALREADY_ON_A_TEAM,
        "ALREADY_ON_A_TEAM",
        f"{subject} already in a team.",
    )


# RATE_LIMITED

def too_many_pending_requests():
    limit = rules.max_pending_requests()
    return TeamActionError(
        ErrorKind.RATE_LIMITED,
        "RATE_LIMITED",
        f"You can only have {limit} pending requests at a time.",
    )


# VALIDATION

def validation(code, message):
    return TeamActionError(ErrorKind.VALIDATION, code, message)


def must_promote_first():
    return validation("MUST_PROMOTE_FIRST", "Please select a new team leader before leaving.")


def invalid_promotion():
    return validation("INVALID_PROMOTION", "The new team leader must be another current member.")


def profile_incomplete():
    return validation("PROFILE_INCOMPLETE", "Please complete your profile first.")


def duplicate_request():
    return validation("DUPLICATE_REQUEST", "You already have a pending request for this team.")


def duplicate_invite():
    return validation("DUPLICATE_INVITE", "This user already has a pending invite from your team.")
