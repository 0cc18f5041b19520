# teams/state_machine.py
"""
Team State Machine.

Enforces valid state transitions for the team lifecycle:
DRAFT → OPEN → FINALIZED → LOCKED
  └────────┴──────────────→ LOCKED

Nothing leads back to OPEN. LOCKED is terminal and is only ever set
from outside the request workflow (an operator locking teams at the
event deadline).
"""
from typing import Tuple
import logging

from .models import Team

logger = logging.getLogger('hackteam.teams')


# Valid state transitions: from_state -> list of allowed to_states
VALID_TRANSITIONS = {
    Team.STATE_DRAFT: [Team.STATE_OPEN, Team.STATE_LOCKED],
    Team.STATE_OPEN: [Team.STATE_FINALIZED, Team.STATE_LOCKED],
    Team.STATE_FINALIZED: [Team.STATE_LOCKED],
    Team.STATE_LOCKED: [],
}

DELETABLE_STATES = (Team.STATE_DRAFT, Team.STATE_OPEN)
MEMBER_MANAGEMENT_STATES = (Team.STATE_OPEN, Team.STATE_FINALIZED)
JOINABLE_STATES = (Team.STATE_OPEN,)


def can_transition(team: Team, new_state: str) -> Tuple[bool, str]:
    """
    Check if a team can transition to a new state.

    Returns (can_transition: bool, reason: str)
    """
    current_state = team.state

    if new_state not in dict(Team.STATE_CHOICES):
        return False, f"Invalid state: {new_state}"

    if new_state == current_state:
        return False, f"Team is already {current_state}"

    allowed = VALID_TRANSITIONS.get(current_state, [])

    if new_state not in allowed:
        return False, f"Cannot transition from '{current_state}' to '{new_state}'"

    return True, ""


def transition(team: Team, new_state: str, actor=None, save: bool = True) -> Tuple[bool, str]:
    """
    Attempt to transition a team to a new state.

    Args:
        team: The team to transition
        new_state: The target state
        actor: The user performing the action (for logging)
        save: Whether to save the team after transitioning

    Returns (success: bool, message: str)
    """
    can, reason = can_transition(team, new_state)

    if not can:
        logger.warning(
            f"Invalid team transition attempted: team={team.id}, "
            f"from={team.state}, to={new_state}, actor={getattr(actor, 'id', 'unknown')}. "
            f"Reason: {reason}"
        )
        return False, reason

    old_state = team.state
    team.state = new_state

    if save:
        team.save(update_fields=['state', 'updated_at'])

    logger.info(
        f"Team state transition: team={team.id}, "
        f"from={old_state}, to={new_state}, actor={getattr(actor, 'id', 'unknown')}"
    )

    return True, f"Transitioned from '{old_state}' to '{new_state}'"
