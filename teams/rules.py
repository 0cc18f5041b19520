# teams/rules.py
"""
Size and rate limits for team formation, read from ``settings.TEAM_RULES``.
"""
from django.conf import settings

DEFAULTS = {
    "MAX_TEAM_SIZE": 5,
    "MIN_FINALIZE_SIZE": 3,
    "MAX_PENDING_REQUESTS": 3,
    "JOIN_NOTE_MAX_LENGTH": 120,
    "MAX_PRIMARY_SKILLS": 3,
    "TOP_MATCHES": 3,
}


def get_rule(name: str) -> int:
    overrides = getattr(settings, "TEAM_RULES", {}) or {}
    return overrides.get(name, DEFAULTS[name])


def max_team_size() -> int:
    return get_rule("MAX_TEAM_SIZE")


def min_finalize_size() -> int:
    return get_rule("MIN_FINALIZE_SIZE")


def max_pending_requests() -> int:
    return get_rule("MAX_PENDING_REQUESTS")


def join_note_max_length() -> int:
    return get_rule("JOIN_NOTE_MAX_LENGTH")


def max_primary_skills() -> int:
    return get_rule("MAX_PRIMARY_SKILLS")


def top_matches() -> int:
    return get_rule("TOP_MATCHES")
