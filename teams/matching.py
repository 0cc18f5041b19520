# teams/matching.py
"""
Skill matching and coverage scoring.

Pure functions over skill lists: no ORM access, no side effects. Views and
services pass in already-loaded teams and profiles.

Scoring per needed skill, first rule that applies wins:
- exact primary skill match: 100 points
- exact secondary skill match: 50 points
- related (fuzzy) skill among the primary skills: 25 points
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

PRIMARY_MATCH_POINTS = 100
SECONDARY_MATCH_POINTS = 50
FUZZY_MATCH_POINTS = 25

GOAL_MATCH_BONUS = 30
TIME_MATCH_BONUS = 20

# Candidates at or above this score are flagged as top matches
TOP_CANDIDATE_SCORE = 50

# Skills that relate to each other: needed skill -> skills that partially cover it
FUZZY_SKILL_MAP = {
    "Full Stack": ["Frontend", "Backend"],
    "Frontend": ["Full Stack"],
    "Backend": ["Full Stack"],
    "ML/AI": ["Data Science"],
    "Data Science": ["ML/AI"],
    "UI/UX Design": ["Frontend", "3D Design"],
    "Mobile Dev": ["Frontend"],
    "DevOps": ["Cloud", "Backend"],
    "Cloud": ["DevOps"],
    "Game Dev": ["3D Design", "AR/VR"],
    "AR/VR": ["Game Dev", "3D Design"],
    "3D Design": ["Game Dev", "AR/VR", "UI/UX Design"],
    "Product Management": ["Business/Strategy"],
    "Business/Strategy": ["Product Management"],
    "Marketing": ["Content Writing"],
    "Content Writing": ["Marketing"],
}


@dataclass
class MatchScore:
    score: int = 0
    exact_primary_matches: List[str] = field(default_factory=list)
    exact_secondary_matches: List[str] = field(default_factory=list)
    fuzzy_matches: List[str] = field(default_factory=list)
    team_id: Optional[int] = None

    def as_dict(self):
        return {
            "team_id": self.team_id,
            "score": self.score,
            "exact_primary_matches": list(self.exact_primary_matches),
            "exact_secondary_matches": list(self.exact_secondary_matches),
            "fuzzy_matches": list(self.fuzzy_matches),
        }


def match_score(
    primary_skills: Sequence[str],
    secondary_skills: Sequence[str],
    needed_skills: Iterable[str],
) -> MatchScore:
    """
    Score a candidate's skills against a team's needed skills.

    Each needed skill is credited at most once, through the highest rule
    that applies.
    """
    primary = list(primary_skills or [])
    secondary = list(secondary_skills or [])
    result = MatchScore()

    for needed in needed_skills or []:
        if needed in primary:
            result.score += PRIMARY_MATCH_POINTS
            result.exact_primary_matches.append(needed)
            continue

        if needed in secondary:
            result.score += SECONDARY_MATCH_POINTS
            result.exact_secondary_matches.append(needed)
            continue

        related = FUZZY_SKILL_MAP.get(needed, [])
        if any(skill in related for skill in primary):
            result.score += FUZZY_MATCH_POINTS
            result.fuzzy_matches.append(needed)

    return result


def top_matches(primary_skills, secondary_skills, teams, top_n: int = 3) -> List[MatchScore]:
    """
    Rank ``teams`` for a candidate, best first.

    Teams with a zero score are dropped; ties keep the input order.
    """
    scores = []
    for team in teams:
        scored = match_score(primary_skills, secondary_skills, team.skills_needed)
        scored.team_id = team.pk
        if scored.score > 0:
            scores.append(scored)

    # sorted() is stable, so equal scores stay in input order
    scores = sorted(scores, key=lambda s: s.score, reverse=True)
    return scores[:top_n]


def _covered_skills(needed_skills, member_skill_lists):
    covered = set()
    for needed in needed_skills:
        for skills in member_skill_lists:
            if needed in (skills or []):
                covered.add(needed)
                break
    return covered


def skill_coverage(needed_skills: Sequence[str], member_skill_lists: Sequence[Sequence[str]]) -> int:
    """
    Percentage (0-100) of needed skills held by at least one member.

    ``member_skill_lists`` holds each member's primary skills; secondary
    skills do not count toward coverage. No needed skills means 100.
    """
    needed = list(needed_skills or [])
    if not needed:
        return 100

    covered = _covered_skills(needed, member_skill_lists or [])
    # round half up
    return int(100 * len(covered) / len(needed) + 0.5)


def missing_skills(needed_skills: Sequence[str], member_skill_lists: Sequence[Sequence[str]]) -> List[str]:
    """Needed skills no member holds as a primary skill, in needed order."""
    needed = list(needed_skills or [])
    covered = _covered_skills(needed, member_skill_lists or [])
    return [skill for skill in needed if skill not in covered]


def candidate_score(candidate, team) -> int:
    """
    Rank a join-intent user for a team's creator.

    Exact skill matches only, plus bonuses for a shared goal and a time
    availability equal to the team's commitment.
    """
    primary = candidate.primary_skills or []
    secondary = candidate.secondary_skills or []

    score = 0
    for needed in team.skills_needed or []:
        if needed in primary:
            score += PRIMARY_MATCH_POINTS
        elif needed in secondary:
            score += SECONDARY_MATCH_POINTS

    if candidate.goal and candidate.goal == team.goal:
        score += GOAL_MATCH_BONUS
    if candidate.time_availability and candidate.time_availability == team.time_commitment:
        score += TIME_MATCH_BONUS

    return score


def rank_candidates(candidates, team):
    """Pair each candidate with its score, best first, stable on ties."""
    scored = [(candidate, candidate_score(candidate, team)) for candidate in candidates]
    return sorted(scored, key=lambda pair: pair[1], reverse=True)


def candidate_matches_query(candidate, query: str) -> bool:
    """Case-insensitive substring search over name, role and every skill."""
    query = (query or "").strip().lower()
    if not query:
        return True
    haystack = [candidate.name, candidate.role or ""]
    haystack += list(candidate.primary_skills or []) + list(candidate.secondary_skills or [])
    return any(query in value.lower() for value in haystack)
