# hackmap/matchmaking.py
"""
Skill-based team recommendations.

Scores candidate teams against a user's declared skills:

    matchScore = 2 * |commonSkills| + 3 * |complementarySkills| + 5 * teamSizeScore

- commonSkills: user skills that match at least one team skill, where a match is
  a case-insensitive substring test in either direction ("React" ~ "React Native")
- complementarySkills: the remaining user skills (new to the team)
- teamSizeScore: (maxTeamSize - memberCount) / maxTeamSize

Full teams are dropped, the rest ranked by score (ties: team id ascending) and
cut to the top 10.

Pure functions only: callers pass snapshots of the data, nothing is mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from hackmap.utils import as_list_str, dedup_keep_order

COMMON_SKILL_WEIGHT = 2
COMPLEMENTARY_SKILL_WEIGHT = 3
TEAM_SIZE_WEIGHT = 5
MAX_RECOMMENDATIONS = 10

NO_SKILLS_MESSAGE = "Add skills to your profile to get better team recommendations"


@dataclass
class CandidateTeam:
    """Snapshot of one team as seen by the scorer."""

    team_id: str
    member_count: int
    max_team_size: int
    registration_deadline: Optional[datetime] = None
    # Flattened skills of every current member, duplicates allowed.
    member_skills: List[str] = field(default_factory=list)
    # Serialized team record echoed back in the output.
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TeamMatch:
    candidate: CandidateTeam
    match_score: float
    common_skills: List[str]
    complementary_skills: List[str]
    team_skills: List[str]

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.candidate.payload)
        data.update(
            {
                "matchScore": self.match_score,
                "commonSkills": list(self.common_skills),
                "complementarySkills": list(self.complementary_skills),
                "teamSkills": list(self.team_skills),
            }
        )
        return data


@dataclass
class MatchmakingResult:
    message: str
    user_skills: List[str]
    matches: List[TeamMatch]

    def to_dict(self) -> Dict[str, Any]:
        if not self.user_skills:
            return {"message": self.message, "teams": []}
        return {
            "message": self.message,
            "userSkills": list(self.user_skills),
            "teams": [m.to_dict() for m in self.matches],
        }


# ----------------------------------------------------------------------
# Feature extraction
# ----------------------------------------------------------------------
def skills_match(user_skill: str, team_skill: str) -> bool:
    u = user_skill.lower()
    t = team_skill.lower()
    return t in u or u in t


def split_skills(user_skills: Sequence[str], team_skills: Sequence[str]):
    """Return (common, complementary), both in user-skill order."""
    common: List[str] = []
    complementary: List[str] = []
    for skill in user_skills:
        if any(skills_match(skill, ts) for ts in team_skills):
            common.append(skill)
        else:
            complementary.append(skill)
    return common, complementary


def team_size_score(member_count: int, max_team_size: int) -> float:
    if max_team_size <= 0:
        return 0.0
    return (max_team_size - member_count) / max_team_size


def match_score(common_count: int, complementary_count: int, size_score: float) -> float:
    return (
        COMMON_SKILL_WEIGHT * common_count
        + COMPLEMENTARY_SKILL_WEIGHT * complementary_count
        + TEAM_SIZE_WEIGHT * size_score
    )


def score_team(user_skills: Sequence[str], candidate: CandidateTeam) -> TeamMatch:
    member_skills = as_list_str(candidate.member_skills)
    common, complementary = split_skills(user_skills, member_skills)
    size_score = team_size_score(candidate.member_count, candidate.max_team_size)
    return TeamMatch(
        candidate=candidate,
        match_score=match_score(len(common), len(complementary), size_score),
        common_skills=common,
        complementary_skills=complementary,
        team_skills=dedup_keep_order(member_skills),
    )


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------
def recommend_teams(
    user_skills: Optional[Iterable[str]],
    candidates: Iterable[CandidateTeam],
    limit: int = MAX_RECOMMENDATIONS,
) -> MatchmakingResult:
    """
    Rank `candidates` for a user with `user_skills`.

    A missing or empty skill list short-circuits with NO_SKILLS_MESSAGE.
    Eligibility (open registration, not already a member) is the caller's job;
    capacity is re-checked here.
    """
    skills = as_list_str(list(user_skills) if user_skills is not None else None)
    if not skills:
        return MatchmakingResult(message=NO_SKILLS_MESSAGE, user_skills=[], matches=[])

    scored = [
        score_team(skills, c)
        for c in candidates
        if c.member_count < c.max_team_size
    ]
    scored.sort(key=lambda m: (-m.match_score, m.candidate.team_id))
    top = scored[:limit]

    return MatchmakingResult(
        message=f"Found {len(top)} recommended teams based on your skills",
        user_skills=skills,
        matches=top,
    )


__all__ = [
    "COMMON_SKILL_WEIGHT",
    "COMPLEMENTARY_SKILL_WEIGHT",
    "TEAM_SIZE_WEIGHT",
    "MAX_RECOMMENDATIONS",
    "NO_SKILLS_MESSAGE",
    "CandidateTeam",
    "TeamMatch",
    "MatchmakingResult",
    "skills_match",
    "split_skills",
    "team_size_score",
    "match_score",
    "score_team",
    "recommend_teams",
]
