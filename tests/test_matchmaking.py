"""Unit tests for the skill-based team scorer."""

import pytest

from hackmap.matchmaking import (
    MAX_RECOMMENDATIONS,
    NO_SKILLS_MESSAGE,
    CandidateTeam,
    match_score,
    recommend_teams,
    score_team,
    skills_match,
    split_skills,
    team_size_score,
)


def team(team_id, skills, members=2, capacity=4, **payload):
    return CandidateTeam(
        team_id=team_id,
        member_count=members,
        max_team_size=capacity,
        member_skills=list(skills),
        payload={"id": team_id, **payload},
    )


class TestSkillsMatch:
    def test_case_insensitive(self):
        assert skills_match("react", "React")
        assert skills_match("PYTHON", "python")

    def test_substring_either_direction(self):
        assert skills_match("React", "React Native")
        assert skills_match("React Native", "react")

    def test_unrelated(self):
        assert not skills_match("Go", "Python")

    def test_whitespace_is_not_trimmed(self):
        # "React " contains "react" but "React" does not contain "react "
        assert skills_match("React ", "react")
        assert not skills_match(" Rust", "rust ")

    def test_split_keeps_user_order(self):
        common, complementary = split_skills(["Go", "React", "SQL"], ["react native", "postgresql"])
        assert common == ["React", "SQL"]
        assert complementary == ["Go"]


class TestScoring:
    def test_team_size_score(self):
        assert team_size_score(2, 4) == 0.5
        assert team_size_score(3, 4) == 0.25
        assert team_size_score(0, 4) == 1.0

    def test_team_size_score_zero_capacity(self):
        assert team_size_score(0, 0) == 0.0

    def test_formula(self):
        assert match_score(1, 1, 0.5) == pytest.approx(7.5)
        assert match_score(0, 0, 0.0) == 0

    def test_monotonic_in_skill_counts(self):
        base = match_score(1, 1, 0.5)
        assert match_score(2, 1, 0.5) > base
        assert match_score(1, 2, 0.5) > base
        # complementary skills weigh more than common ones
        assert match_score(0, 1, 0.5) > match_score(1, 0, 0.5)

    def test_team_skills_deduplicated(self):
        match = score_team(["Python"], team("t1", ["React", "React", "Node", "React"]))
        assert match.team_skills == ["React", "Node"]

    def test_non_string_member_skills_ignored(self):
        candidate = team("t1", [])
        candidate.member_skills = ["React", None, 3, "Go"]
        match = score_team(["react"], candidate)
        assert match.team_skills == ["React", "Go"]
        assert match.common_skills == ["react"]

    def test_team_without_skills(self):
        match = score_team(["React", "Go"], team("t1", [], members=1, capacity=4))
        assert match.common_skills == []
        assert match.complementary_skills == ["React", "Go"]
        assert match.match_score == pytest.approx(6 + 3.75)


class TestRecommendTeams:
    def test_concrete_scenario(self):
        a = team("team-a", ["react", "node"], members=2, capacity=4)
        b = team("team-b", ["Python", "Django"], members=3, capacity=4)

        result = recommend_teams(["React", "Python"], [b, a])
        teams = result.to_dict()["teams"]

        assert [t["id"] for t in teams] == ["team-a", "team-b"]
        assert teams[0]["matchScore"] == pytest.approx(7.5)
        assert teams[0]["commonSkills"] == ["React"]
        assert teams[0]["complementarySkills"] == ["Python"]
        assert teams[1]["matchScore"] == pytest.approx(6.25)
        assert teams[1]["commonSkills"] == ["Python"]
        assert teams[1]["complementarySkills"] == ["React"]

    def test_full_team_excluded_even_if_best(self):
        full = team("full", ["React", "Python"], members=4, capacity=4)
        open_team = team("open", [], members=3, capacity=4)

        result = recommend_teams(["React", "Python"], [full, open_team])

        assert [m.candidate.team_id for m in result.matches] == ["open"]

    def test_over_capacity_excluded(self):
        result = recommend_teams(["React"], [team("over", ["React"], members=5, capacity=4)])
        assert result.matches == []
        assert result.message == "Found 0 recommended teams based on your skills"

    def test_sorted_and_capped(self):
        candidates = [team(f"t{i:02d}", [], members=i % 4, capacity=4) for i in range(25)]

        result = recommend_teams(["Go"], candidates)
        scores = [m.match_score for m in result.matches]

        assert len(result.matches) == MAX_RECOMMENDATIONS
        assert scores == sorted(scores, reverse=True)
        assert result.message == f"Found {MAX_RECOMMENDATIONS} recommended teams based on your skills"

    def test_ties_broken_by_team_id(self):
        candidates = [team(tid, ["Go"]) for tid in ("c", "a", "b")]
        result = recommend_teams(["Go"], candidates)
        assert [m.candidate.team_id for m in result.matches] == ["a", "b", "c"]

    def test_payload_echoed(self):
        result = recommend_teams(["Go"], [team("t1", ["Go"], name="Gophers")])
        out = result.to_dict()["teams"][0]
        assert out["name"] == "Gophers"
        assert out["teamSkills"] == ["Go"]

    def test_output_echoes_user_skills(self):
        data = recommend_teams(["React"], []).to_dict()
        assert data == {
            "message": "Found 0 recommended teams based on your skills",
            "userSkills": ["React"],
            "teams": [],
        }

    @pytest.mark.parametrize("skills", [[], None])
    def test_no_skills_short_circuits(self, skills):
        result = recommend_teams(skills, [team("t1", ["React"])])
        assert result.matches == []
        assert result.to_dict() == {"message": NO_SKILLS_MESSAGE, "teams": []}

    def test_does_not_mutate_candidates(self):
        candidate = team("t1", ["React", "React"])
        recommend_teams(["React"], [candidate])
        assert candidate.member_skills == ["React", "React"]
        assert candidate.payload == {"id": "t1"}
