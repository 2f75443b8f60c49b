import pytest
from conftest import create_hackathon, create_team, join, register


@pytest.fixture
def project_setup(make_user):
    leader = make_user("Leader")
    hackathon = create_hackathon(leader)
    team = create_team(leader, hackathon["id"], name="Builders")
    r = leader.post(
        "/api/projects",
        json={
            "title": "HackMap",
            "description": "Find your team",
            "teamId": team["id"],
            "techStack": ["Python", " FastAPI ", ""],
            "githubUrl": "https://github.com/example/hackmap",
        },
    )
    assert r.status_code == 201, r.text
    return leader, hackathon, team, r.json()


def test_create_project(project_setup):
    _, hackathon, team, project = project_setup
    assert project["techStack"] == ["Python", "FastAPI"]
    assert project["team"]["id"] == team["id"]
    assert project["team"]["hackathon"]["title"] == hackathon["title"]
    assert project["team"]["members"][0]["role"] == "LEADER"
    assert project["_count"] == {"comments": 0, "endorsements": 0}


def test_only_members_can_submit(project_setup, make_user):
    _, _, team, _ = project_setup
    outsider = make_user("Outsider")
    r = outsider.post("/api/projects", json={"title": "X", "description": "Y", "teamId": team["id"]})
    assert r.status_code == 403
    r = outsider.post("/api/projects", json={"title": "X", "description": "Y", "teamId": "missing"})
    assert r.status_code == 404


def test_member_can_submit(project_setup, make_user):
    _, hackathon, team, _ = project_setup
    member = make_user("Member")
    register(member, hackathon["id"])
    assert join(member, team["inviteCode"]).status_code == 201
    r = member.post("/api/projects", json={"title": "Second", "description": "Y", "teamId": team["id"]})
    assert r.status_code == 201


def test_list_and_detail(project_setup, client):
    _, _, _, project = project_setup
    listed = client.get("/api/projects").json()
    assert [p["id"] for p in listed] == [project["id"]]
    detail = client.get(f"/api/projects/{project['id']}").json()
    assert detail["comments"] == []
    assert detail["endorsements"] == []
    assert client.get("/api/projects/missing").status_code == 404


class TestComments:
    def test_comment_notifies_leader(self, project_setup, make_user, client):
        leader, _, _, project = project_setup
        fan = make_user("Fan")
        long_comment = "x" * 150

        r = fan.post(f"/api/projects/{project['id']}/comments", json={"content": f"  {long_comment}  "})

        assert r.status_code == 201
        assert r.json()["content"] == long_comment
        assert r.json()["user"]["name"] == "Fan"

        notification = leader.get("/api/notifications").json()["notifications"][0]
        assert notification["type"] == "PROJECT_COMMENT"
        assert notification["title"] == "New Comment on Your Project"
        assert notification["message"] == f"Fan commented on your project 'HackMap': {'x' * 100}..."

        detail = client.get(f"/api/projects/{project['id']}").json()
        assert detail["_count"]["comments"] == 1

    def test_leader_comment_does_not_notify(self, project_setup):
        leader, _, _, project = project_setup
        assert leader.post(f"/api/projects/{project['id']}/comments", json={"content": "note"}).status_code == 201
        assert leader.get("/api/notifications").json()["notifications"] == []

    def test_blank_comment(self, project_setup):
        leader, _, _, project = project_setup
        r = leader.post(f"/api/projects/{project['id']}/comments", json={"content": "   "})
        assert r.status_code == 400
        assert r.json()["detail"] == "Comment content is required"

    def test_unknown_project(self, project_setup):
        leader, _, _, _ = project_setup
        assert leader.post("/api/projects/missing/comments", json={"content": "hi"}).status_code == 404


class TestEndorsements:
    def test_endorse_once(self, project_setup, make_user):
        leader, _, _, project = project_setup
        fan = make_user("Fan")
        url = f"/api/projects/{project['id']}/endorsements"

        assert fan.post(url).status_code == 201
        r = fan.post(url)
        assert r.status_code == 400
        assert r.json()["detail"] == "Already endorsed"

        notification = leader.get("/api/notifications").json()["notifications"][0]
        assert notification["type"] == "PROJECT_ENDORSEMENT"
        assert notification["message"] == "Your project 'HackMap' received an endorsement from Fan"

    def test_remove_endorsement(self, project_setup, make_user):
        _, _, _, project = project_setup
        fan = make_user("Fan")
        url = f"/api/projects/{project['id']}/endorsements"
        assert fan.delete(url).status_code == 404
        fan.post(url)
        assert fan.delete(url).json() == {"success": True}
        assert fan.post(url).status_code == 201

    def test_self_endorsement_does_not_notify(self, project_setup):
        leader, _, _, project = project_setup
        assert leader.post(f"/api/projects/{project['id']}/endorsements").status_code == 201
        assert leader.get("/api/notifications").json()["unreadCount"] == 0
