from conftest import create_hackathon, create_team, register

from hackmap.data_client.models import DEFAULT_NOTIFICATION_PREFERENCES


def test_update_profile(make_user):
    ada = make_user("Ada")
    r = ada.put("/api/profile", json={"bio": "Builder", "skills": [" React ", "", "Python", "React"]})
    assert r.status_code == 200
    assert r.json()["bio"] == "Builder"
    assert r.json()["skills"] == ["React", "Python"]
    assert ada.get("/api/profile").json()["name"] == "Ada"


def test_empty_fields_are_ignored(make_user):
    ada = make_user("Ada")
    ada.put("/api/profile", json={"bio": "Builder"})
    profile = ada.put("/api/profile", json={"name": "", "bio": ""}).json()
    assert profile["name"] == "Ada"
    assert profile["bio"] == "Builder"


def test_skills_must_be_a_list(make_user):
    ada = make_user("Ada")
    assert ada.put("/api/profile", json={"skills": "React"}).status_code == 422


def test_profile_stats(make_user):
    ada = make_user("Ada")
    h = create_hackathon(ada)
    register(ada, h["id"])
    team = create_team(ada, h["id"])
    project = ada.post("/api/projects", json={"title": "P", "description": "D", "teamId": team["id"]}).json()
    make_user("Fan").post(f"/api/projects/{project['id']}/endorsements")

    stats = {s["label"]: s["value"] for s in ada.get("/api/profile/stats").json()}

    assert stats == {
        "Hackathons Joined": "1",
        "Teams Formed": "1",
        "Projects Created": "1",
        "Project Endorsements": "1",
    }


def test_notification_settings_roundtrip(make_user):
    ada = make_user("Ada")
    defaults = ada.get("/api/profile/notifications").json()
    assert defaults == {"emailNotifications": True, "preferences": DEFAULT_NOTIFICATION_PREFERENCES}

    r = ada.put(
        "/api/profile/notifications",
        json={"emailNotifications": False, "preferences": {"joinRequests": False}},
    )
    assert r.json()["success"] is True

    saved = ada.get("/api/profile/notifications").json()
    assert saved["emailNotifications"] is False
    assert saved["preferences"]["joinRequests"] is False
    assert saved["preferences"]["teamInvites"] is True
