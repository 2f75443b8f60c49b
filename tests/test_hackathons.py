from datetime import timedelta

from conftest import create_hackathon, hackathon_payload, register

from hackmap.data_client.models import Hackathon
from hackmap.routes.hackathon_routes import PAGE_SIZE
from hackmap.utils import utcnow


class TestCreate:
    def test_create(self, make_user):
        org = make_user("Org")
        h = create_hackathon(org, title="  Climate Hack ", prizes=["$1k", " ", "$1k"], tags=["green"])
        assert h["title"] == "Climate Hack"
        assert h["organizerId"] == org.user["id"]
        assert h["prizes"] == ["$1k"]
        assert h["tags"] == ["green"]

    def test_dates_must_be_ordered(self, make_user):
        org = make_user("Org")
        payload = hackathon_payload()
        payload["endDate"], payload["startDate"] = payload["startDate"], payload["endDate"]
        assert org.post("/api/hackathons", json=payload).status_code == 422

    def test_requires_auth(self, client):
        assert client.post("/api/hackathons", json=hackathon_payload()).status_code == 401


class TestList:
    def test_pagination(self, make_user, client):
        org = make_user("Org")
        for i in range(PAGE_SIZE + 2):
            create_hackathon(org, title=f"Hack {i:02d}", start_in_days=10 + i)

        first = client.get("/api/hackathons").json()
        second = client.get("/api/hackathons", params={"page": 2}).json()

        assert len(first["hackathons"]) == PAGE_SIZE
        assert len(second["hackathons"]) == 2
        assert first["pagination"] == {"page": 1, "limit": PAGE_SIZE, "total": PAGE_SIZE + 2, "pages": 2}
        assert first["hackathons"][0]["title"] == "Hack 00"

    def test_search_theme_status(self, make_user, client):
        org = make_user("Org")
        create_hackathon(org, title="AI Sprint", theme="ai")
        create_hackathon(org, title="Web3 Jam", theme="web3")
        create_hackathon(org, title="Running Now", start_in_days=-1, deadline_in_days=-2)

        titles = lambda params: [h["title"] for h in client.get("/api/hackathons", params=params).json()["hackathons"]]

        assert titles({"search": "sprint"}) == ["AI Sprint"]
        assert titles({"theme": "web3"}) == ["Web3 Jam"]
        assert titles({"status": "ongoing"}) == ["Running Now"]
        assert set(titles({"status": "upcoming"})) == {"AI Sprint", "Web3 Jam"}
        assert set(titles({"status": "registration_open"})) == {"AI Sprint", "Web3 Jam"}
        assert client.get("/api/hackathons", params={"status": "bogus"}).status_code == 400

    def test_registration_count(self, make_user, client):
        org = make_user("Org")
        h = create_hackathon(org)
        register(make_user("P1"), h["id"])
        register(make_user("P2"), h["id"])
        listed = client.get("/api/hackathons").json()["hackathons"][0]
        assert listed["registrationCount"] == 2


class TestRegistration:
    def test_register_and_detail(self, make_user, client):
        org = make_user("Org")
        h = create_hackathon(org)
        p = make_user("P")

        r = p.post(f"/api/hackathons/{h['id']}/register")
        assert r.status_code == 201
        assert r.json()["hackathon"]["id"] == h["id"]

        detail = client.get(f"/api/hackathons/{h['id']}").json()
        assert detail["_count"] == {"registrations": 1, "teams": 0}
        assert detail["organizer"]["id"] == org.user["id"]

    def test_register_twice(self, make_user):
        h = create_hackathon(make_user("Org"))
        p = make_user("P")
        register(p, h["id"])
        r = p.post(f"/api/hackathons/{h['id']}/register")
        assert r.status_code == 400
        assert r.json()["detail"] == "Already registered for this hackathon"

    def test_deadline_passed(self, make_user):
        h = create_hackathon(make_user("Org"), deadline_in_days=-1, start_in_days=1)
        r = make_user("P").post(f"/api/hackathons/{h['id']}/register")
        assert r.status_code == 400
        assert r.json()["detail"] == "Registration deadline has passed"

    def test_unknown(self, make_user, client):
        assert make_user("P").post("/api/hackathons/missing/register").status_code == 404
        assert client.get("/api/hackathons/missing").status_code == 404

    def test_unregister(self, make_user, database):
        h = create_hackathon(make_user("Org"))
        p = make_user("P")
        assert p.delete(f"/api/hackathons/{h['id']}/register").status_code == 404

        register(p, h["id"])
        assert p.delete(f"/api/hackathons/{h['id']}/register").json() == {"success": True}

        register(p, h["id"])
        with database.session_scope() as s:
            s.get(Hackathon, h["id"]).start_date = utcnow() - timedelta(hours=1)
        r = p.delete(f"/api/hackathons/{h['id']}/register")
        assert r.status_code == 400
        assert r.json()["detail"] == "Cannot unregister after hackathon has started"
