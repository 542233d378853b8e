from datetime import datetime, timezone
from types import SimpleNamespace

import httpx
from sqlalchemy.exc import OperationalError

from backend.app.models import Profile, User
from backend.app.schemas import ProfileResponse
from devconnector.repositories import ProfileRepository

AUTH = {"Authorization": "Bearer fake"}

PROFILE_PAYLOAD = {
    "company": "Acme",
    "website": "https://tester.dev",
    "location": "Berlin",
    "bio": "Writes tests",
    "status": "Developer",
    "github_username": "tester",
    "skills": "python, react ,",
    "twitter": "https://twitter.com/tester",
}


def _create_profile(client, **overrides):
    resp = client.post("/api/profile", json={**PROFILE_PAYLOAD, **overrides}, headers=AUTH)
    assert resp.status_code == 200
    return resp.json()


def test_me_without_profile_is_404(authorized_client):
    client, _, _ = authorized_client

    resp = client.get("/api/profile/me", headers=AUTH)

    assert resp.status_code == 404
    assert resp.json() == {"msg": "There is no profile for this user"}


def test_create_profile(authorized_client):
    client, current_user, session_factory = authorized_client

    data = _create_profile(client)

    assert data["skills"] == ["python", "react"]
    assert data["social"] == {"twitter": "https://twitter.com/tester"}
    assert data["experience"] == []
    assert data["user"]["name"] == "Tester"
    assert data["user"]["avatar"] == "http://example.com/avatar.png"

    session = session_factory()
    profile = session.query(Profile).filter(Profile.user_id == current_user().id).one()
    assert profile.company == "Acme"
    session.close()


def test_get_own_profile(authorized_client):
    client, _, _ = authorized_client
    _create_profile(client)

    resp = client.get("/api/profile/me", headers=AUTH)

    assert resp.status_code == 200
    assert resp.json()["status"] == "Developer"


def test_update_only_touches_submitted_fields(authorized_client):
    client, _, _ = authorized_client
    _create_profile(client)

    resp = client.post(
        "/api/profile",
        json={"bio": None, "location": "Lisbon", "linkedin": "https://linkedin.com/in/t"},
        headers=AUTH,
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["bio"] is None
    assert data["location"] == "Lisbon"
    assert data["company"] == "Acme"
    assert data["skills"] == ["python", "react"]
    assert data["social"] == {
        "twitter": "https://twitter.com/tester",
        "linkedin": "https://linkedin.com/in/t",
    }


def test_create_without_required_fields_is_400(authorized_client):
    client, _, _ = authorized_client

    resp = client.post("/api/profile", json={"company": "Acme"}, headers=AUTH)

    assert resp.status_code == 400
    assert resp.json() == {
        "errors": [
            {"msg": "Status is required", "param": "status"},
            {"msg": "Skills are required", "param": "skills"},
        ]
    }


def test_list_profiles_is_public(authorized_client):
    client, _, _ = authorized_client
    assert client.get("/api/profile").json() == []

    _create_profile(client)

    resp = client.get("/api/profile")
    assert resp.status_code == 200
    data = resp.json()
    assert len(data) == 1
    assert data[0]["user"]["name"] == "Tester"


def test_profile_by_user_id(authorized_client):
    client, current_user, _ = authorized_client
    _create_profile(client)

    resp = client.get(f"/api/profile/user/{current_user().id}")

    assert resp.status_code == 200
    assert resp.json()["company"] == "Acme"


def test_profile_by_unknown_or_malformed_user_id(authorized_client):
    client, _, _ = authorized_client

    for raw in ("999", "not-an-id", "0"):
        resp = client.get(f"/api/profile/user/{raw}")
        assert resp.status_code == 404
        assert resp.json() == {"msg": "Profile not found"}


def test_delete_profile(authorized_client):
    client, current_user, session_factory = authorized_client
    _create_profile(client)

    resp = client.delete("/api/profile", headers=AUTH)
    assert resp.status_code == 200
    assert resp.json() == {"msg": "Profile deleted"}

    # A second delete still succeeds
    assert client.delete("/api/profile", headers=AUTH).status_code == 200
    assert client.get("/api/profile/me", headers=AUTH).status_code == 404

    session = session_factory()
    assert session.query(User).filter(User.id == current_user().id).count() == 1
    session.close()


def test_experience_add_and_remove(authorized_client):
    client, _, _ = authorized_client
    _create_profile(client)

    first = client.put(
        "/api/profile/experience",
        json={"title": "Intern", "company": "Acme", "from": "2018-06-01", "to": "2018-09-01"},
        headers=AUTH,
    )
    assert first.status_code == 200
    resp = client.put(
        "/api/profile/experience",
        json={"title": "Engineer", "company": "Acme", "from": "2019-01-01", "current": True},
        headers=AUTH,
    )
    assert resp.status_code == 200
    experience = resp.json()["experience"]
    assert [e["title"] for e in experience] == ["Engineer", "Intern"]
    assert experience[0]["from"] == "2019-01-01"
    assert experience[0]["current"] is True

    resp = client.delete(f"/api/profile/experience/{experience[1]['id']}", headers=AUTH)
    assert resp.status_code == 200
    assert [e["title"] for e in resp.json()["experience"]] == ["Engineer"]

    resp = client.delete("/api/profile/experience/unknown", headers=AUTH)
    assert resp.status_code == 200
    assert len(resp.json()["experience"]) == 1


def test_experience_missing_from_is_400(authorized_client):
    client, _, _ = authorized_client
    _create_profile(client)

    resp = client.put(
        "/api/profile/experience",
        json={"title": "Engineer", "company": "Acme"},
        headers=AUTH,
    )

    assert resp.status_code == 400
    assert [e["param"] for e in resp.json()["errors"]] == ["from"]


def test_experience_blank_title_is_400(authorized_client):
    client, _, _ = authorized_client
    _create_profile(client)

    resp = client.put(
        "/api/profile/experience",
        json={"title": "  ", "company": "Acme", "from": "2019"},
        headers=AUTH,
    )

    assert resp.status_code == 400
    assert resp.json() == {"errors": [{"msg": "Title is required", "param": "title"}]}


def test_experience_without_profile_is_404(authorized_client):
    client, _, _ = authorized_client

    resp = client.put(
        "/api/profile/experience",
        json={"title": "Engineer", "company": "Acme", "from": "2019"},
        headers=AUTH,
    )

    assert resp.status_code == 404


def test_education_add_and_remove(authorized_client):
    client, _, _ = authorized_client
    _create_profile(client)

    resp = client.put(
        "/api/profile/education",
        json={"school": "MIT", "degree": "BSc", "field_of_study": "CS", "from": "2010"},
        headers=AUTH,
    )
    assert resp.status_code == 200
    education = resp.json()["education"]
    assert education[0]["school"] == "MIT"
    assert education[0]["field_of_study"] == "CS"

    resp = client.delete(f"/api/profile/education/{education[0]['id']}", headers=AUTH)
    assert resp.status_code == 200
    assert resp.json()["education"] == []


def test_education_missing_fields_is_400(authorized_client):
    client, _, _ = authorized_client
    _create_profile(client)

    resp = client.put("/api/profile/education", json={"school": "MIT"}, headers=AUTH)

    assert resp.status_code == 400
    assert {e["param"] for e in resp.json()["errors"]} == {"degree", "field_of_study", "from"}


def test_protected_routes_need_a_token(test_app_client):
    client, _ = test_app_client

    for method, path in [
        ("get", "/api/profile/me"),
        ("post", "/api/profile"),
        ("delete", "/api/profile"),
        ("put", "/api/profile/experience"),
        ("delete", "/api/profile/education/abc"),
    ]:
        resp = client.request(method.upper(), path)
        assert resp.status_code == 401
        assert resp.json() == {"msg": "No token, authorization denied"}


def test_invalid_token_is_401(test_app_client):
    client, _ = test_app_client

    resp = client.get("/api/profile/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert resp.status_code == 401
    assert resp.json() == {"msg": "Token is not valid"}


def test_github_repositories(test_app_client, github_stub):
    client, _ = test_app_client
    github_stub(
        lambda request: httpx.Response(
            200,
            json=[{"id": 7, "name": "engine", "html_url": "https://github.com/ada/engine"}],
        )
    )

    resp = client.get("/api/profile/github/ada")

    assert resp.status_code == 200
    assert resp.json()[0]["name"] == "engine"


def test_github_unknown_user_is_404(test_app_client, github_stub):
    client, _ = test_app_client
    github_stub(lambda request: httpx.Response(404, json={"message": "Not Found"}))

    resp = client.get("/api/profile/github/nobody")

    assert resp.status_code == 404
    assert resp.json() == {"msg": "No Github profile found"}


def test_github_unreachable_is_502(test_app_client, github_stub):
    client, _ = test_app_client

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    github_stub(handler)

    resp = client.get("/api/profile/github/ada")

    assert resp.status_code == 502


def test_store_failure_is_opaque_500(authorized_client, monkeypatch):
    client, _, _ = authorized_client

    def broken_lookup(self, user_id, with_owner=False):
        raise OperationalError("SELECT", {}, Exception("connection to db-primary:5432 refused"))

    monkeypatch.setattr(ProfileRepository, "get_by_user_id", broken_lookup)

    resp = client.post("/api/profile", json=PROFILE_PAYLOAD, headers=AUTH)

    assert resp.status_code == 500
    assert resp.json() == {"msg": "Server error"}
    assert "db-primary" not in resp.text


def test_legacy_field_names_are_accepted(authorized_client):
    client, _, _ = authorized_client

    payload = {k: v for k, v in PROFILE_PAYLOAD.items() if k != "github_username"}
    resp = client.post("/api/profile", json={**payload, "githubusername": "legacy-login"}, headers=AUTH)
    assert resp.status_code == 200
    data = resp.json()
    assert data["github_username"] == "legacy-login"

    resp = client.put(
        "/api/profile/education",
        json={"school": "MIT", "degree": "BSc", "fieldofstudy": "CS", "from": "2010"},
        headers=AUTH,
    )
    assert resp.status_code == 200
    assert resp.json()["education"][0]["field_of_study"] == "CS"


def test_timestamps_match_between_write_and_read(authorized_client):
    client, _, _ = authorized_client

    written = _create_profile(client)
    read = client.get("/api/profile/me", headers=AUTH).json()

    assert written["created_at"] == read["created_at"]
    assert written["updated_at"] == read["updated_at"]


def test_naive_stored_timestamps_serialize_as_utc():
    stored = datetime(2024, 3, 1, 12, 30)
    row = SimpleNamespace(id=1, user=None, created_at=stored, updated_at=None)

    resp = ProfileResponse.model_validate(row)

    assert resp.created_at == stored.replace(tzinfo=timezone.utc)
    assert resp.updated_at is None
