from datetime import datetime, timedelta

from sqlalchemy import func, select

from incidenthub.models.incident import Incident
from incidenthub.models.user import Role, User

from conftest import PASSWORD

OUTAGE = {
    "title": "Server outage",
    "description": "Primary DB unreachable for 10 minutes",
    "severity": "HIGH",
}


async def create_incident(client, headers, payload=OUTAGE):
    response = await client.post("/incidents/create", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["incident"]


async def test_root(client):
    response = await client.get("/")
    assert response.status_code == 200


async def test_register_then_login(client, session_factory):
    response = await client.post("/register", json={
        "username": "carol",
        "email": "carol@example.com",
        "password": "correct-horse",
        "confirm_password": "correct-horse",
    })
    assert response.status_code == 201
    assert response.json()["redirect"] == "/login"

    async with session_factory() as session:
        carol = (await session.execute(select(User).where(User.username == "carol"))).scalar_one()
        assert carol.role == Role.USER

    response = await client.post("/login", data={"username": "carol", "password": "correct-horse"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = await client.get("/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["username"] == "carol"
    assert me.json()["role"] == Role.USER.value


async def test_register_duplicate_username_is_conflict(client, alice):
    response = await client.post("/register", json={
        "username": "alice",
        "email": "other@example.com",
        "password": "correct-horse",
        "confirm_password": "correct-horse",
    })
    assert response.status_code == 409
    assert "Username already exists" in response.json()["error"]


async def test_register_password_mismatch_is_bad_request(client):
    response = await client.post("/register", json={
        "username": "carol",
        "email": "carol@example.com",
        "password": "correct-horse",
        "confirm_password": "battery-staple",
    })
    assert response.status_code == 400
    assert response.json()["error"] == "Passwords do not match"


async def test_login_with_bad_password(client, alice):
    response = await client.post("/login", data={"username": "alice", "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid username or password"


async def test_login_page_flags(client):
    assert (await client.get("/login")).json() == {}
    assert (await client.get("/login", params={"error": ""})).json()["error"] == "Invalid username or password"
    assert "logged out" in (await client.get("/login", params={"logout": ""})).json()["message"]


async def test_login_issues_usable_token(client, alice):
    response = await client.post("/login", data={"username": "alice", "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


async def test_requests_without_token_are_unauthorized(client):
    response = await client.get("/dashboard")
    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}
    assert response.headers["www-authenticate"] == "Bearer"

    headers = {"Authorization": "Bearer not-a-token"}
    response = await client.get("/incidents/my", headers=headers)
    assert response.status_code == 401
    assert response.json() == {"error": "Could not validate credentials"}


async def test_unknown_route_uses_error_body(client):
    response = await client.get("/no-such-page")
    assert response.status_code == 404
    assert "error" in response.json()


async def test_create_and_list_own_incidents(client, alice, bob, auth_headers):
    incident = await create_incident(client, auth_headers(alice))
    assert incident["status"] == "OPEN"
    assert incident["reported_by"]["username"] == "alice"

    await create_incident(client, auth_headers(bob), {**OUTAGE, "title": "Laptop stolen"})

    response = await client.get("/incidents/my", headers=auth_headers(alice))
    assert response.status_code == 200
    titles = [i["title"] for i in response.json()["incidents"]]
    assert titles == ["Server outage"]


async def test_create_form_lists_severities(client, alice, auth_headers):
    response = await client.get("/incidents/create", headers=auth_headers(alice))
    values = [option["value"] for option in response.json()["severities"]]
    assert values == ["LOW", "MEDIUM", "HIGH", "CRITICAL"]


async def test_create_incident_validation(client, alice, auth_headers):
    response = await client.post(
        "/incidents/create",
        json={"title": "Hi", "description": "short", "severity": "HIGH"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed. Please check your input."


async def test_view_incident_access(client, alice, bob, admin, auth_headers):
    incident = await create_incident(client, auth_headers(alice))
    url = f"/incidents/{incident['id']}"

    owner_view = await client.get(url, headers=auth_headers(alice))
    assert owner_view.status_code == 200
    assert owner_view.json()["is_owner"] is True

    admin_view = await client.get(url, headers=auth_headers(admin))
    assert admin_view.status_code == 200
    assert admin_view.json()["is_admin"] is True

    assert (await client.get(url, headers=auth_headers(bob))).status_code == 403
    assert (await client.get("/incidents/9999", headers=auth_headers(alice))).status_code == 404


async def test_admin_area_is_forbidden_to_reporters(client, alice, auth_headers):
    incident = await create_incident(client, auth_headers(alice))
    headers = auth_headers(alice)

    response = await client.get("/admin/incidents", headers=headers)
    assert response.status_code == 403
    assert response.json() == {"error": "You do not have permission to access this resource"}
    assert (await client.get(f"/admin/incidents/edit/{incident['id']}", headers=headers)).status_code == 403
    response = await client.post(
        f"/admin/incidents/update/{incident['id']}", json={"status": "RESOLVED"}, headers=headers
    )
    assert response.status_code == 403
    response = await client.post(f"/admin/incidents/delete/{incident['id']}", headers=headers)
    assert response.status_code == 403
    assert "error" in response.json()


async def test_admin_triage_flow(client, alice, admin, auth_headers, session_factory):
    incident = await create_incident(client, auth_headers(alice))
    headers = auth_headers(admin)

    listing = await client.get("/admin/incidents", headers=headers)
    assert [i["id"] for i in listing.json()["incidents"]] == [incident["id"]]

    edit = await client.get(f"/admin/incidents/edit/{incident['id']}", headers=headers)
    assert edit.status_code == 200
    assert "IN_PROGRESS" in [s["value"] for s in edit.json()["statuses"]]

    response = await client.post(
        f"/admin/incidents/update/{incident['id']}",
        json={"status": "RESOLVED", "admin_notes": ""},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["redirect"] == "/admin/incidents"
    updated = response.json()["incident"]
    assert updated["status"] == "RESOLVED"
    assert updated["admin_notes"] is None

    filtered = await client.get("/admin/incidents", params={"status": "OPEN"}, headers=headers)
    assert filtered.json()["incidents"] == []

    response = await client.post(f"/admin/incidents/delete/{incident['id']}", headers=headers)
    assert response.status_code == 200

    response = await client.post(f"/admin/incidents/delete/{incident['id']}", headers=headers)
    assert response.status_code == 404

    async with session_factory() as session:
        remaining = (await session.execute(select(func.count(Incident.id)))).scalar_one()
    assert remaining == 0


async def test_dashboard_statistics_shape(client, alice, bob, admin, auth_headers):
    await create_incident(client, auth_headers(alice), {**OUTAGE, "severity": "CRITICAL"})
    await create_incident(client, auth_headers(bob))

    reporter = (await client.get("/dashboard", headers=auth_headers(alice))).json()
    assert reporter["is_admin"] is False
    assert reporter["stats"] == {"total": 1, "open": 0, "in_progress": 0, "resolved": 0, "critical": 0}

    overview = (await client.get("/dashboard", headers=auth_headers(admin))).json()
    assert overview["is_admin"] is True
    assert overview["stats"] == {"total": 2, "open": 2, "in_progress": 0, "resolved": 0, "critical": 1}


async def test_disabled_user_token_is_rejected(client, make_user, auth_headers):
    dave = await make_user("dave", enabled=False)
    assert (await client.get("/dashboard", headers=auth_headers(dave))).status_code == 401


async def test_registration_form(client):
    response = await client.get("/register")
    assert response.status_code == 200
    assert set(response.json()["form"]) == {"username", "email", "password", "confirm_password"}


async def test_logout(client, alice, auth_headers):
    response = await client.post("/logout", headers=auth_headers(alice))
    assert response.status_code == 200
    assert response.json()["redirect"] == "/login?logout"

    assert (await client.post("/logout")).status_code == 401


async def test_timestamps_keep_utc_when_read_back(client, alice, auth_headers):
    created = await create_incident(client, auth_headers(alice))

    listed = (await client.get("/incidents/my", headers=auth_headers(alice))).json()["incidents"][0]
    viewed = (await client.get(f"/incidents/{created['id']}", headers=auth_headers(alice))).json()["incident"]

    assert listed["created_at"] == created["created_at"] == viewed["created_at"]
    assert listed["updated_at"] == created["updated_at"]
    assert datetime.fromisoformat(listed["created_at"].replace("Z", "+00:00")).utcoffset() == timedelta(0)
