"""
Tests for the dashboard pages and session actions.
"""

from __future__ import annotations


def _demo_login(client):
    r = client.post("/login/demo", follow_redirects=False)
    assert r.status_code == 303


def test_pages_redirect_to_login_when_signed_out(client):
    for path in ("/", "/orrery", "/alerts", "/asteroid/2142257"):
        r = client.get(path, follow_redirects=False)
        assert r.status_code == 303
        assert r.headers["location"] == "/login"


def test_login_page_renders(client):
    r = client.get("/login")
    assert r.status_code == 200
    assert "Sign in" in r.text


def test_demo_login_then_dashboard(client, browser_prefs):
    _demo_login(client)
    assert browser_prefs(client).user.name == "Dr. Jane Doe"

    r = client.get("/")
    assert r.status_code == 200
    assert "Orbital Activity" in r.text
    assert "(2007 FD10)" in r.text

    assert client.get("/login", follow_redirects=False).status_code == 303


def test_dashboard_filters(client):
    _demo_login(client)
    r = client.get("/", params={"hazard": "safe", "search": "RY24"})
    assert "(2013 RY24)" in r.text
    assert "(2007 FD10)" not in r.text


def test_toggle_watchlist_and_alerts_page(client, browser_prefs):
    _demo_login(client)
    r = client.post("/watchlist/2142257/toggle", data={"next": "/alerts"}, follow_redirects=False)
    assert r.headers["location"] == "/alerts"
    assert browser_prefs(client).watchlist == ["2142257"]

    page = client.get("/alerts")
    assert "(2007 FD10)" in page.text

    client.post("/watchlist/2142257/toggle", data={"next": "/alerts"})
    assert browser_prefs(client).watchlist == []
    assert "No Active Alerts" in client.get("/alerts").text


def test_alerts_page_marks_unavailable_objects(client, browser_prefs):
    _demo_login(client)
    browser_prefs(client).toggle_watchlist("unknown-id")
    page = client.get("/alerts")
    assert page.status_code == 200
    assert "Current data unavailable" in page.text


def test_unit_toggle(client, browser_prefs):
    _demo_login(client)
    client.post("/unit", data={"unit": "mi", "next": "/"})
    assert browser_prefs(client).unit == "mi"
    assert " mi/h" in client.get("/").text


def test_detail_page(client):
    _demo_login(client)
    r = client.get("/asteroid/2142257")
    assert r.status_code == 200
    assert "(2007 FD10)" in r.text
    assert "Threat Profile" in r.text


def test_detail_page_unknown_object(client):
    _demo_login(client)
    r = client.get("/asteroid/nope")
    assert r.status_code == 404
    assert "Asteroid not found." in r.text


def test_orrery_page(client):
    _demo_login(client)
    r = client.get("/orrery")
    assert r.status_code == 200
    assert "Tracking 50 objects" in r.text


def test_signup_and_login_forms(client, browser_prefs):
    r = client.post(
        "/signup",
        data={"name": "Ada", "email": "ada@cosmicwatch.io", "password": "hunter22", "role": "researcher"},
        follow_redirects=False,
    )
    assert r.status_code == 303
    prefs = browser_prefs(client)
    assert prefs.user.role == "researcher"
    assert prefs.token

    client.post("/logout")
    prefs = browser_prefs(client)
    assert prefs.user is None
    assert prefs.token is None

    bad = client.post("/login", data={"email": "ada@cosmicwatch.io", "password": "nope"})
    assert bad.status_code == 401
    assert "Invalid credentials" in bad.text

    good = client.post("/login", data={"email": "ada@cosmicwatch.io", "password": "hunter22"}, follow_redirects=False)
    assert good.status_code == 303
    assert browser_prefs(client).user.email == "ada@cosmicwatch.io"


def test_signup_form_rejects_duplicates(client):
    form = {"name": "Ada", "email": "ada@cosmicwatch.io", "password": "hunter22"}
    client.post("/signup", data=form)
    client.post("/logout")
    r = client.post("/signup", data=form)
    assert r.status_code == 400
    assert "Email already registered" in r.text


def test_unknown_page_renders_not_found(client):
    r = client.get("/no/such/sector")
    assert r.status_code == 404
    assert "This sector does not exist" in r.text


def test_unknown_api_path_stays_json(client):
    r = client.get("/api/nothing-here")
    assert r.status_code == 404
    assert r.json() == {"detail": "Not Found"}


def test_alerts_page_survives_malformed_object(client, app, browser_prefs, monkeypatch):
    _demo_login(client)
    prefs = browser_prefs(client)
    prefs.toggle_watchlist("2142257")
    prefs.toggle_watchlist("broken-record")

    real_fetch_one = app.state.feed_client.fetch_one

    async def fetch_one(neo_id):
        if neo_id == "broken-record":
            raise TypeError("close_approach_data is not a list")
        return await real_fetch_one(neo_id)

    monkeypatch.setattr(app.state.feed_client, "fetch_one", fetch_one)

    page = client.get("/alerts")
    assert page.status_code == 200
    assert "(2007 FD10)" in page.text
    assert "Current data unavailable" in page.text


# === BROWSER SESSIONS ===

def test_each_browser_has_its_own_preferences(app, client, browser_prefs):
    from fastapi.testclient import TestClient

    client.post(
        "/signup",
        data={"name": "Alice", "email": "alice@cosmicwatch.io", "password": "hunter22"},
    )
    client.post("/watchlist/2142257/toggle", data={"next": "/alerts"})
    assert browser_prefs(client).watchlist == ["2142257"]

    stranger = TestClient(app)
    r = stranger.get("/alerts", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/login"

    stranger.post("/login/demo")
    assert browser_prefs(stranger).user.name == "Dr. Jane Doe"
    assert browser_prefs(stranger).watchlist == []

    stranger.post("/logout")
    assert browser_prefs(client).user.name == "Alice"
    assert client.get("/", follow_redirects=False).status_code == 200
    assert "Alice" in client.get("/alerts").text


def test_forged_browser_cookie_is_replaced(app, client):
    from cosmic_watch.security import BROWSER_COOKIE, read_browser_id

    client.cookies.set(BROWSER_COOKIE, "not-a-signed-id")
    r = client.get("/login")
    assert r.status_code == 200
    issued = r.cookies.get(BROWSER_COOKIE)
    assert issued
    assert read_browser_id(issued, app.state.settings) is not None


def test_api_requests_get_no_browser_cookie(client):
    r = client.get("/api/health")
    assert "cosmic_watch_browser" not in r.headers.get("set-cookie", "")
