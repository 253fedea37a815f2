"""
Pytest fixtures for Cosmic Watch. Every app gets its own temporary data file and
preference directory and serves the fixture dataset.
"""

from __future__ import annotations

import pytest


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Settings pointed at temporary files, fixture data and cheap bcrypt."""
    monkeypatch.setenv("DATA_FILE", str(tmp_path / "data.json"))
    monkeypatch.setenv("PREFERENCES_DIR", str(tmp_path / "preferences"))
    monkeypatch.setenv("DATA_SOURCE", "fixture")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("JWT_SECRET", "test-secret-with-at-least-thirty-two-bytes")

    from cosmic_watch.config import Settings

    return Settings()


@pytest.fixture
def app(settings):
    from cosmic_watch.main import create_app

    return create_app(settings)


@pytest.fixture
def client(app):
    """FastAPI TestClient over a fresh app."""
    from fastapi.testclient import TestClient

    return TestClient(app)


@pytest.fixture
def signed_up(client):
    """Register one account and return (token, user, auth headers)."""
    r = client.post(
        "/api/auth/signup",
        json={"name": "Ada Observer", "email": "ada@cosmicwatch.io", "password": "hunter22"},
    )
    assert r.status_code == 200
    data = r.json()
    return data["token"], data["user"], {"Authorization": f"Bearer {data['token']}"}


@pytest.fixture
def browser_prefs(app):
    """Preference store of the browser behind a TestClient's cookie jar."""
    from cosmic_watch.security import BROWSER_COOKIE, read_browser_id

    def resolve(test_client):
        browser_id = read_browser_id(test_client.cookies.get(BROWSER_COOKIE), app.state.settings)
        assert browser_id is not None
        return app.state.preferences.for_browser(browser_id)

    return resolve
