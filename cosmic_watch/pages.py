"""
Dashboard pages.

Server-rendered views over the feed client and the local preference store.
Everything except login and signup needs a signed-in user.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from cosmic_watch import views
from cosmic_watch.api import get_feed_client
from cosmic_watch.config import Settings
from cosmic_watch.database import Database
from cosmic_watch.feed import FeedClient, FeedError, NeoNotFound
from cosmic_watch.models import SessionUser, SignupRequest
from cosmic_watch.preferences import PreferenceStore
from cosmic_watch.security import (
    AccountExists,
    InvalidCredentials,
    authenticate_user,
    get_database,
    get_settings_dep,
    register_user,
)

logger = logging.getLogger("cosmic_watch.pages")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

router = APIRouter()

DEMO_USER = SessionUser(id="1", name="Dr. Jane Doe", role="researcher")


def get_preferences(request: Request) -> PreferenceStore:
    """The preference store of the browser making this request."""
    return request.app.state.preferences.for_browser(request.state.browser_id)


def _redirect(path: str) -> RedirectResponse:
    return RedirectResponse(path, status_code=303)


def _safe_next(path: Optional[str]) -> str:
    if path and path.startswith("/") and not path.startswith("//"):
        return path
    return "/"


def render(request: Request, template_name: str, prefs: PreferenceStore, status_code: int = 200, **context) -> HTMLResponse:
    context.setdefault("user", prefs.user)
    context.setdefault("unit", prefs.unit)
    context.setdefault("watchlist", prefs.watchlist)
    return templates.TemplateResponse(request, template_name, context, status_code=status_code)


# === PROTECTED PAGES ===

@router.get("/", response_class=HTMLResponse)
async def dashboard(
    request: Request,
    hazard: str = "all",
    search: str = "",
    prefs: PreferenceStore = Depends(get_preferences),
    feed_client: FeedClient = Depends(get_feed_client),
):
    if prefs.user is None:
        return _redirect("/login")

    if hazard not in views.HAZARD_FILTERS:
        hazard = "all"

    error = None
    objects = []
    try:
        objects = await feed_client.fetch_feed()
    except FeedError as e:
        logger.error(f"Dashboard could not load the feed: {e}")
        error = "Failed to fetch asteroid data"

    shown = views.filter_objects(objects, hazard, search)
    rows = [row for row in (views.table_row(neo, prefs.unit) for neo in shown) if row is not None]

    return render(
        request, "dashboard.html", prefs,
        stats=views.dashboard_stats(objects),
        rows=rows,
        hazard=hazard,
        hazard_filters=views.HAZARD_FILTERS,
        search=search,
        error=error,
    )


@router.get("/asteroid/{neo_id}", response_class=HTMLResponse)
async def asteroid_detail(
    request: Request,
    neo_id: str,
    prefs: PreferenceStore = Depends(get_preferences),
    feed_client: FeedClient = Depends(get_feed_client),
):
    if prefs.user is None:
        return _redirect("/login")

    try:
        neo = await feed_client.fetch_one(neo_id)
    except FeedError as e:
        logger.warning(f"Detail page for {neo_id} unavailable: {e}")
        status_code = 404 if isinstance(e, NeoNotFound) else 502
        return render(request, "not_found.html", prefs, status_code=status_code, message="Asteroid not found.")

    km = neo.estimated_diameter.kilometers
    return render(
        request, "detail.html", prefs,
        neo=neo,
        approach=neo.first_approach,
        is_watched=prefs.is_watched(neo.id),
        diameter_min=views.convert_km(km.estimated_diameter_min, prefs.unit),
        diameter_max=views.convert_km(km.estimated_diameter_max, prefs.unit),
        impact_probability=views.impact_probability(neo),
        profile=views.risk_profile(neo),
        timeline=views.approach_timeline(neo),
    )


@router.get("/orrery", response_class=HTMLResponse)
async def orrery(
    request: Request,
    prefs: PreferenceStore = Depends(get_preferences),
    feed_client: FeedClient = Depends(get_feed_client),
):
    if prefs.user is None:
        return _redirect("/login")

    error = None
    objects = []
    try:
        objects = await feed_client.fetch_feed()
    except FeedError as e:
        logger.error(f"Orrery could not load the feed: {e}")
        error = "Failed to fetch asteroid data"

    return render(request, "orrery.html", prefs, positions=views.orrery_positions(objects), error=error)


@router.get("/alerts", response_class=HTMLResponse)
async def alerts(
    request: Request,
    prefs: PreferenceStore = Depends(get_preferences),
    feed_client: FeedClient = Depends(get_feed_client),
):
    if prefs.user is None:
        return _redirect("/login")

    watched = prefs.watchlist
    results = await asyncio.gather(*(feed_client.fetch_one(neo_id) for neo_id in watched), return_exceptions=True)

    tracked = []
    for neo_id, result in zip(watched, results):
        if isinstance(result, Exception):
            logger.warning(f"Could not load watched object {neo_id}: {result}")
            tracked.append({"id": neo_id, "neo": None, "approach": None})
        elif isinstance(result, BaseException):
            raise result
        else:
            tracked.append({"id": neo_id, "neo": result, "approach": views.next_approach(result)})

    return render(request, "alerts.html", prefs, tracked=tracked)


# === SESSION ACTIONS ===

@router.post("/watchlist/{neo_id}/toggle")
def toggle_watchlist(neo_id: str, next: str = Form("/"), prefs: PreferenceStore = Depends(get_preferences)):
    if prefs.user is None:
        return _redirect("/login")
    prefs.toggle_watchlist(neo_id)
    return _redirect(_safe_next(next))


@router.post("/unit")
def set_unit(unit: str = Form(...), next: str = Form("/"), prefs: PreferenceStore = Depends(get_preferences)):
    if unit in ("km", "mi"):
        prefs.set_unit(unit)
    return _redirect(_safe_next(next))


@router.post("/logout")
def logout(prefs: PreferenceStore = Depends(get_preferences)):
    prefs.logout()
    return _redirect("/login")


# === LOGIN / SIGNUP ===

def _sign_in(prefs: PreferenceStore, token: str, user: dict) -> RedirectResponse:
    prefs.set_token(token)
    prefs.login(SessionUser(**user))
    return _redirect("/")


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, prefs: PreferenceStore = Depends(get_preferences)):
    if prefs.user is not None:
        return _redirect("/")
    return render(request, "login.html", prefs, error=None, email="")


@router.post("/login", response_class=HTMLResponse)
def login_submit(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    prefs: PreferenceStore = Depends(get_preferences),
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings_dep),
):
    if not email or not password:
        return render(request, "login.html", prefs, status_code=400, error="Please fill in all fields", email=email)

    try:
        token, user = authenticate_user(db, settings, email, password)
    except InvalidCredentials:
        return render(request, "login.html", prefs, status_code=401, error="Invalid credentials", email=email)
    return _sign_in(prefs, token, user)


@router.post("/login/demo")
def demo_login(prefs: PreferenceStore = Depends(get_preferences)):
    prefs.login(DEMO_USER)
    return _redirect("/")


@router.get("/signup", response_class=HTMLResponse)
def signup_page(request: Request, prefs: PreferenceStore = Depends(get_preferences)):
    if prefs.user is not None:
        return _redirect("/")
    return render(request, "signup.html", prefs, error=None, name="", email="", role="enthusiast")


@router.post("/signup", response_class=HTMLResponse)
def signup_submit(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    role: str = Form("enthusiast"),
    prefs: PreferenceStore = Depends(get_preferences),
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings_dep),
):
    form = {"name": name, "email": email, "role": role}

    try:
        body = SignupRequest(name=name, email=email, password=password, role=role)
    except ValidationError:
        return render(request, "signup.html", prefs, status_code=400, error="Please fill in all fields with a valid email", **form)

    try:
        token, user = register_user(db, settings, body.name, body.email, body.password, body.role)
    except AccountExists:
        return render(request, "signup.html", prefs, status_code=400, error="Email already registered", **form)
    return _sign_in(prefs, token, user)
