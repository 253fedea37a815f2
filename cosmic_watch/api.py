"""
JSON API: accounts, watchlist, alerts and feed access.
"""

import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request

from cosmic_watch.config import Settings
from cosmic_watch.database import Database, public_user, utc_now_iso
from cosmic_watch.feed import FeedClient, FeedUnavailable, NeoNotFound
from cosmic_watch.models import AlertCreate, AlertUpdate, AuthResponse, LoginRequest, SignupRequest
from cosmic_watch.security import (
    AccountExists,
    InvalidCredentials,
    authenticate_user,
    get_current_user,
    get_database,
    get_settings_dep,
    register_user,
)

logger = logging.getLogger("cosmic_watch.api")

router = APIRouter(prefix="/api")


def get_feed_client(request: Request) -> FeedClient:
    return request.app.state.feed_client


# === HEALTH CHECK ===

@router.get("/health", tags=["System"])
def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


# === AUTHENTICATION ===

@router.post("/auth/signup", response_model=AuthResponse, tags=["Authentication"])
def signup(
    body: SignupRequest,
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings_dep),
):
    """Create an account and sign it in."""
    try:
        token, user = register_user(db, settings, body.name, body.email, body.password, body.role)
    except AccountExists:
        raise HTTPException(status_code=400, detail="Email already registered")
    return {"token": token, "user": user}


@router.post("/auth/login", response_model=AuthResponse, tags=["Authentication"])
def login(
    body: LoginRequest,
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings_dep),
):
    try:
        token, user = authenticate_user(db, settings, body.email, body.password)
    except InvalidCredentials:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return {"token": token, "user": user}


@router.get("/auth/profile", tags=["Authentication"])
def profile(current_user: dict = Depends(get_current_user), db: Database = Depends(get_database)):
    user = db.get_user_by_id(current_user["id"])
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return public_user(user)


# === WATCHLIST ===

@router.get("/watchlist", tags=["Watchlist"])
def get_watchlist(current_user: dict = Depends(get_current_user), db: Database = Depends(get_database)):
    return db.get_watchlist(current_user["id"])


@router.post("/watchlist/{asteroid_id}", tags=["Watchlist"])
def add_to_watchlist(
    asteroid_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    item = db.add_to_watchlist(current_user["id"], asteroid_id)
    if item is None:
        raise HTTPException(status_code=400, detail="Already in watchlist")

    logger.info(f"Object {asteroid_id} added to watchlist for user {current_user['id']}")
    return {"success": True, "item": item}


@router.delete("/watchlist/{asteroid_id}", tags=["Watchlist"])
def remove_from_watchlist(
    asteroid_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    if not db.remove_from_watchlist(current_user["id"], asteroid_id):
        raise HTTPException(status_code=404, detail="Item not in watchlist")

    logger.info(f"Object {asteroid_id} removed from watchlist for user {current_user['id']}")
    return {"success": True}


# === ALERTS ===

@router.get("/alerts", tags=["Alerts"])
def get_alerts(current_user: dict = Depends(get_current_user), db: Database = Depends(get_database)):
    return db.get_alerts(current_user["id"])


@router.post("/alerts", tags=["Alerts"])
def create_alert(
    body: AlertCreate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    now = utc_now_iso()
    alert = {
        "id": str(uuid.uuid4()),
        "userId": current_user["id"],
        "asteroidId": body.asteroidId,
        "asteroidName": body.asteroidName,
        "riskLevel": body.riskLevel.value,
        "alertDate": body.alertDate.isoformat() if body.alertDate else now,
        "isRead": False,
        "createdAt": now,
    }
    db.create_alert(alert)

    logger.info(f"Alert {alert['id']} created for object {body.asteroidId}")
    return alert


@router.put("/alerts/{alert_id}", tags=["Alerts"])
def update_alert(
    alert_id: str,
    body: AlertUpdate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
):
    """Apply the provided allow-listed fields to one of the caller's alerts."""
    existing = db.get_alert(alert_id)
    if existing is None or existing["userId"] != current_user["id"]:
        raise HTTPException(status_code=404, detail="Alert not found")

    updates = body.model_dump(mode="json", exclude_unset=True)
    return db.update_alert(alert_id, updates)


# === NEAR-EARTH OBJECTS ===

@router.get("/neo/feed", tags=["Near-Earth Objects"])
async def neo_feed(feed_client: FeedClient = Depends(get_feed_client)):
    """Today through the next 7 days, riskiest first."""
    try:
        objects = await feed_client.fetch_feed()
    except FeedUnavailable:
        raise HTTPException(status_code=502, detail="External data source unavailable")

    start_date, end_date = feed_client.feed_window()
    return {
        "start_date": start_date,
        "end_date": end_date,
        "element_count": len(objects),
        "near_earth_objects": [neo.model_dump(mode="json") for neo in objects],
    }


@router.get("/neo/{neo_id}", tags=["Near-Earth Objects"])
async def neo_details(neo_id: str, feed_client: FeedClient = Depends(get_feed_client)):
    try:
        neo = await feed_client.fetch_one(neo_id)
    except NeoNotFound:
        raise HTTPException(status_code=404, detail=f"Object {neo_id} not found")
    except FeedUnavailable:
        raise HTTPException(status_code=502, detail="External data source unavailable")
    return neo.model_dump(mode="json")
