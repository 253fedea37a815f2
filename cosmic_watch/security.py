"""
Password hashing, session tokens and account operations.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from cosmic_watch.config import Settings
from cosmic_watch.database import Database, public_user, utc_now_iso

logger = logging.getLogger("cosmic_watch.security")

security = HTTPBearer(auto_error=False)


class AccountExists(Exception):
    """Signup with an email that is already registered."""


class InvalidCredentials(Exception):
    """Unknown email or wrong password."""


# === PASSWORDS ===

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@lru_cache()
def _hashing_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def hash_password(password: str, rounds: int = 10) -> str:
    return _hashing_context(rounds).hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """The cost factor is read from the hash itself."""
    return pwd_context.verify(plain, hashed)


# === TOKENS ===

def create_access_token(user: Dict[str, Any], settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """Signed token naming the user; expires after the configured number of days."""
    if expires_delta is None:
        expires_delta = timedelta(days=settings.access_token_expire_days)

    claims = {
        "sub": user["id"],
        "email": user["email"],
        "name": user["name"],
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> dict:
    """Verify and extract claims. Raises jwt.InvalidTokenError subclasses."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


# === BROWSER IDS ===

BROWSER_COOKIE = "cosmic_watch_browser"
BROWSER_COOKIE_MAX_AGE = 365 * 24 * 60 * 60


def new_browser_id() -> str:
    return uuid.uuid4().hex


def sign_browser_id(browser_id: str, settings: Settings) -> str:
    return jwt.encode({"bid": browser_id}, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def read_browser_id(cookie: Optional[str], settings: Settings) -> Optional[str]:
    """Browser id from a signed cookie value, or None if it is missing or forged."""
    if not cookie:
        return None
    try:
        payload = decode_access_token(cookie, settings)
        return uuid.UUID(hex=str(payload["bid"])).hex
    except (jwt.InvalidTokenError, KeyError, ValueError):
        return None


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings_dep),
) -> dict:
    """Claims of the bearer token. 401 when absent, 403 when invalid or expired."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="No token provided")

    try:
        payload = decode_access_token(credentials.credentials, settings)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=403, detail="Invalid token")

    if not payload.get("sub"):
        raise HTTPException(status_code=403, detail="Invalid token")

    return {"id": payload["sub"], "email": payload.get("email"), "name": payload.get("name")}


# === ACCOUNTS ===

def register_user(
    db: Database,
    settings: Settings,
    name: str,
    email: str,
    password: str,
    role: str = "enthusiast",
) -> Tuple[str, dict]:
    """Create an account and return (token, public user)."""
    # Checked again under the store lock by create_user
    if db.get_user_by_email(email):
        raise AccountExists(email)

    user = {
        "id": str(uuid.uuid4()),
        "name": name,
        "email": email,
        "password": hash_password(password, settings.bcrypt_rounds),
        "role": role,
        "createdAt": utc_now_iso(),
    }
    if db.create_user(user) is None:
        raise AccountExists(email)

    logger.info(f"New user registered: {email}")
    return create_access_token(user, settings), public_user(user)


def authenticate_user(db: Database, settings: Settings, email: str, password: str) -> Tuple[str, dict]:
    """Check credentials and return (token, public user)."""
    user = db.get_user_by_email(email)
    if user is None or not verify_password(password, user["password"]):
        raise InvalidCredentials(email)

    logger.info(f"User authenticated: {email}")
    return create_access_token(user, settings), public_user(user)
