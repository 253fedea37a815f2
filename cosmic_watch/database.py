"""
JSON document store for users, watchlist rows and alert rows.

The whole document lives in memory and is rewritten to disk after every
mutation. Mutations are serialised with a lock; the write itself is not
atomic.
"""

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger("cosmic_watch.database")

COLLECTIONS = ("users", "watchlist", "alerts")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """User fields safe to hand to clients."""
    return {
        "id": user["id"],
        "name": user["name"],
        "email": user["email"],
        "role": user["role"],
    }


class Database:
    """Persistent memory for accounts, watchlists and alerts."""

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._data = self._load()
        logger.info(f"Database initialized at {self.path}")

    def _load(self) -> Dict[str, List[Dict[str, Any]]]:
        data = {name: [] for name in COLLECTIONS}
        if not self.path.exists():
            return data
        try:
            loaded = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Error loading database {self.path}, starting empty: {e}")
            return data
        for name in COLLECTIONS:
            data[name] = list(loaded.get(name, []))
        return data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")

    # --- users ---

    def get_user_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        return next((u for u in self._data["users"] if u["id"] == user_id), None)

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return next((u for u in self._data["users"] if u["email"] == email), None)

    def create_user(self, user: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Append a user. Returns None when the email is already taken."""
        with self._lock:
            if self.get_user_by_email(user["email"]) is not None:
                return None
            self._data["users"].append(user)
            self._save()
        return user

    # --- watchlist ---

    def get_watchlist(self, user_id: str) -> List[Dict[str, Any]]:
        return [w for w in self._data["watchlist"] if w["userId"] == user_id]

    def add_to_watchlist(self, user_id: str, asteroid_id: str) -> Optional[Dict[str, Any]]:
        """Insert the pair. Returns None when it already exists."""
        with self._lock:
            for row in self._data["watchlist"]:
                if row["userId"] == user_id and row["asteroidId"] == asteroid_id:
                    return None
            item = {"userId": user_id, "asteroidId": asteroid_id, "createdAt": utc_now_iso()}
            self._data["watchlist"].append(item)
            self._save()
        return item

    def remove_from_watchlist(self, user_id: str, asteroid_id: str) -> bool:
        with self._lock:
            rows = self._data["watchlist"]
            for index, row in enumerate(rows):
                if row["userId"] == user_id and row["asteroidId"] == asteroid_id:
                    del rows[index]
                    self._save()
                    return True
        return False

    # --- alerts ---

    def get_alerts(self, user_id: str) -> List[Dict[str, Any]]:
        return [a for a in self._data["alerts"] if a["userId"] == user_id]

    def get_alert(self, alert_id: str) -> Optional[Dict[str, Any]]:
        return next((a for a in self._data["alerts"] if a["id"] == alert_id), None)

    def create_alert(self, alert: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            self._data["alerts"].append(alert)
            self._save()
        return alert

    def update_alert(self, alert_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._lock:
            alert = self.get_alert(alert_id)
            if alert is not None:
                alert.update(updates)
                self._save()
        return alert
