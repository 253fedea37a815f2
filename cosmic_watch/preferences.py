"""
Device-local preference store.

Holds the signed-in user, their token, the watched object ids and the
display unit. Every mutation is written straight to local storage; nothing
is synchronised with the account service.
Every browser gets its own store, selected by the browser cookie.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from cosmic_watch.models import SessionUser, UserPreferences

logger = logging.getLogger("cosmic_watch.preferences")

STORAGE_KEY = "cosmic-watch-storage"
STORAGE_VERSION = 0
UNITS = ("km", "mi")


class LocalStorage:
    """String-keyed JSON values kept in a single file."""

    def __init__(self, path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        return json.loads(self.path.read_text(encoding="utf-8"))

    def get_item(self, key: str) -> Optional[Any]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: Any) -> None:
        try:
            items = self._read_all()
        except ValueError:
            items = {}
        items[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(items, indent=2), encoding="utf-8")


class PreferenceStore:
    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self.state = self._load()

    def _load(self) -> UserPreferences:
        try:
            saved = self.storage.get_item(STORAGE_KEY)
            if saved:
                return UserPreferences.model_validate(saved.get("state", {}))
        except (ValueError, ValidationError, AttributeError) as e:
            logger.warning(f"Discarding unreadable preferences in {self.storage.path}: {e}")
        return UserPreferences()

    def _persist(self) -> None:
        self.storage.set_item(
            STORAGE_KEY,
            {"state": self.state.model_dump(mode="json"), "version": STORAGE_VERSION},
        )

    @property
    def user(self) -> Optional[SessionUser]:
        return self.state.user

    @property
    def token(self) -> Optional[str]:
        return self.state.token

    @property
    def watchlist(self):
        return list(self.state.watchlist)

    @property
    def unit(self) -> str:
        return self.state.unit

    def is_watched(self, neo_id: str) -> bool:
        return neo_id in self.state.watchlist

    def login(self, user: SessionUser) -> None:
        self.state.user = user
        self._persist()

    def logout(self) -> None:
        """Forget the user, token and watchlist. The unit stays."""
        self.state.user = None
        self.state.token = None
        self.state.watchlist = []
        self._persist()

    def set_token(self, token: Optional[str]) -> None:
        self.state.token = token
        self._persist()

    def toggle_watchlist(self, neo_id: str) -> bool:
        """Add or remove ``neo_id``. Returns True when it is now watched."""
        if neo_id in self.state.watchlist:
            self.state.watchlist = [w for w in self.state.watchlist if w != neo_id]
            watched = False
        else:
            self.state.watchlist = self.state.watchlist + [neo_id]
            watched = True
        self._persist()
        return watched

    def set_unit(self, unit: str) -> None:
        if unit not in UNITS:
            raise ValueError(f"Unit must be one of {UNITS}, got {unit!r}")
        self.state.unit = unit
        self._persist()


class BrowserPreferences:
    """One preference store per browser, each in its own storage file.

    Browser ids come from the signed browser cookie, so they are always
    32 hex characters and safe to use as file names.
    """

    def __init__(self, directory):
        self.directory = Path(directory)

    def storage_path(self, browser_id: str) -> Path:
        return self.directory / f"{browser_id}.json"

    def for_browser(self, browser_id: str) -> PreferenceStore:
        return PreferenceStore(LocalStorage(self.storage_path(browser_id)))
