# app/services/settings_cache.py
"""
Process-wide cache of the site branding settings.

Readers get the cached value immediately. A refresh reads the backend
once and fans the new value out to every subscriber, so the storefront
header and the admin login screen never query the database themselves.
"""

import logging
import threading
from pathlib import Path
from typing import Callable

from pydantic import ValidationError as PydanticValidationError

from app.schemas.settings import SiteSettingsRead

logger = logging.getLogger(__name__)

SettingsLoader = Callable[[], SiteSettingsRead]
SettingsListener = Callable[[SiteSettingsRead], None]


class SettingsCache:
    """
    No TTL: the value changes only on a successful refresh() or an
    explicit write() after the admin saves the settings form.

    Args:
        loader: reads the settings from the backend; may raise.
        cache_file: optional JSON file keeping the last value across
            restarts (the local-storage copy of the browser app).
    """

    def __init__(self, loader: SettingsLoader, cache_file: str | Path | None = None):
        self._loader = loader
        self._cache_file = Path(cache_file) if cache_file else None
        self._value = SiteSettingsRead()
        self._warm = False
        self._fetching = False
        self._cond = threading.Condition()
        self._listeners: list[SettingsListener] = []

        self._load_local()

    # ---- reads ----

    @property
    def current(self) -> SiteSettingsRead:
        with self._cond:
            return self._value

    @property
    def is_warm(self) -> bool:
        """True once a value came from the backend, a write or the cache file."""
        with self._cond:
            return self._warm

    def get_or_load(self) -> SiteSettingsRead:
        """Cached value, loading it first while the cache is still cold."""
        if self.is_warm:
            return self.current
        return self.refresh()

    # ---- subscribe / notify ----

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        with self._cond:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._cond:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, value: SiteSettingsRead) -> None:
        with self._cond:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(value)
            except Exception:
                logger.exception("Settings listener %r failed", listener)

    # ---- updates ----

    def refresh(self) -> SiteSettingsRead:
        """
        Fetch from the backend, replace the cached value, notify subscribers.

        Callers arriving while a fetch is already running wait for that
        fetch instead of starting another one. A failed fetch keeps the
        previous value and is only logged.
        """
        with self._cond:
            if self._fetching:
                self._cond.wait_for(lambda: not self._fetching)
                return self._value
            self._fetching = True

        fresh: SiteSettingsRead | None = None
        try:
            fresh = self._loader()
        except Exception as exc:
            logger.warning("Refreshing site settings failed, keeping cached value: %s", exc)
        finally:
            with self._cond:
                self._fetching = False
                if fresh is not None:
                    self._value = fresh
                    self._warm = True
                self._cond.notify_all()

        if fresh is None:
            return self.current

        self._save_local(fresh)
        self._notify(fresh)
        return fresh

    def write(self, value: SiteSettingsRead) -> None:
        """
        Replace the cached value after a successful settings save.
        Subscribers are notified; the backend is not read again.
        """
        with self._cond:
            self._value = value
            self._warm = True
        self._save_local(value)
        self._notify(value)

    # ---- local copy ----

    def _load_local(self) -> None:
        if self._cache_file is None or not self._cache_file.exists():
            return
        try:
            self._value = SiteSettingsRead.model_validate_json(
                self._cache_file.read_text(encoding="utf-8")
            )
            self._warm = True
        except (OSError, PydanticValidationError) as exc:
            logger.warning("Ignoring unreadable settings cache %s: %s", self._cache_file, exc)

    def _save_local(self, value: SiteSettingsRead) -> None:
        if self._cache_file is None:
            return
        try:
            self._cache_file.parent.mkdir(parents=True, exist_ok=True)
            self._cache_file.write_text(value.model_dump_json(), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not write settings cache %s: %s", self._cache_file, exc)
