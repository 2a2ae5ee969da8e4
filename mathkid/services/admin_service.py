import logging
from collections.abc import Mapping

from mathkid.config import BACKUP_VERSION, GAME_STATS_KEY, PROGRESS_KEY, SETTINGS_KEY
from mathkid.db.store import KeyValueStore
from mathkid.domain.generator import now_ms
from mathkid.services.settings_service import SettingsService
from mathkid.services.stats_service import DEFAULT_GAME_STATS, DEFAULT_PROGRESS

logger = logging.getLogger(__name__)

_SECTIONS = {
    "settings": SETTINGS_KEY,
    "gameStats": GAME_STATS_KEY,
    "progress": PROGRESS_KEY,
}


def _clean_counts(section: Mapping, defaults: dict) -> dict:
    out = dict(defaults)
    for key, default in defaults.items():
        value = section.get(key, default)
        if isinstance(default, int) and (isinstance(value, bool) or not isinstance(value, (int, float))):
            continue
        if isinstance(default, list) and not isinstance(value, list):
            continue
        out[key] = value
    return out


class AdminService:
    def __init__(self, store: KeyValueStore, settings: SettingsService):
        self.store = store
        self.settings = settings

    def export_data(self):
        if not self.store.is_available():
            return None
        return {
            "version": BACKUP_VERSION,
            "exportedAt": now_ms(),
            "data": {name: self.store.get(key) for name, key in _SECTIONS.items()},
        }

    def import_data(self, backup) -> bool:
        if not isinstance(backup, Mapping) or not isinstance(backup.get("data"), Mapping):
            return False

        data = backup["data"]
        ok = True
        for name, key in _SECTIONS.items():
            section = data.get(name)
            if section is None:
                continue
            if not isinstance(section, Mapping):
                logger.warning(f"Skipping malformed backup section {name}")
                ok = False
                continue

            if name == "settings":
                _, saved = self.settings.save(section)
            elif name == "gameStats":
                saved = self.store.set(key, _clean_counts(section, DEFAULT_GAME_STATS))
            else:
                saved = self.store.set(key, _clean_counts(section, DEFAULT_PROGRESS))
            ok = ok and saved

        logger.info(f"Backup import finished, ok={ok}")
        return ok

    def clear_all(self) -> tuple[bool, str]:
        if not self.store.clear():
            return False, "Storage is not available."
        return True, "All settings and progress have been reset."

    def storage_info(self):
        return self.store.usage()
