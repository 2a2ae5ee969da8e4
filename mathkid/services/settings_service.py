import logging
from collections.abc import Mapping

from mathkid.config import PREVIEW_COUNT, SETTINGS_KEY
from mathkid.db.store import KeyValueStore
from mathkid.domain.generator import generate_practice_set
from mathkid.domain.settings import DEFAULT_SETTINGS, Settings, merge_saved, normalize, validate

logger = logging.getLogger(__name__)


class SettingsService:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self) -> Settings:
        return normalize(merge_saved(self.store.get(SETTINGS_KEY)))

    def save(self, candidate) -> tuple[Settings, bool]:
        settings = normalize(candidate)
        ok = self.store.set(SETTINGS_KEY, settings.to_dict())
        if ok:
            logger.info(f"Settings saved: {settings.to_dict()}")
        else:
            logger.warning("Settings could not be saved, keeping previous values")
        return settings, ok

    def update(self, partial) -> tuple[Settings, bool]:
        merged = self.load().to_dict()
        if isinstance(partial, Mapping):
            merged.update(partial)
        return self.save(merged)

    def reset(self) -> tuple[Settings, bool]:
        return self.save(DEFAULT_SETTINGS)

    @staticmethod
    def validate(candidate):
        return validate(candidate)

    def preview(self, count: int = PREVIEW_COUNT, rng=None):
        return list(generate_practice_set(self.load(), count, rng))
