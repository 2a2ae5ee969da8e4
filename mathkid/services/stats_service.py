import logging
from collections.abc import Mapping

from mathkid.config import ACCURACY_HISTORY_LIMIT, GAME_STATS_KEY, PROGRESS_KEY, STREAK_CELEBRATION
from mathkid.db.store import KeyValueStore
from mathkid.domain.generator import now_ms

logger = logging.getLogger(__name__)

DEFAULT_GAME_STATS = {
    "correct": 0,
    "total": 0,
    "streak": 0,
    "bestStreak": 0,
    "totalTime": 0,
    "averageTime": 0,
}

DEFAULT_PROGRESS = {
    "level": 1,
    "experience": 0,
    "achievements": [],
    "completedSessions": 0,
    "totalProblems": 0,
    "accuracyHistory": [],
}

ACHIEVEMENTS = {
    "first_session": ("First session", "Finished a whole practice session"),
    "streak": ("On a roll", f"{STREAK_CELEBRATION} right answers in a row"),
}


def _merged(defaults: dict, saved) -> dict:
    out = dict(defaults)
    if isinstance(saved, Mapping):
        out.update(saved)
    return out


def _with_derived(stats: dict) -> dict:
    if stats["streak"] > stats["bestStreak"]:
        stats["bestStreak"] = stats["streak"]

    if stats["total"] > 0 and stats["totalTime"] > 0:
        stats["averageTime"] = round(stats["totalTime"] / stats["total"])
    return stats


class StatsService:
    def __init__(self, store: KeyValueStore):
        self.store = store

    # Game stats
    def get_stats(self) -> dict:
        return _merged(DEFAULT_GAME_STATS, self.store.get(GAME_STATS_KEY))

    def save_stats(self, stats: dict) -> bool:
        return self.store.set(GAME_STATS_KEY, _with_derived(_merged(self.get_stats(), stats)))

    def record_answer(self, correct: bool, time_ms: int = 0) -> dict:
        stats = self.get_stats()
        stats["total"] += 1
        stats["totalTime"] += max(int(time_ms or 0), 0)

        if correct:
            stats["correct"] += 1
            stats["streak"] += 1
        else:
            stats["streak"] = 0

        stats = _with_derived(stats)
        if not self.store.set(GAME_STATS_KEY, stats):
            logger.warning("Game stats not persisted for this answer")
        return stats

    @staticmethod
    def celebrate_streak(stats: dict) -> bool:
        return int(stats.get("streak", 0) or 0) >= STREAK_CELEBRATION

    def summary(self) -> dict:
        stats = self.get_stats()
        total = int(stats["total"] or 0)
        correct = int(stats["correct"] or 0)
        stats["accuracyPct"] = round((correct / total) * 100) if total > 0 else 0
        return stats

    def reset(self) -> bool:
        return self.store.set(GAME_STATS_KEY, dict(DEFAULT_GAME_STATS))

    # Progress
    def get_progress(self) -> dict:
        return _merged(DEFAULT_PROGRESS, self.store.get(PROGRESS_KEY))

    def save_progress(self, progress: dict) -> bool:
        return self.store.set(PROGRESS_KEY, _merged(self.get_progress(), progress))

    def record_accuracy(self, fraction: float) -> bool:
        progress = self.get_progress()
        history = list(progress["accuracyHistory"])
        history.append({"accuracy": round(fraction * 100), "timestamp": now_ms()})
        progress["accuracyHistory"] = history[-ACCURACY_HISTORY_LIMIT:]
        return self.save_progress(progress)

    def complete_session(self, problems: int, first_try: int) -> bool:
        progress = self.get_progress()
        progress["completedSessions"] += 1
        progress["totalProblems"] += problems
        if not self.save_progress(progress):
            return False
        return self.record_accuracy(first_try / problems if problems else 0)

    def add_achievement(self, achievement_id: str, title: str, description: str) -> bool:
        """Store an achievement once. False when it was already earned or could not be saved."""
        progress = self.get_progress()
        saved = progress["achievements"] if isinstance(progress["achievements"], list) else []
        earned = [a for a in saved if isinstance(a, Mapping)]
        if any(a.get("id") == achievement_id for a in earned):
            return False

        earned.append({"id": achievement_id, "title": title, "description": description, "earnedAt": now_ms()})
        progress["achievements"] = earned
        if not self.save_progress(progress):
            return False
        logger.info(f"Achievement earned: {achievement_id}")
        return True

    def award(self, achievement_id: str) -> bool:
        title, description = ACHIEVEMENTS[achievement_id]
        return self.add_achievement(achievement_id, title, description)

    def reset_progress(self) -> bool:
        return self.store.set(PROGRESS_KEY, {**DEFAULT_PROGRESS, "achievements": [], "accuracyHistory": []})
