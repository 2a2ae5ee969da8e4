import logging
import random
import threading

from mathkid.config import PRACTICE_SET_MAX
from mathkid.domain.generator import generate, generate_practice_set, now_ms
from mathkid.domain.problem import is_correct, parse_answer, problem_stats
from mathkid.services.settings_service import SettingsService
from mathkid.services.stats_service import StatsService

logger = logging.getLogger(__name__)

ENCOURAGEMENT = {
    "correct": [
        "Amazing job!",
        "You're a math star!",
        "Fantastic!",
        "Perfect!",
        "Brilliant work!",
        "Excellent!",
        "Outstanding!",
        "Super!",
    ],
    "incorrect": [
        "Think again!",
        "You've got this!",
        "Try once more!",
        "Keep trying!",
        "Don't give up!",
        "Give it another try!",
        "You can do it!",
    ],
    "streak": [
        "You're on a roll!",
        "Lightning fast!",
        "Math wizard!",
        "Incredible streak!",
        "You're unstoppable!",
    ],
}

SESSION_FINISHED = "Session finished. Great work!"


class QuestionService:
    """Holds the current problem and the running session for the single local player.

    A session counts problems, not attempts: a problem counts once it is
    answered correctly, however many tries that took.
    """

    def __init__(self, settings: SettingsService, stats: StatsService, rng=None):
        self.settings = settings
        self.stats = stats
        self.rng = rng or random.Random()
        self.current = None
        self.attempts = 0
        self.session_problems = 0
        self.session_first_try = 0
        self._lock = threading.Lock()

    def _session_info(self, session_length):
        return {
            "problems": self.session_problems,
            "first_try": self.session_first_try,
            "length": session_length,
            "complete": session_length is not None and self.session_problems >= session_length,
        }

    def new_session(self):
        with self._lock:
            self.current = None
            self.attempts = 0
            self.session_problems = 0
            self.session_first_try = 0

    def next_problem(self):
        settings = self.settings.load()
        with self._lock:
            session = self._session_info(settings.session_length)
            if session["complete"]:
                return {"ok": False, "message": SESSION_FINISHED, "session": session}, 200

            problem = generate(settings, self.rng)
            self.current = problem
            self.attempts = 0

        return {"ok": True, "problem": problem.to_dict(with_answer=False), "session": session}, 200

    def submit(self, raw_answer, time_ms=None):
        if raw_answer is None or (isinstance(raw_answer, str) and raw_answer.strip() == ""):
            return {"ok": False, "message": "Please enter an answer first!"}, 400

        session_length = self.settings.load().session_length
        with self._lock:
            session = self._session_info(session_length)
            if session["complete"]:
                return {"ok": False, "message": SESSION_FINISHED, "session": session}, 400

            problem = self.current
            if problem is None:
                return {"ok": False, "message": "No problem to answer. Ask for a new one."}, 400

            correct = is_correct(problem, parse_answer(raw_answer))
            self.attempts += 1
            # a wrong answer keeps the same problem up for another try
            if correct:
                self.current = None
                self.session_problems += 1
                if self.attempts == 1:
                    self.session_first_try += 1
            session = self._session_info(session_length)
            finished_now = correct and session["complete"]

        elapsed = time_ms if time_ms is not None else now_ms() - problem.timestamp
        stats = self.stats.record_answer(correct, elapsed)
        celebrate = correct and self.stats.celebrate_streak(stats)

        earned = []
        if celebrate and self.stats.award("streak"):
            earned.append("streak")
        if finished_now:
            logger.info(f"Session complete: {session['first_try']}/{session['problems']} right first time")
            self.stats.complete_session(session["problems"], session["first_try"])
            if self.stats.award("first_session"):
                earned.append("first_session")

        kind = "streak" if celebrate else "correct" if correct else "incorrect"
        messages = ENCOURAGEMENT[kind]
        return {
            "ok": True,
            "correct": correct,
            "correct_answer": problem.answer if correct else None,
            "message": messages[self.rng.randint(0, len(messages) - 1)],
            "streak": stats["streak"],
            "celebrate": celebrate,
            "achievements": earned,
            "difficulty": problem_stats(problem)["difficulty"],
            "stats": stats,
            "session": session,
        }, 200

    def practice_set(self, count: int):
        count = max(1, min(int(count), PRACTICE_SET_MAX))
        settings = self.settings.load()
        return [p.to_dict() for p in generate_practice_set(settings, count, self.rng)]
