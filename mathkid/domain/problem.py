import re
from dataclasses import dataclass
from typing import Optional

from mathkid.config import ANSWER_MAX_DIGITS
from mathkid.domain.operations import Operation
from mathkid.domain.settings import Settings

_ANSWER_RE = re.compile(r"^-?\d{1,%d}$" % ANSWER_MAX_DIGITS)

_OPERATION_WEIGHT = {
    Operation.ADDITION: 1,
    Operation.SUBTRACTION: 2,
    Operation.MULTIPLICATION: 3,
}


@dataclass(frozen=True)
class Problem:
    num1: int
    num2: int
    operator: str
    answer: int
    type: Operation
    timestamp: int
    settings: Settings

    @property
    def prompt(self) -> str:
        return f"{self.num1} {self.operator} {self.num2} = ?"

    def to_dict(self, with_answer: bool = True) -> dict:
        out = {
            "num1": self.num1,
            "num2": self.num2,
            "operator": self.operator,
            "type": self.type.value,
            "prompt": self.prompt,
            "timestamp": self.timestamp,
            "settings": self.settings.to_dict(),
        }
        if with_answer:
            out["answer"] = self.answer
        return out


def is_correct(problem: Optional[Problem], user_answer) -> bool:
    if problem is None:
        return False
    if isinstance(user_answer, bool) or not isinstance(user_answer, int):
        return False
    return user_answer == problem.answer


def parse_answer(text) -> Optional[int]:
    """Turn keypad/form input into an int, or None if it isn't one."""
    if isinstance(text, bool):
        return None
    if isinstance(text, int):
        return text
    if not isinstance(text, str):
        return None
    text = text.strip()
    if not _ANSWER_RE.match(text):
        return None
    return int(text)


def difficulty_score(problem: Problem) -> int:
    """Score a problem from 1 (trivial) to 10 for progress reports."""
    score = 1
    score += max(problem.num1, problem.num2) // 5
    score += _OPERATION_WEIGHT.get(problem.type, 0)

    if problem.answer > 20:
        score += 1
    if problem.answer > 50:
        score += 1
    if problem.answer > 100:
        score += 2

    return min(score, 10)


def problem_stats(problem: Optional[Problem]):
    if problem is None:
        return None
    return {
        "difficulty": difficulty_score(problem),
        "timeToSolve": None,
        "type": problem.type.value,
        "numbers": [problem.num1, problem.num2],
        "answer": problem.answer,
    }
