import random
import secrets
import threading

from mathkid.config import GATE_MAX, GATE_MIN
from mathkid.domain.operations import Operation
from mathkid.domain.problem import parse_answer


class ParentGate:
    """Keeps children out of the settings with a times-table question."""

    def __init__(self, rng=None):
        self.rng = rng or random.Random()
        self._expected = None
        self._tokens = set()
        self._lock = threading.Lock()

    @staticmethod
    def new_token():
        return secrets.token_urlsafe(24)

    def challenge(self) -> dict:
        a = self.rng.randint(GATE_MIN, GATE_MAX)
        b = self.rng.randint(GATE_MIN, GATE_MAX)
        with self._lock:
            self._expected = a * b
        symbol = Operation.MULTIPLICATION.symbol
        return {"num1": a, "num2": b, "operator": symbol, "prompt": f"{a} {symbol} {b} = ?"}

    def check(self, raw_answer) -> bool:
        # one attempt per challenge
        with self._lock:
            expected, self._expected = self._expected, None
        value = parse_answer(raw_answer)
        return expected is not None and value == expected

    def unlock(self, raw_answer):
        if not self.check(raw_answer):
            return None
        token = self.new_token()
        with self._lock:
            self._tokens.add(token)
        return token

    def is_unlocked(self, token) -> bool:
        with self._lock:
            return bool(token) and token in self._tokens

    def lock(self, token):
        with self._lock:
            self._tokens.discard(token)
