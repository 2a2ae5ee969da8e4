"""Arithmetic problem generation.

Every function takes the settings explicitly and an optional random source.
Any object with a ``randint(a, b)`` method (inclusive bounds, like
``random.Random``) can be passed as ``rng`` to make generation reproducible.
"""
import random
import time

from mathkid.config import MULTIPLICATION_CAP, PRACTICE_SET_DEFAULT
from mathkid.domain.operations import MIXED, Operation
from mathkid.domain.problem import Problem
from mathkid.domain.settings import Settings, normalize

_EASY_POOL = (Operation.ADDITION, Operation.SUBTRACTION)

_random = random.Random()


def now_ms() -> int:
    return int(time.time() * 1000)


def _pick(rng, items):
    return items[rng.randint(0, len(items) - 1)]


def _make(settings: Settings, op: Operation, num1: int, num2: int, answer: int) -> Problem:
    return Problem(
        num1=num1,
        num2=num2,
        operator=op.symbol,
        answer=answer,
        type=op,
        timestamp=now_ms(),
        settings=settings,
    )


def addition_problem(settings: Settings, rng) -> Problem:
    a = rng.randint(settings.min_number, settings.max_number)
    b = rng.randint(settings.min_number, settings.max_number)
    return _make(settings, Operation.ADDITION, a, b, a + b)


def subtraction_problem(settings: Settings, rng) -> Problem:
    lo, hi = settings.min_number, settings.max_number
    a = rng.randint(lo, hi)
    b = rng.randint(lo, hi)
    num1, num2 = max(a, b), min(a, b)

    # avoid "n - n" at the bottom of the range; with lo == hi there is nothing to redraw
    if num1 == num2 == lo and 1 < lo < hi:
        num1 = rng.randint(lo + 1, hi)

    return _make(settings, Operation.SUBTRACTION, num1, num2, num1 - num2)


def multiplication_problem(settings: Settings, rng) -> Problem:
    lo = max(settings.min_number, 1)
    hi = min(settings.max_number, MULTIPLICATION_CAP)
    if lo > hi:
        lo, hi = 1, MULTIPLICATION_CAP

    a = rng.randint(lo, hi)
    b = rng.randint(lo, hi)
    return _make(settings, Operation.MULTIPLICATION, a, b, a * b)


_BUILDERS = {
    Operation.ADDITION: addition_problem,
    Operation.SUBTRACTION: subtraction_problem,
    Operation.MULTIPLICATION: multiplication_problem,
}


def resolve_mixed(settings: Settings, rng) -> Operation:
    concrete = [Operation(op) for op in settings.operations if op != MIXED]

    if settings.difficulty == "easy":
        return _pick(rng, _EASY_POOL)

    # multiplication stays in the hard pool whenever the parent picked it
    if settings.difficulty in ("medium", "hard"):
        return _pick(rng, concrete or list(_EASY_POOL))

    return Operation.ADDITION


def resolve_operation(settings: Settings, rng) -> Operation:
    ops = settings.operations
    if MIXED in ops:
        return resolve_mixed(settings, rng)
    if len(ops) == 1:
        return Operation(ops[0])
    return Operation(_pick(rng, ops))


def generate(settings, rng=None) -> Problem:
    settings = normalize(settings)
    rng = rng or _random
    op = resolve_operation(settings, rng)
    return _BUILDERS[op](settings, rng)


def generate_practice_set(settings, count: int = PRACTICE_SET_DEFAULT, rng=None):
    settings = normalize(settings)
    for _ in range(max(count, 0)):
        yield generate(settings, rng)
