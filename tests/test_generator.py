import copy
import random
import types

from conftest import SequenceRandom

from mathkid.domain.generator import generate, generate_practice_set, resolve_operation
from mathkid.domain.operations import Operation
from mathkid.domain.settings import Settings, normalize


def test_single_addition_uses_drawn_operands():
    rng = SequenceRandom([12, 7])
    p = generate({"minNumber": 5, "maxNumber": 15, "operations": ["addition"]}, rng)
    assert (p.num1, p.num2, p.operator, p.answer, p.type) == (12, 7, "+", 19, Operation.ADDITION)
    assert rng.calls == [(5, 15), (5, 15)]


def test_multiple_operations_pick_uniformly_by_index():
    rng = SequenceRandom([1, 30, 25])
    p = generate({"operations": ["addition", "subtraction"]}, rng)
    assert p.type == Operation.SUBTRACTION
    assert rng.calls[0] == (0, 1)
    assert (p.num1, p.num2, p.answer) == (30, 25, 5)


def test_subtraction_puts_larger_operand_first():
    rng = SequenceRandom([8, 14])
    p = generate({"minNumber": 5, "maxNumber": 15, "operations": ["subtraction"]}, rng)
    assert (p.num1, p.num2, p.operator, p.answer) == (14, 8, "-", 6)


def test_subtraction_redraws_equal_minimum_pair():
    rng = SequenceRandom([5, 5, 8])
    p = generate({"minNumber": 5, "maxNumber": 10, "operations": ["subtraction"]}, rng)
    assert rng.calls == [(5, 10), (5, 10), (6, 10)]
    assert (p.num1, p.num2, p.answer) == (8, 5, 3)


def test_subtraction_allows_equal_pair_at_zero_or_one():
    for low in (0, 1):
        rng = SequenceRandom([low, low])
        p = generate({"minNumber": low, "maxNumber": 10, "operations": ["subtraction"]}, rng)
        assert (p.num1, p.num2, p.answer) == (low, low, 0)
        assert len(rng.calls) == 2


def test_subtraction_with_equal_bounds_skips_redraw():
    rng = SequenceRandom([5, 5])
    p = generate({"minNumber": 5, "maxNumber": 5, "operations": ["subtraction"], "difficulty": "easy"}, rng)
    assert (p.num1, p.num2, p.answer) == (5, 5, 0)
    assert len(rng.calls) == 2


def test_multiplication_clamps_operands_to_times_tables():
    rng = SequenceRandom([3, 8])
    p = generate({"minNumber": 0, "maxNumber": 50, "operations": ["multiplication"]}, rng)
    assert rng.calls == [(1, 12), (1, 12)]
    assert (p.num1, p.num2, p.operator, p.answer) == (3, 8, "×", 24)


def test_multiplication_falls_back_when_range_is_above_cap():
    rng = SequenceRandom([12, 2])
    p = generate({"minNumber": 20, "maxNumber": 40, "operations": ["multiplication"]}, rng)
    assert rng.calls == [(1, 12), (1, 12)]
    assert p.answer == 24


def test_property_addition_within_range():
    rng = random.Random(1)
    settings = {"minNumber": 3, "maxNumber": 17, "operations": ["addition"]}
    for _ in range(300):
        p = generate(settings, rng)
        assert p.answer == p.num1 + p.num2
        assert 3 <= p.num1 <= 17 and 3 <= p.num2 <= 17


def test_property_subtraction_never_negative():
    rng = random.Random(2)
    for low, high in ((0, 10), (2, 3), (20, 40), (7, 7)):
        settings = {"minNumber": low, "maxNumber": high, "operations": ["subtraction"]}
        for _ in range(200):
            p = generate(settings, rng)
            assert p.num1 >= p.num2
            assert p.answer == p.num1 - p.num2 >= 0


def test_property_multiplication_operand_range():
    rng = random.Random(3)
    settings = {"minNumber": 2, "maxNumber": 9, "operations": ["multiplication"]}
    for _ in range(300):
        p = generate(settings, rng)
        assert 2 <= p.num1 <= 9 and 2 <= p.num2 <= 9
        assert p.answer == p.num1 * p.num2


def test_mixed_easy_never_multiplies():
    rng = random.Random(4)
    settings = {"operations": ["mixed", "multiplication"], "difficulty": "easy"}
    types_seen = {generate(settings, rng).type for _ in range(1000)}
    assert types_seen == {Operation.ADDITION, Operation.SUBTRACTION}

    only_mixed = {generate({"operations": ["mixed"], "difficulty": "easy"}, rng).type for _ in range(1000)}
    assert Operation.MULTIPLICATION not in only_mixed


def test_mixed_medium_uses_selected_operations():
    rng = random.Random(5)
    settings = {"operations": ["mixed", "addition", "multiplication"], "difficulty": "medium"}
    types_seen = {generate(settings, rng).type for _ in range(300)}
    assert types_seen == {Operation.ADDITION, Operation.MULTIPLICATION}


def test_mixed_alone_on_medium_uses_addition_and_subtraction():
    rng = random.Random(6)
    types_seen = {generate({"operations": ["mixed"], "difficulty": "medium"}, rng).type for _ in range(300)}
    assert types_seen == {Operation.ADDITION, Operation.SUBTRACTION}


def test_mixed_hard_keeps_multiplication():
    rng = random.Random(7)
    settings = {"operations": ["mixed", "multiplication"], "difficulty": "hard"}
    assert {generate(settings, rng).type for _ in range(100)} == {Operation.MULTIPLICATION}


def test_mixed_with_unknown_difficulty_defaults_to_addition():
    settings = Settings(operations=("mixed",), difficulty="expert")
    assert resolve_operation(settings, SequenceRandom([])) == Operation.ADDITION


def test_problem_is_never_mixed():
    rng = random.Random(8)
    for difficulty in ("easy", "medium", "hard"):
        for _ in range(100):
            p = generate({"operations": ["mixed"], "difficulty": difficulty}, rng)
            assert p.type in (Operation.ADDITION, Operation.SUBTRACTION, Operation.MULTIPLICATION)


def test_problem_carries_timestamp_and_settings_snapshot():
    candidate = {"minNumber": 1, "maxNumber": 9, "operations": ["addition", "bogus"]}
    before = copy.deepcopy(candidate)
    p = generate(candidate, random.Random(9))
    assert candidate == before
    assert p.settings == normalize(candidate)
    assert p.timestamp > 0


def test_generate_repairs_bad_settings():
    p = generate({"operations": [], "minNumber": -4}, random.Random(10))
    assert p.type == Operation.ADDITION
    assert 20 <= p.num1 <= 40


def test_practice_set_is_lazy_and_finite():
    batch = generate_practice_set({"operations": ["addition"]}, 5, random.Random(11))
    assert isinstance(batch, types.GeneratorType)
    problems = list(batch)
    assert len(problems) == 5
    assert all(p.type == Operation.ADDITION for p in problems)
    assert list(batch) == []


def test_practice_set_non_positive_count_is_empty():
    assert list(generate_practice_set({}, 0)) == []
    assert list(generate_practice_set({}, -3)) == []


def test_generate_with_huge_integer_settings_uses_defaults():
    p = generate({"minNumber": 10 ** 400, "maxNumber": 10 ** 400, "operations": ["addition"]}, random.Random(3))
    assert 20 <= p.num1 <= 40 and 20 <= p.num2 <= 40
