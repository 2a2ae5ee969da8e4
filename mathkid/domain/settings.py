"""Parent settings: normalization for storage and strict validation for forms.

``normalize`` never fails, it swaps every bad field for its default.
``validate`` reports every problem at once so the settings page can show
them together. Both accept the camelCase keys used by stored records and
JSON bodies as well as the snake_case attribute names.
"""
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import NamedTuple, Optional

from mathkid.config import MAX_NUMBER_LIMIT
from mathkid.domain.operations import DIFFICULTIES, VALID_OPERATIONS, Operation

UNLIMITED = "unlimited"

_FIELDS = {
    "minNumber": "min_number",
    "maxNumber": "max_number",
    "operations": "operations",
    "difficulty": "difficulty",
    "sessionLength": "session_length",
}

_MISSING = object()


@dataclass(frozen=True)
class Settings:
    min_number: int = 20
    max_number: int = 40
    operations: tuple = (Operation.ADDITION.value, Operation.SUBTRACTION.value)
    difficulty: str = "easy"
    session_length: Optional[int] = None

    @property
    def unlimited(self) -> bool:
        return self.session_length is None

    def to_dict(self) -> dict:
        return {
            "minNumber": self.min_number,
            "maxNumber": self.max_number,
            "operations": list(self.operations),
            "difficulty": self.difficulty,
            "sessionLength": self.session_length,
        }


DEFAULT_SETTINGS = Settings()


class ValidationResult(NamedTuple):
    valid: bool
    errors: list

    def to_dict(self) -> dict:
        return {"valid": self.valid, "errors": list(self.errors)}


def _field(candidate: Mapping, key: str):
    if key in candidate:
        return candidate[key]
    return candidate.get(_FIELDS[key], _MISSING)


def _as_mapping(candidate) -> Optional[Mapping]:
    if isinstance(candidate, Settings):
        return candidate.to_dict()
    if isinstance(candidate, Mapping):
        return candidate
    return None


def _is_number(value) -> bool:
    if isinstance(value, bool):
        return False
    # ints of any size compare exactly; only floats can be nan or inf
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def _is_whole(value) -> bool:
    if not _is_number(value):
        return False
    return isinstance(value, int) or value.is_integer()


def _op_name(op):
    return op.value if isinstance(op, Operation) else op


def _filter_operations(raw) -> Optional[tuple]:
    if isinstance(raw, (set, frozenset)):
        raw = [op for op in VALID_OPERATIONS if op in raw]
    if not isinstance(raw, (list, tuple)):
        return None
    picked = []
    for op in raw:
        op = _op_name(op)
        if isinstance(op, str) and op in VALID_OPERATIONS and op not in picked:
            picked.append(op)
    return tuple(picked)


def merge_saved(saved) -> dict:
    """Shallow-merge a loaded record over the defaults, keeping unknown keys."""
    merged = DEFAULT_SETTINGS.to_dict()
    if isinstance(saved, Mapping):
        merged.update(saved)
    return merged


def normalize(candidate) -> Settings:
    """Return settings where each invalid or missing field is replaced by its default."""
    candidate = _as_mapping(candidate) or {}
    defaults = DEFAULT_SETTINGS

    min_number = defaults.min_number
    raw = _field(candidate, "minNumber")
    if _is_number(raw) and 0 <= raw <= MAX_NUMBER_LIMIT:
        min_number = math.floor(raw)

    # checked against the resolved minimum, not the candidate's
    max_number = defaults.max_number
    raw = _field(candidate, "maxNumber")
    if _is_number(raw) and min_number <= raw <= MAX_NUMBER_LIMIT:
        max_number = math.floor(raw)
    elif max_number < min_number:
        max_number = min_number

    operations = defaults.operations
    filtered = _filter_operations(_field(candidate, "operations"))
    if filtered is not None:
        operations = filtered or (Operation.ADDITION.value,)

    session_length = defaults.session_length
    raw = _field(candidate, "sessionLength")
    if _is_number(raw) and raw >= 1:
        session_length = math.floor(raw)

    difficulty = defaults.difficulty
    raw = _field(candidate, "difficulty")
    if isinstance(raw, str) and raw in DIFFICULTIES:
        difficulty = raw

    return Settings(
        min_number=min_number,
        max_number=max_number,
        operations=operations,
        difficulty=difficulty,
        session_length=session_length,
    )


def validate(candidate) -> ValidationResult:
    """List every human-readable problem with ``candidate`` without changing it.

    Missing fields are read from the defaults, the same way a saved record is
    merged on load.
    """
    mapping = _as_mapping(candidate)
    if mapping is None:
        return ValidationResult(False, ["Settings must be an object"])

    defaults = DEFAULT_SETTINGS.to_dict()

    def get(key):
        value = _field(mapping, key)
        return defaults[key] if value is _MISSING else value

    errors = []

    min_number = get("minNumber")
    max_number = get("maxNumber")
    min_ok = _is_whole(min_number) and min_number >= 0
    if not _is_whole(min_number):
        errors.append("Minimum number must be a whole number")
    elif min_number < 0:
        errors.append("Minimum number must be 0 or greater")

    if not _is_whole(max_number):
        errors.append("Maximum number must be a whole number")
    else:
        if min_ok and max_number <= min_number:
            errors.append("Maximum number must be greater than minimum number")
        if max_number > MAX_NUMBER_LIMIT:
            errors.append(f"Maximum number should not exceed {MAX_NUMBER_LIMIT}")

    operations = get("operations")
    if isinstance(operations, (set, frozenset)):
        operations = list(operations)
    if not isinstance(operations, (list, tuple)) or len(operations) == 0:
        errors.append("At least one operation must be selected")
    else:
        invalid = [str(_op_name(op)) for op in operations if _op_name(op) not in VALID_OPERATIONS]
        if invalid:
            errors.append(f"Invalid operations: {', '.join(invalid)}")

    difficulty = get("difficulty")
    if not (isinstance(difficulty, str) and difficulty in DIFFICULTIES):
        errors.append("Difficulty must be easy, medium or hard")

    session_length = get("sessionLength")
    if session_length is not None and session_length != UNLIMITED:
        if not (_is_whole(session_length) and session_length >= 1):
            errors.append("Session length must be at least 1 problem")

    return ValidationResult(len(errors) == 0, errors)
