from enum import Enum


class Operation(str, Enum):
    ADDITION = "addition"
    SUBTRACTION = "subtraction"
    MULTIPLICATION = "multiplication"

    @property
    def symbol(self) -> str:
        return OPERATOR_SYMBOLS[self]


# "mixed" only ever selects one of the concrete operations above
MIXED = "mixed"

OPERATOR_SYMBOLS = {
    Operation.ADDITION: "+",
    Operation.SUBTRACTION: "-",
    Operation.MULTIPLICATION: "×",
}

VALID_OPERATIONS = (
    Operation.ADDITION.value,
    Operation.SUBTRACTION.value,
    Operation.MULTIPLICATION.value,
    MIXED,
)

DIFFICULTIES = ("easy", "medium", "hard")
