from enum import Enum, auto


class InputType(Enum):
    VALUE = auto()
    STATEMENT = auto()


class NameType(Enum):
    """Allocation domains of the name database.

    Every domain keeps its own key -> name bindings, but all of them share
    the reserved words and the set of names already handed out.
    """
    VARIABLE = "VARIABLE"
    PROCEDURE = "PROCEDURE"
    TEMPORARY = "TEMPORARY"


# Block types that open a loop body; used to find the loop around a
# break/continue block.
LOOP_TYPES = frozenset({
    "controls_repeat",
    "controls_repeat_ext",
    "controls_forEach",
    "controls_for",
    "controls_whileUntil",
})

PROCEDURE_DEFINITION_TYPES = frozenset({
    "procedures_defreturn",
    "procedures_defnoreturn",
})
