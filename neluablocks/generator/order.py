from enum import IntEnum


class Order(IntEnum):
    """
    Nelua operator precedence, tightest first.
    https://www.lua.org/manual/5.3/manual.html#3.4.8
    """
    ATOMIC = 0            # literals
    HIGH = 1              # function calls, tables[]
    EXPONENTIATION = 2    # ^
    UNARY = 3             # not # - ~
    MULTIPLICATIVE = 4    # * / // %
    ADDITIVE = 5          # + -
    CONCATENATION = 6     # ..
    RELATIONAL = 7        # < > <= >= ~= ==
    AND = 8               # and
    OR = 9                # or
    NONE = 99
