"""
Math blocks.

Binary operators compose their right operand one level tighter than the
operator itself wherever Nelua evaluation order would otherwise change the
result, e.g. `a - (b - c)` and `a / (b * c)`. Exponentiation is
right-associative, so there it is the left operand that is tightened.
"""

from neluablocks.generator.errors import UnknownOperatorError
from neluablocks.generator.order import Order
from neluablocks.generator.registry import register

from .common import HELPER, number_field_literal

# op -> (operator, own order, left operand order, right operand order)
ARITHMETIC_OPERATORS = {
    "ADD": (" + ", Order.ADDITIVE, Order.ADDITIVE, Order.ADDITIVE),
    "MINUS": (" - ", Order.ADDITIVE, Order.ADDITIVE, Order.MULTIPLICATIVE),
    "MULTIPLY": (" * ", Order.MULTIPLICATIVE, Order.MULTIPLICATIVE, Order.MULTIPLICATIVE),
    "DIVIDE": (" / ", Order.MULTIPLICATIVE, Order.MULTIPLICATIVE, Order.UNARY),
    "POWER": (" ^ ", Order.EXPONENTIATION, Order.HIGH, Order.EXPONENTIATION),
}

SINGLE_FUNCTIONS = {
    "ABS": "math.abs({})",
    "ROOT": "math.sqrt({})",
    "LN": "math.log({})",
    "LOG10": "math.log({}, 10)",
    "EXP": "math.exp({})",
    "ROUND": "math.floor({} + .5)",
    "ROUNDUP": "math.ceil({})",
    "ROUNDDOWN": "math.floor({})",
    # Blocks work in degrees, the math module in radians.
    "SIN": "math.sin(math.rad({}))",
    "COS": "math.cos(math.rad({}))",
    "TAN": "math.tan(math.rad({}))",
    "ASIN": "math.deg(math.asin({}))",
    "ACOS": "math.deg(math.acos({}))",
    "ATAN": "math.deg(math.atan({}))",
}

CONSTANTS = {
    "PI": ("math.pi", Order.HIGH),
    "E": ("math.exp(1)", Order.HIGH),
    "GOLDEN_RATIO": ("(1 + math.sqrt(5)) / 2", Order.MULTIPLICATIVE),
    "SQRT2": ("math.sqrt(2)", Order.HIGH),
    "SQRT1_2": ("math.sqrt(1 / 2)", Order.HIGH),
    "INFINITY": ("math.huge", Order.HIGH),
}

PROPERTY_TESTS = {
    "EVEN": "{} % 2 == 0",
    "ODD": "{} % 2 == 1",
    "WHOLE": "{} % 1 == 0",
    "POSITIVE": "{} > 0",
    "NEGATIVE": "{} < 0",
}

IS_PRIME = [
    f"{HELPER}(n: number): boolean",
    "  if n == 2 or n == 3 then",
    "    return true",
    "  end",
    "  -- False if n is NaN, negative, is 1, or not whole.",
    "  -- And false if n is divisible by 2 or 3.",
    "  if not (n > 1) or n % 1 ~= 0 or n % 2 == 0 or n % 3 == 0 then",
    "    return false",
    "  end",
    "  -- Check all the numbers of form 6k +/- 1, up to sqrt(n).",
    "  for x = 6, math.sqrt(n) + 1.5, 6 do",
    "    if n % (x - 1) == 0 or n % (x + 1) == 0 then",
    "      return false",
    "    end",
    "  end",
    "  return true",
    "end",
]


@register("math_number")
def math_number(block, ctx):
    code = number_field_literal(block, "NUM")
    return code, Order.UNARY if code.startswith("-") else Order.ATOMIC


@register("math_arithmetic")
def math_arithmetic(block, ctx):
    op = block.get_field_value("OP")
    if op not in ARITHMETIC_OPERATORS:
        raise UnknownOperatorError(f"Unknown arithmetic operator '{op}'", block)
    operator, order, left_order, right_order = ARITHMETIC_OPERATORS[op]
    left = ctx.value_to_code(block, "A", left_order, "0")
    right = ctx.value_to_code(block, "B", right_order, "0")
    return left + operator + right, order


@register("math_single", "math_round", "math_trig")
def math_single(block, ctx):
    op = block.get_field_value("OP")
    if op == "NEG":
        value = ctx.value_to_code(block, "NUM", Order.UNARY, "0")
        # `--` would start a comment.
        return ("- " if value.startswith("-") else "-") + value, Order.UNARY
    if op == "POW10":
        value = ctx.value_to_code(block, "NUM", Order.EXPONENTIATION, "0")
        return "10 ^ " + value, Order.EXPONENTIATION
    if op not in SINGLE_FUNCTIONS:
        raise UnknownOperatorError(f"Unknown math operator '{op}'", block)
    value_order = Order.ADDITIVE if op == "ROUND" else Order.NONE
    value = ctx.value_to_code(block, "NUM", value_order, "0")
    return SINGLE_FUNCTIONS[op].format(value), Order.HIGH


@register("math_constant")
def math_constant(block, ctx):
    constant = block.get_field_value("CONSTANT")
    if constant not in CONSTANTS:
        raise UnknownOperatorError(f"Unknown math constant '{constant}'", block)
    return CONSTANTS[constant]


@register("math_number_property")
def math_number_property(block, ctx):
    number = ctx.value_to_code(block, "NUMBER_TO_CHECK", Order.MULTIPLICATIVE, "0")
    prop = block.get_field_value("PROPERTY")
    if prop == "PRIME":
        function_name = ctx.provide_function("math_isPrime", IS_PRIME)
        return f"{function_name}({number})", Order.HIGH
    if prop == "DIVISIBLE_BY":
        divisor = ctx.value_to_code(block, "DIVISOR", Order.UNARY)
        # Known at generation time to be a division by zero.
        if not divisor or divisor == "0":
            return "nil", Order.ATOMIC
        return f"{number} % {divisor} == 0", Order.RELATIONAL
    if prop not in PROPERTY_TESTS:
        raise UnknownOperatorError(f"Unknown number property '{prop}'", block)
    return PROPERTY_TESTS[prop].format(number), Order.RELATIONAL


@register("math_change")
def math_change(block, ctx):
    delta = ctx.value_to_code(block, "DELTA", Order.ADDITIVE, "0")
    name = ctx.variable_name(block.get_field_value("VAR"))
    return f"{name} = {name} + {delta}\n"


@register("math_modulo")
def math_modulo(block, ctx):
    dividend = ctx.value_to_code(block, "DIVIDEND", Order.MULTIPLICATIVE, "0")
    divisor = ctx.value_to_code(block, "DIVISOR", Order.UNARY, "0")
    return f"{dividend} % {divisor}", Order.MULTIPLICATIVE


@register("math_constrain")
def math_constrain(block, ctx):
    value = ctx.value_to_code(block, "VALUE", Order.NONE, "0")
    low = ctx.value_to_code(block, "LOW", Order.NONE, "-math.huge")
    high = ctx.value_to_code(block, "HIGH", Order.NONE, "math.huge")
    return f"math.min(math.max({value}, {low}), {high})", Order.HIGH


@register("math_random_int")
def math_random_int(block, ctx):
    low = ctx.value_to_code(block, "FROM", Order.NONE, "0")
    high = ctx.value_to_code(block, "TO", Order.NONE, "0")
    return f"math.random({low}, {high})", Order.HIGH


@register("math_random_float")
def math_random_float(block, ctx):
    return "math.random()", Order.HIGH


@register("math_atan2")
def math_atan2(block, ctx):
    x = ctx.value_to_code(block, "X", Order.NONE, "0")
    y = ctx.value_to_code(block, "Y", Order.NONE, "0")
    return f"math.deg(math.atan2({y}, {x}))", Order.HIGH
