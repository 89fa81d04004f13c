import re

from neluablocks.generator.errors import UnknownOperatorError
from neluablocks.generator.order import Order
from neluablocks.generator.registry import register
from neluablocks.generator.strings import prefix_lines

from .common import state_count

_BRANCH_INPUT_RE = re.compile(r"^(?:IF|DO)(\d+)$")

COMPARISON_OPERATORS = {
    "EQ": "==",
    "NEQ": "~=",
    "LT": "<",
    "LTE": "<=",
    "GT": ">",
    "GTE": ">=",
}


def _branch_count(block) -> int:
    count = 1 + state_count(block, "elseIfCount")
    for name in block.inputs:
        match = _BRANCH_INPUT_RE.match(name)
        if match:
            count = max(count, int(match.group(1)) + 1)
    return count


def _has_else(block) -> bool:
    return (block.type == "controls_ifelse"
            or bool(block.extra_state.get("hasElse"))
            or block.get_input("ELSE") is not None)


def _branch(block, ctx, name: str) -> str:
    branch = ctx.statement_to_code(block, name)
    if ctx.config.statement_suffix:
        suffix = ctx.inject_id(ctx.config.statement_suffix, block)
        branch = prefix_lines(suffix, ctx.config.indent) + branch
    return branch


@register("controls_if", "controls_ifelse", self_injecting=True)
def controls_if(block, ctx):
    code = ""
    if ctx.config.statement_prefix:
        code += ctx.inject_id(ctx.config.statement_prefix, block)
    for n in range(_branch_count(block)):
        condition = ctx.value_to_code(block, f"IF{n}", Order.NONE, "false")
        keyword = "elseif" if n else "if"
        code += f"{keyword} {condition} then\n" + _branch(block, ctx, f"DO{n}")
    if _has_else(block) or ctx.config.statement_suffix:
        code += "else\n" + _branch(block, ctx, "ELSE")
    return code + "end\n"


@register("logic_compare")
def logic_compare(block, ctx):
    op = block.get_field_value("OP")
    operator = COMPARISON_OPERATORS.get(op)
    if operator is None:
        raise UnknownOperatorError(f"Unknown comparison '{op}'", block)
    left = ctx.value_to_code(block, "A", Order.RELATIONAL, "0")
    # Comparisons do not chain; a nested one on the right keeps its parens.
    right = ctx.value_to_code(block, "B", Order.CONCATENATION, "0")
    return f"{left} {operator} {right}", Order.RELATIONAL


@register("logic_operation")
def logic_operation(block, ctx):
    op = block.get_field_value("OP")
    if op == "AND":
        operator, order, neutral = "and", Order.AND, "true"
    elif op == "OR":
        operator, order, neutral = "or", Order.OR, "false"
    else:
        raise UnknownOperatorError(f"Unknown logic operation '{op}'", block)
    left = ctx.value_to_code(block, "A", order)
    right = ctx.value_to_code(block, "B", order)
    if not left and not right:
        left = right = "false"
    else:
        # A single missing operand must not change the result.
        left = left or neutral
        right = right or neutral
    return f"{left} {operator} {right}", order


@register("logic_negate")
def logic_negate(block, ctx):
    value = ctx.value_to_code(block, "BOOL", Order.UNARY, "true")
    return "not " + value, Order.UNARY


@register("logic_boolean")
def logic_boolean(block, ctx):
    value = block.get_field_value("BOOL") or "TRUE"
    if value not in ("TRUE", "FALSE"):
        raise UnknownOperatorError(f"Unknown boolean '{value}'", block)
    return value.lower(), Order.ATOMIC


@register("logic_null")
def logic_null(block, ctx):
    return "nil", Order.ATOMIC


@register("logic_ternary")
def logic_ternary(block, ctx):
    condition = ctx.value_to_code(block, "IF", Order.AND, "false")
    then = ctx.value_to_code(block, "THEN", Order.AND, "nil")
    otherwise = ctx.value_to_code(block, "ELSE", Order.OR, "nil")
    return f"{condition} and {then} or {otherwise}", Order.OR
