from neluablocks.generator.errors import UnknownOperatorError
from neluablocks.generator.flow import (
    flow_statement,
    for_each_loop,
    for_range_loop,
    repeat_loop,
    while_loop,
)
from neluablocks.generator.order import Order
from neluablocks.generator.registry import register

from .common import EMPTY_LIST, number_field_literal


@register("controls_repeat_ext", "controls_repeat")
def controls_repeat_ext(block, ctx):
    if block.has_field("TIMES"):
        repeats = number_field_literal(block, "TIMES")
    else:
        repeats = ctx.value_to_code(block, "TIMES", Order.NONE, "0")
    return repeat_loop(ctx, block, repeats)


@register("controls_whileUntil")
def controls_while_until(block, ctx):
    mode = block.get_field_value("MODE") or "WHILE"
    if mode not in ("WHILE", "UNTIL"):
        raise UnknownOperatorError(f"Unknown loop mode '{mode}'", block)
    until = mode == "UNTIL"
    condition = ctx.value_to_code(block, "BOOL", Order.UNARY if until else Order.NONE, "false")
    if until:
        condition = "not " + condition
    return while_loop(ctx, block, condition)


@register("controls_for")
def controls_for(block, ctx):
    variable = ctx.variable_name(block.get_field_value("VAR"))
    start = ctx.value_to_code(block, "FROM", Order.NONE, "0")
    end = ctx.value_to_code(block, "TO", Order.NONE, "0")
    step = ctx.value_to_code(block, "BY", Order.NONE, "1")
    return for_range_loop(ctx, block, variable, start, end, step)


@register("controls_forEach")
def controls_for_each(block, ctx):
    variable = ctx.variable_name(block.get_field_value("VAR"))
    collection = ctx.value_to_code(block, "LIST", Order.NONE, EMPTY_LIST)
    return for_each_loop(ctx, block, variable, collection)


@register("controls_flow_statements", self_injecting=True)
def controls_flow_statements(block, ctx):
    return flow_statement(ctx, block, block.get_field_value("FLOW"))
