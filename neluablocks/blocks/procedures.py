from neluablocks.generator.order import Order
from neluablocks.generator.registry import register
from neluablocks.generator.strings import prefix_lines


@register("procedures_defreturn", "procedures_defnoreturn")
def procedures_def(block, ctx):
    """Render the definition into the function cache; nothing is emitted in place."""
    config = ctx.config
    function_name = ctx.procedure_name(block.get_field_value("NAME"))

    xfix1 = ""
    if config.statement_prefix:
        xfix1 += ctx.inject_id(config.statement_prefix, block)
    if config.statement_suffix:
        xfix1 += ctx.inject_id(config.statement_suffix, block)
    if xfix1:
        xfix1 = prefix_lines(xfix1, config.indent)
    loop_trap = ""
    if config.infinite_loop_trap:
        loop_trap = prefix_lines(ctx.inject_id(config.infinite_loop_trap, block), config.indent)

    branch = ctx.statement_to_code(block, "STACK")
    return_value = ctx.value_to_code(block, "RETURN", Order.NONE)
    # Revisit this block for the return once the body has run.
    xfix2 = xfix1 if branch and return_value else ""
    if return_value:
        return_value = f"{config.indent}return {return_value}\n"

    params = [f"{ctx.variable_name(var)}: auto" for var in block.get_vars()]
    code = (f"local function {function_name}({', '.join(params)})\n"
            + xfix1 + loop_trap + branch + xfix2 + return_value + "end\n")
    code = ctx.scrub(block, code)
    # `%` keeps procedures apart from helper keys.
    ctx.functions.define("%" + function_name, code)
    return None


@register("procedures_callreturn")
def procedures_callreturn(block, ctx):
    function_name = ctx.procedure_name(block.get_field_value("NAME"))
    args = [
        ctx.value_to_code(block, f"ARG{i}", Order.NONE, "nil")
        for i in range(len(block.get_vars()))
    ]
    return f"{function_name}({', '.join(args)})", Order.HIGH


@register("procedures_callnoreturn")
def procedures_callnoreturn(block, ctx):
    code, _ = procedures_callreturn(block, ctx)
    return code + "\n"


@register("procedures_ifreturn")
def procedures_ifreturn(block, ctx):
    config = ctx.config
    condition = ctx.value_to_code(block, "CONDITION", Order.NONE, "false")
    code = f"if {condition} then\n"
    if config.statement_suffix:
        # The regular suffix would be skipped by the return.
        code += prefix_lines(ctx.inject_id(config.statement_suffix, block), config.indent)
    has_return_value = block.extra_state.get(
        "hasReturnValue", block.get_input("VALUE") is not None
    )
    if has_return_value:
        value = ctx.value_to_code(block, "VALUE", Order.NONE, "nil")
        code += f"{config.indent}return {value}\n"
    else:
        code += f"{config.indent}return\n"
    return code + "end\n"
