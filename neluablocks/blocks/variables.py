from neluablocks.generator.order import Order
from neluablocks.generator.registry import register


# Nelua infers the type, so the dynamic variants generate the same code.
@register("variables_get", "variables_get_dynamic")
def variables_get(block, ctx):
    return ctx.variable_name(block.get_field_value("VAR")), Order.ATOMIC


@register("variables_set", "variables_set_dynamic")
def variables_set(block, ctx):
    value = ctx.value_to_code(block, "VALUE", Order.NONE, "0")
    name = ctx.variable_name(block.get_field_value("VAR"))
    return f"local {name} = {value}\n"
