"""
Text blocks.

Positions are 1-based, as on the blocks and in Nelua's string library.
Helpers scan with string.sub instead of pattern matching so that needles are
always taken literally.
"""

import re

from neluablocks.generator.errors import UnhandledSlotConfigurationError, UnknownOperatorError
from neluablocks.generator.order import Order
from neluablocks.generator.registry import register
from neluablocks.generator.strings import multiline_quote, quote

from .common import EMPTY_STRING, HELPER, item_count

_INLINE_INDEX_RE = re.compile(r"^-?\w*$")

FIRST_INDEX_OF = [
    f"{HELPER}(str: string, substr: string): integer",
    "  local n: integer = #substr",
    "  for i = 1, #str - n + 1 do",
    "    if string.sub(str, i, i + n - 1) == substr then",
    "      return i",
    "    end",
    "  end",
    "  return 0",
    "end",
]

LAST_INDEX_OF = [
    f"{HELPER}(str: string, substr: string): integer",
    "  local n: integer = #substr",
    "  for i = #str - n + 1, 1, -1 do",
    "    if string.sub(str, i, i + n - 1) == substr then",
    "      return i",
    "    end",
    "  end",
    "  return 0",
    "end",
]

RANDOM_LETTER = [
    f"{HELPER}(str: string): string",
    "  local index: integer = math.random(#str)",
    "  return string.sub(str, index, index)",
    "end",
]

CHAR_AT = [
    f"{HELPER}(str: string, index: integer): string",
    "  return string.sub(str, index, index)",
    "end",
]

COUNT = [
    f"{HELPER}(haystack: string, needle: string): integer",
    "  if #needle == 0 then",
    "    return #haystack + 1",
    "  end",
    "  local n: integer = #needle",
    "  local count: integer = 0",
    "  local i: integer = 1",
    "  while i <= #haystack - n + 1 do",
    "    if string.sub(haystack, i, i + n - 1) == needle then",
    "      count = count + 1",
    "      i = i + n",
    "    else",
    "      i = i + 1",
    "    end",
    "  end",
    "  return count",
    "end",
]

REPLACE = [
    f"{HELPER}(haystack: string, needle: string, replacement: string): string",
    "  if #needle == 0 then",
    "    return haystack",
    "  end",
    "  local n: integer = #needle",
    "  local result: string = ''",
    "  local i: integer = 1",
    "  while i <= #haystack do",
    "    if string.sub(haystack, i, i + n - 1) == needle then",
    "      result = result .. replacement",
    "      i = i + n",
    "    else",
    "      result = result .. string.sub(haystack, i, i)",
    "      i = i + 1",
    "    end",
    "  end",
    "  return result",
    "end",
]


@register("text")
def text(block, ctx):
    return quote(block.get_field_value("TEXT") or ""), Order.ATOMIC


@register("text_multiline")
def text_multiline(block, ctx):
    value = block.get_field_value("TEXT") or ""
    order = Order.CONCATENATION if "\n" in value else Order.ATOMIC
    return multiline_quote(value), order


@register("text_join")
def text_join(block, ctx):
    count = item_count(block)
    if count == 0:
        return EMPTY_STRING, Order.ATOMIC
    if count == 1:
        element = ctx.value_to_code(block, "ADD0", Order.NONE, EMPTY_STRING)
        return f"tostring({element})", Order.HIGH
    elements = [
        ctx.value_to_code(block, f"ADD{i}", Order.CONCATENATION, EMPTY_STRING)
        for i in range(count)
    ]
    return " .. ".join(elements), Order.CONCATENATION


@register("text_append")
def text_append(block, ctx):
    name = ctx.variable_name(block.get_field_value("VAR"))
    value = ctx.value_to_code(block, "TEXT", Order.CONCATENATION, EMPTY_STRING)
    return f"{name} = {name} .. {value}\n"


@register("text_length")
def text_length(block, ctx):
    value = ctx.value_to_code(block, "VALUE", Order.UNARY, EMPTY_STRING)
    return "#" + value, Order.UNARY


@register("text_isEmpty")
def text_is_empty(block, ctx):
    value = ctx.value_to_code(block, "VALUE", Order.UNARY, EMPTY_STRING)
    return f"#{value} == 0", Order.RELATIONAL


@register("text_print")
def text_print(block, ctx):
    message = ctx.value_to_code(block, "TEXT", Order.NONE, EMPTY_STRING)
    return f"print({message})\n"


@register("text_indexOf")
def text_index_of(block, ctx):
    substring = ctx.value_to_code(block, "FIND", Order.NONE, EMPTY_STRING)
    value = ctx.value_to_code(block, "VALUE", Order.NONE, EMPTY_STRING)
    end = block.get_field_value("END") or "FIRST"
    if end == "FIRST":
        function_name = ctx.provide_function("firstIndexOf", FIRST_INDEX_OF)
    elif end == "LAST":
        function_name = ctx.provide_function("lastIndexOf", LAST_INDEX_OF)
    else:
        raise UnknownOperatorError(f"Unknown search end '{end}'", block)
    return f"{function_name}({value}, {substring})", Order.HIGH


@register("text_charAt")
def text_char_at(block, ctx):
    where = block.get_field_value("WHERE") or "FROM_START"
    value = ctx.value_to_code(block, "VALUE", Order.NONE, EMPTY_STRING)

    if where == "RANDOM":
        function_name = ctx.provide_function("text_random_letter", RANDOM_LETTER)
        return f"{function_name}({value})", Order.HIGH
    if where == "FIRST":
        start = "1"
    elif where == "LAST":
        start = "-1"
    elif where == "FROM_START":
        start = ctx.value_to_code(block, "AT", Order.NONE, "1")
    elif where == "FROM_END":
        at = ctx.value_to_code(block, "AT", Order.UNARY, "1")
        start = f"-({at})" if at.startswith("-") else "-" + at
    else:
        raise UnhandledSlotConfigurationError(f"Unhandled option '{where}' for text_charAt", block)

    if _INLINE_INDEX_RE.match(start):
        return f"string.sub({value}, {start}, {start})", Order.HIGH
    # The index is an expression: evaluate it once, inside the helper call.
    function_name = ctx.provide_function("text_char_at", CHAR_AT)
    return f"{function_name}({value}, {start})", Order.HIGH


@register("text_count")
def text_count(block, ctx):
    haystack = ctx.value_to_code(block, "TEXT", Order.NONE, EMPTY_STRING)
    needle = ctx.value_to_code(block, "SUB", Order.NONE, EMPTY_STRING)
    function_name = ctx.provide_function("text_count", COUNT)
    return f"{function_name}({haystack}, {needle})", Order.HIGH


@register("text_replace")
def text_replace(block, ctx):
    haystack = ctx.value_to_code(block, "TEXT", Order.NONE, EMPTY_STRING)
    needle = ctx.value_to_code(block, "FROM", Order.NONE, EMPTY_STRING)
    replacement = ctx.value_to_code(block, "TO", Order.NONE, EMPTY_STRING)
    function_name = ctx.provide_function("text_replace", REPLACE)
    return f"{function_name}({haystack}, {needle}, {replacement})", Order.HIGH


@register("text_reverse")
def text_reverse(block, ctx):
    value = ctx.value_to_code(block, "TEXT", Order.NONE, EMPTY_STRING)
    return f"string.reverse({value})", Order.HIGH
