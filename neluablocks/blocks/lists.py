"""
List blocks.

Lists are Nelua vectors, indexed from 0, while the blocks count from 1.
Every index expression handed out by list_index() is already converted.
"""

from neluablocks.generator.errors import UnhandledSlotConfigurationError, UnknownOperatorError
from neluablocks.generator.order import Order
from neluablocks.generator.registry import register
from neluablocks.generator.strings import is_number, number_literal

from .common import EMPTY_LIST, HELPER, is_identifier, item_count

# Anchors that mention the list a second time in the index expression.
REPEATS_LIST = ("LAST", "FROM_END", "RANDOM")

SORT_COMPARISONS = {
    "NUMERIC": "{a} < {b}",
    "TEXT": "tostring({a}) < tostring({b})",
    "IGNORE_CASE": "string.lower(tostring({a})) < string.lower(tostring({b}))",
}

SORT_DIRECTIONS = {"1": 1, "-1": -1}

REPEAT = [
    f"{HELPER}(item: auto, count: integer)",
    "  local result: vector(#[item.type]#) = {}",
    "  for i = 1, count do",
    "    result:push(item)",
    "  end",
    "  return result",
    "end",
]

FIRST_INDEX = [
    f"{HELPER}(list: auto, item: auto): integer",
    "  for i = 0, #list - 1 do",
    "    if list[i] == item then",
    "      return i + 1",
    "    end",
    "  end",
    "  return 0",
    "end",
]

LAST_INDEX = [
    f"{HELPER}(list: auto, item: auto): integer",
    "  for i = #list - 1, 0, -1 do",
    "    if list[i] == item then",
    "      return i + 1",
    "    end",
    "  end",
    "  return 0",
    "end",
]

REVERSE = [
    f"{HELPER}(list: auto)",
    "  local result: #[list.type]# = {}",
    "  for i = #list - 1, 0, -1 do",
    "    result:push(list[i])",
    "  end",
    "  return result",
    "end",
]


def _sort_helper(comparison: str):
    before = comparison.format(a="a", b="b")
    after = comparison.format(a="b", b="a")
    return [
        f"{HELPER}(list: auto, direction: integer)",
        "  local function before(a: auto, b: auto, direction: integer): boolean",
        "    if direction < 0 then",
        f"      return {after}",
        "    end",
        f"    return {before}",
        "  end",
        "  local function partition(items: auto, low: integer, high: integer, direction: integer): integer",
        "    local pivot = items[high]",
        "    local store: integer = low",
        "    for i = low, high - 1 do",
        "      if before(items[i], pivot, direction) then",
        "        items[i], items[store] = items[store], items[i]",
        "        store = store + 1",
        "      end",
        "    end",
        "    items[store], items[high] = items[high], items[store]",
        "    return store",
        "  end",
        "  local function quicksort(items: auto, low: integer, high: integer, direction: integer)",
        "    if low < high then",
        "      local pivot: integer = partition(items, low, high, direction)",
        "      quicksort(items, low, pivot - 1, direction)",
        "      quicksort(items, pivot + 1, high, direction)",
        "    end",
        "  end",
        "  local result: #[list.type]# = {}",
        "  for i = 0, #list - 1 do",
        "    result:push(list[i])",
        "  end",
        "  quicksort(result, 0, #result - 1, direction)",
        "  return result",
        "end",
    ]


def list_index(block, list_code: str, where: str, at: str) -> str:
    """
    0-based index expression for a 1-based position.

    `at` must have been composed at ADDITIVE for FROM_START and at
    MULTIPLICATIVE for FROM_END.
    """
    if where == "FIRST":
        return "0"
    if where == "LAST":
        return f"#{list_code} - 1"
    if where == "FROM_START":
        if is_number(at):
            return number_literal(float(at) - 1)
        return f"{at} - 1"
    if where == "FROM_END":
        return f"#{list_code} - {at}"
    if where == "RANDOM":
        return f"math.random(0, #{list_code} - 1)"
    raise UnhandledSlotConfigurationError(f"Unhandled list position '{where}'", block)


def _at_order(where: str) -> Order:
    return Order.MULTIPLICATIVE if where == "FROM_END" else Order.ADDITIVE


@register("lists_create_empty")
def lists_create_empty(block, ctx):
    return EMPTY_LIST, Order.ATOMIC


@register("lists_create_with")
def lists_create_with(block, ctx):
    elements = [
        ctx.value_to_code(block, f"ADD{i}", Order.NONE, "nil")
        for i in range(item_count(block))
    ]
    return "{" + ", ".join(elements) + "}", Order.ATOMIC


@register("lists_repeat")
def lists_repeat(block, ctx):
    function_name = ctx.provide_function("create_list_repeated", REPEAT)
    item = ctx.value_to_code(block, "ITEM", Order.NONE, "nil")
    count = ctx.value_to_code(block, "NUM", Order.NONE, "0")
    return f"{function_name}({item}, {count})", Order.HIGH


@register("lists_length")
def lists_length(block, ctx):
    value = ctx.value_to_code(block, "VALUE", Order.UNARY, EMPTY_LIST)
    return "#" + value, Order.UNARY


@register("lists_isEmpty")
def lists_is_empty(block, ctx):
    value = ctx.value_to_code(block, "VALUE", Order.UNARY, EMPTY_LIST)
    return f"#{value} == 0", Order.RELATIONAL


@register("lists_indexOf")
def lists_index_of(block, ctx):
    item = ctx.value_to_code(block, "FIND", Order.NONE, "nil")
    value = ctx.value_to_code(block, "VALUE", Order.NONE, EMPTY_LIST)
    end = block.get_field_value("END") or "FIRST"
    if end == "FIRST":
        function_name = ctx.provide_function("first_index", FIRST_INDEX)
    elif end == "LAST":
        function_name = ctx.provide_function("last_index", LAST_INDEX)
    else:
        raise UnknownOperatorError(f"Unknown search end '{end}'", block)
    return f"{function_name}({value}, {item})", Order.HIGH


@register("lists_getIndex")
def lists_get_index(block, ctx):
    mode = block.get_field_value("MODE") or "GET"
    where = block.get_field_value("WHERE") or "FROM_START"
    if mode not in ("GET", "GET_REMOVE", "REMOVE"):
        raise UnknownOperatorError(f"Unknown list access mode '{mode}'", block)
    list_code = ctx.value_to_code(block, "VALUE", Order.HIGH, f"({EMPTY_LIST})")

    if where in REPEATS_LIST and not is_identifier(list_code):
        # The list expression must be evaluated exactly once.
        if mode == "REMOVE":
            at = ctx.value_to_code(block, "AT", _at_order(where), "1")
            list_var = ctx.temporary_name("tmp_list")
            index = list_index(block, list_var, where, at)
            return f"local {list_var} = {list_code}\n{list_var}:remove({index})\n"

        at = ctx.value_to_code(block, "AT", Order.NONE, "1")
        takes_at = where == "FROM_END"
        index = list_index(block, "list", where, "at")
        if mode == "GET":
            body = f"  return list[{index}]"
            key = "list_get_" + where.lower()
        else:
            body = f"  return list:remove({index})"
            key = "list_remove_" + where.lower()
        function_name = ctx.provide_function(key, [
            f"{HELPER}(list: auto" + (", at: integer)" if takes_at else ")"),
            body,
            "end",
        ])
        args = f"{list_code}, {at}" if takes_at else list_code
        return f"{function_name}({args})", Order.HIGH

    at = ctx.value_to_code(block, "AT", _at_order(where), "1")
    index = list_index(block, list_code, where, at)
    if mode == "GET":
        return f"{list_code}[{index}]", Order.HIGH
    if mode == "GET_REMOVE":
        return f"{list_code}:remove({index})", Order.HIGH
    return f"{list_code}:remove({index})\n"


@register("lists_setIndex")
def lists_set_index(block, ctx):
    list_code = ctx.value_to_code(block, "LIST", Order.HIGH, f"({EMPTY_LIST})")
    mode = block.get_field_value("MODE") or "SET"
    where = block.get_field_value("WHERE") or "FROM_START"
    if mode not in ("SET", "INSERT"):
        raise UnknownOperatorError(f"Unknown list update mode '{mode}'", block)
    at = ctx.value_to_code(block, "AT", _at_order(where), "1")
    value = ctx.value_to_code(block, "TO", Order.NONE, "nil")

    code = ""
    if where in REPEATS_LIST and not is_identifier(list_code):
        list_var = ctx.temporary_name("tmp_list")
        code = f"local {list_var} = {list_code}\n"
        list_code = list_var

    if mode == "SET":
        return code + f"{list_code}[{list_index(block, list_code, where, at)}] = {value}\n"
    if where == "LAST":
        # Insert after, not before, the current last item.
        return code + f"{list_code}:push({value})\n"
    return code + f"{list_code}:insert({list_index(block, list_code, where, at)}, {value})\n"


@register("lists_reverse")
def lists_reverse(block, ctx):
    value = ctx.value_to_code(block, "LIST", Order.NONE, EMPTY_LIST)
    function_name = ctx.provide_function("list_reverse", REVERSE)
    return f"{function_name}({value})", Order.HIGH


@register("lists_sort")
def lists_sort(block, ctx):
    value = ctx.value_to_code(block, "LIST", Order.NONE, EMPTY_LIST)
    sort_type = block.get_field_value("TYPE") or "NUMERIC"
    direction = SORT_DIRECTIONS.get(str(block.get_field_value("DIRECTION") or "1"))
    if sort_type not in SORT_COMPARISONS:
        raise UnknownOperatorError(f"Unknown sort type '{sort_type}'", block)
    if direction is None:
        raise UnknownOperatorError(
            f"Unknown sort direction '{block.get_field_value('DIRECTION')}'", block
        )
    function_name = ctx.provide_function(
        "list_sort_" + sort_type.lower(), _sort_helper(SORT_COMPARISONS[sort_type])
    )
    return f"{function_name}({value}, {direction})", Order.HIGH
