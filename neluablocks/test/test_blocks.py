import os
import sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../../')))

import itertools

import pytest

from neluablocks.generator import (
    GenerationError,
    GeneratorConfig,
    NeluaGenerator,
    UnhandledSlotConfigurationError,
    UnknownOperatorError,
)
from neluablocks.serialization import json_to_workspace

_ids = itertools.count()

VARIABLES = [
    {"id": "va", "name": "a"},
    {"id": "vb", "name": "b"},
    {"id": "vl", "name": "l"},
    {"id": "vs", "name": "s"},
    {"id": "vn", "name": "n"},
]


def block(type, fields=None, inputs=None, statements=None, **extra):
    spec = {"id": f"k{next(_ids)}", "type": type, "inputs": {}}
    if fields:
        spec["fields"] = fields
    for name, child in (inputs or {}).items():
        spec["inputs"][name] = {"block": child}
    for name, child in (statements or {}).items():
        spec["inputs"][name] = {"statement": child}
    spec.update(extra)
    return spec


def num(value):
    return block("math_number", {"NUM": value})


def text(value):
    return block("text", {"TEXT": value})


def var(var_id):
    return block("variables_get", {"VAR": {"id": var_id}})


def say(value):
    return block("text_print", inputs={"TEXT": text(value)})


@pytest.fixture
def body():
    """Generate `blocks` and return the program without its prelude."""
    def _body(*blocks, **options):
        data = {"variables": VARIABLES, "blocks": list(blocks)}
        generator = NeluaGenerator(GeneratorConfig.from_dict(options))
        code = generator.workspace_to_code(json_to_workspace(data))
        return code.split('require "io"\n', 1)[1].lstrip("\n")
    return _body


class TestLogic:

    def test_if_elseif_else(self, body):
        branch = block("controls_if", inputs={"IF0": var("va"), "IF1": var("vb")},
                       statements={"DO0": say("1"), "DO1": say("2"), "ELSE": say("3")})
        assert body(branch) == (
            "if a then\n"
            "  print('1')\n"
            "elseif b then\n"
            "  print('2')\n"
            "else\n"
            "  print('3')\n"
            "end\n"
        )

    def test_empty_else_from_mutation(self, body):
        branch = block("controls_if", inputs={"IF0": var("va")}, extraState={"hasElse": True})
        assert body(branch) == "if a then\nelse\nend\n"

    def test_missing_operand_is_neutral(self, body):
        operation = block("logic_operation", {"OP": "AND"}, {"A": var("va")})
        assert body(operation) == "local _ = a and true\n"

    def test_both_operands_missing(self, body):
        assert body(block("logic_operation", {"OP": "OR"})) == "local _ = false or false\n"

    def test_compare(self, body):
        compare = block("logic_compare", {"OP": "NEQ"}, {"A": var("va"), "B": num(3)})
        assert body(compare) == "local _ = a ~= 3\n"

    def test_negate_wraps_comparison(self, body):
        compare = block("logic_compare", {"OP": "EQ"}, {"A": var("va"), "B": var("vb")})
        assert body(block("logic_negate", inputs={"BOOL": compare})) == "local _ = not (a == b)\n"

    def test_ternary(self, body):
        ternary = block("logic_ternary", inputs={"IF": var("va"), "THEN": num(1), "ELSE": num(2)})
        assert body(ternary) == "local _ = a and 1 or 2\n"

    def test_unknown_boolean(self, body):
        with pytest.raises(UnknownOperatorError, match="MAYBE"):
            body(block("logic_boolean", {"BOOL": "MAYBE"}))

    def test_false(self, body):
        assert body(block("logic_boolean", {"BOOL": "FALSE"})) == "local _ = false\n"

    def test_non_integer_else_if_count(self, body):
        branch = block("controls_if", inputs={"IF0": var("va")}, extraState={"elseIfCount": "two"})
        with pytest.raises(GenerationError, match="elseIfCount"):
            body(branch)


class TestMath:

    def test_divisible_by_zero_is_nil(self, body):
        check = block("math_number_property", {"PROPERTY": "DIVISIBLE_BY"},
                      {"NUMBER_TO_CHECK": var("vn"), "DIVISOR": num(0)})
        assert body(check) == "local _ = nil\n"

    def test_even(self, body):
        total = block("math_arithmetic", {"OP": "ADD"}, {"A": var("va"), "B": var("vb")})
        check = block("math_number_property", {"PROPERTY": "EVEN"}, {"NUMBER_TO_CHECK": total})
        assert body(check) == "local _ = (a + b) % 2 == 0\n"

    def test_round_keeps_addition_bare(self, body):
        total = block("math_arithmetic", {"OP": "ADD"}, {"A": var("va"), "B": num(1)})
        rounded = block("math_round", {"OP": "ROUND"}, {"NUM": total})
        assert body(rounded) == "local _ = math.floor(a + 1 + .5)\n"

    def test_trig_in_degrees(self, body):
        assert body(block("math_trig", {"OP": "SIN"}, {"NUM": num(90)})) == (
            "local _ = math.sin(math.rad(90))\n"
        )

    def test_change(self, body):
        change = block("math_change", {"VAR": {"id": "vn"}}, {"DELTA": num(1)})
        assert body(change) == "n = n + 1\n"

    def test_unknown_single(self, body):
        with pytest.raises(UnknownOperatorError):
            body(block("math_single", {"OP": "CUBE"}, {"NUM": num(2)}))


class TestText:

    def test_join_chains_items(self, body):
        join = block("text_join", inputs={"ADD0": text("a"), "ADD1": var("va"), "ADD2": num(1)})
        assert body(join) == "local _ = 'a' .. a .. 1\n"

    def test_join_single_item(self, body):
        join = block("text_join", inputs={"ADD0": var("va")})
        assert body(join) == "local _ = tostring(a)\n"

    def test_join_empty(self, body):
        assert body(block("text_join", extraState={"itemCount": 0})) == "local _ = ''\n"

    def test_append(self, body):
        append = block("text_append", {"VAR": {"id": "vs"}}, {"TEXT": text("!")})
        assert body(append) == "s = s .. '!'\n"

    def test_replace_uses_helper(self, body):
        replace = block("text_replace", inputs={"TEXT": var("vs"), "FROM": text("l"), "TO": text("L")})
        code = body(replace)
        assert code.startswith("local function text_replace(haystack: string, needle: string, "
                               "replacement: string): string\n")
        assert code.endswith("\nlocal _ = text_replace(s, 'l', 'L')\n")

    def test_char_at_from_end_inline(self, body):
        char = block("text_charAt", {"WHERE": "FROM_END"}, {"VALUE": var("vs"), "AT": num(2)})
        assert body(char) == "local _ = string.sub(s, -2, -2)\n"

    def test_char_at_expression_uses_helper(self, body):
        at = block("math_arithmetic", {"OP": "ADD"}, {"A": var("vn"), "B": num(1)})
        char = block("text_charAt", {"WHERE": "FROM_END"}, {"VALUE": var("vs"), "AT": at})
        assert body(char).endswith("local _ = text_char_at(s, -(n + 1))\n")

    def test_char_at_unknown_where(self, body):
        with pytest.raises(UnhandledSlotConfigurationError):
            body(block("text_charAt", {"WHERE": "MIDDLE"}, {"VALUE": var("vs")}))

    def test_index_of(self, body):
        find = block("text_indexOf", {"END": "LAST"}, {"VALUE": var("vs"), "FIND": text("x")})
        assert body(find).endswith("local _ = lastIndexOf(s, 'x')\n")

    def test_unknown_index_of_end(self, body):
        find = block("text_indexOf", {"END": "MIDDLE"}, {"VALUE": var("vs"), "FIND": text("x")})
        with pytest.raises(UnknownOperatorError):
            body(find)

    def test_char_at_first_ignores_position(self, body):
        at = block("math_number_property", {"PROPERTY": "PRIME"}, {"NUMBER_TO_CHECK": num(7)})
        char = block("text_charAt", {"WHERE": "FIRST"}, {"VALUE": var("vs"), "AT": at})
        assert body(char) == "local _ = string.sub(s, 1, 1)\n"


class TestLists:

    def _get(self, where, value, at=None, mode="GET"):
        inputs = {"VALUE": value}
        if at is not None:
            inputs["AT"] = at
        return block("lists_getIndex", {"MODE": mode, "WHERE": where}, inputs)

    def test_create_with_fills_gaps(self, body):
        create = block("lists_create_with", inputs={"ADD0": num(1)}, extraState={"itemCount": 3})
        assert body(create) == "local _ = {1, nil, nil}\n"

    def test_get_from_start_is_zero_based(self, body):
        assert body(self._get("FROM_START", var("vl"), num(2))) == "local _ = l[1]\n"

    def test_get_from_start_expression(self, body):
        assert body(self._get("FROM_START", var("vl"), var("vn"))) == "local _ = l[n - 1]\n"

    def test_get_last(self, body):
        assert body(self._get("LAST", var("vl"))) == "local _ = l[#l - 1]\n"

    def test_get_from_end(self, body):
        assert body(self._get("FROM_END", var("vl"), num(2))) == "local _ = l[#l - 2]\n"

    def test_get_last_of_expression_uses_helper(self, body):
        reversed_list = block("lists_reverse", inputs={"LIST": var("vl")})
        code = body(self._get("LAST", reversed_list))
        assert "local function list_get_last(list: auto)\n  return list[#list - 1]\nend" in code
        assert code.endswith("local _ = list_get_last(list_reverse(l))\n")

    def test_remove_from_expression_captures_list(self, body):
        reversed_list = block("lists_reverse", inputs={"LIST": var("vl")})
        code = body(self._get("LAST", reversed_list, mode="REMOVE"))
        assert code.endswith("\nlocal tmp_list = list_reverse(l)\ntmp_list:remove(#tmp_list - 1)\n")

    def test_get_remove(self, body):
        assert body(self._get("FIRST", var("vl"), mode="GET_REMOVE")) == "local _ = l:remove(0)\n"

    def test_unknown_where(self, body):
        with pytest.raises(UnhandledSlotConfigurationError):
            body(self._get("MIDDLE", var("vl")))

    def test_unknown_mode(self, body):
        with pytest.raises(UnknownOperatorError):
            body(self._get("FIRST", var("vl"), mode="PEEK"))

    def test_insert_last_pushes(self, body):
        insert = block("lists_setIndex", {"MODE": "INSERT", "WHERE": "LAST"},
                       {"LIST": var("vl"), "TO": num(5)})
        assert body(insert) == "l:push(5)\n"

    def test_set_first(self, body):
        update = block("lists_setIndex", {"MODE": "SET", "WHERE": "FIRST"},
                       {"LIST": var("vl"), "TO": num(5)})
        assert body(update) == "l[0] = 5\n"

    def test_insert_from_start(self, body):
        insert = block("lists_setIndex", {"MODE": "INSERT", "WHERE": "FROM_START"},
                       {"LIST": var("vl"), "AT": num(1), "TO": text("x")})
        assert body(insert) == "l:insert(0, 'x')\n"

    def test_sort_descending_text(self, body):
        sort = block("lists_sort", {"TYPE": "TEXT", "DIRECTION": "-1"}, {"LIST": var("vl")})
        code = body(sort)
        assert "return tostring(b) < tostring(a)" in code
        assert code.endswith("local _ = list_sort_text(l, -1)\n")

    def test_sorts_of_different_types_get_different_helpers(self, body):
        numeric = block("lists_sort", {"TYPE": "NUMERIC", "DIRECTION": "1"}, {"LIST": var("vl")})
        text_sort = block("lists_sort", {"TYPE": "TEXT", "DIRECTION": "1"}, {"LIST": var("vl")})
        code = body(numeric, text_sort)
        assert "local function list_sort_numeric(" in code
        assert "local function list_sort_text(" in code

    def test_unknown_sort_direction(self, body):
        with pytest.raises(UnknownOperatorError):
            body(block("lists_sort", {"TYPE": "NUMERIC", "DIRECTION": "2"}, {"LIST": var("vl")}))

    def test_index_of_first(self, body):
        find = block("lists_indexOf", {"END": "FIRST"}, {"VALUE": var("vl"), "FIND": num(3)})
        assert body(find).endswith("local _ = first_index(l, 3)\n")

    def test_unknown_index_of_end(self, body):
        find = block("lists_indexOf", {"END": "BOGUS"}, {"VALUE": var("vl"), "FIND": num(1)})
        with pytest.raises(UnknownOperatorError):
            body(find)

    @pytest.mark.parametrize("count", ["x", -1, 1.5, True])
    def test_bad_item_count(self, body, count):
        create = block("lists_create_with", inputs={"ADD0": num(1)}, extraState={"itemCount": count})
        with pytest.raises(GenerationError, match="itemCount"):
            body(create)

    def test_item_count_as_text(self, body):
        create = block("lists_create_with", extraState={"itemCount": "2"})
        assert body(create) == "local _ = {nil, nil}\n"


class TestProcedures:

    PARAMS = {"params": [{"id": "px", "name": "x"}]}

    def test_definition_and_call(self, body):
        x = block("variables_get", {"VAR": {"id": "px"}})
        y = block("variables_get", {"VAR": {"id": "px"}})
        definition = block("procedures_defreturn", {"NAME": "double"},
                           {"RETURN": block("math_arithmetic", {"OP": "ADD"}, {"A": x, "B": y})},
                           extraState=self.PARAMS)
        call = block("procedures_callreturn", {"NAME": "double"}, {"ARG0": num(21)},
                     extraState=self.PARAMS)
        printed = block("text_print", inputs={"TEXT": call})
        assert body(definition, printed) == (
            "local function double(x: auto)\n"
            "  return x + x\n"
            "end\n"
            "\n"
            "print(double(21))\n"
        )

    def test_if_return_without_value(self, body):
        guard = block("procedures_ifreturn", inputs={"CONDITION": var("va")},
                      extraState={"hasReturnValue": False})
        definition = block("procedures_defnoreturn", {"NAME": "check"}, statements={"STACK": guard})
        assert body(definition) == (
            "local function check()\n"
            "  if a then\n"
            "    return\n"
            "  end\n"
            "end\n"
        )

    def test_call_without_return(self, body):
        definition = block("procedures_defnoreturn", {"NAME": "beep"}, statements={"STACK": say("b")})
        call = block("procedures_callnoreturn", {"NAME": "beep"})
        assert body(definition, call) == (
            "local function beep()\n"
            "  print('b')\n"
            "end\n"
            "\n"
            "beep()\n"
        )

    def test_procedure_name_avoids_reserved_words(self, body):
        definition = block("procedures_defnoreturn", {"NAME": "print"})
        call = block("procedures_callnoreturn", {"NAME": "print"})
        assert body(definition, call).endswith("print2()\n")


class TestVariables:

    def test_set_declares_local(self, body):
        assert body(block("variables_set", {"VAR": {"id": "va"}}, {"VALUE": num(1)})) == "local a = 1\n"

    def test_set_default_value(self, body):
        assert body(block("variables_set", {"VAR": {"id": "va"}})) == "local a = 0\n"

    def test_reserved_variable_name(self, body):
        data = {"variables": [{"id": "v1", "name": "end"}],
                "blocks": [block("variables_set", {"VAR": {"id": "v1"}}, {"VALUE": num(1)})]}
        code = NeluaGenerator().workspace_to_code(json_to_workspace(data))
        assert code.endswith("local end2 = 1\n")
