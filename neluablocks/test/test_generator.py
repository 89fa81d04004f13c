import os
import sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../../')))

import itertools
import logging

import pytest

from neluablocks.core.Block import Block
from neluablocks.core.Workspace import Workspace
from neluablocks.generator import (
    BLOCK_GENERATORS,
    GenerationError,
    GeneratorConfig,
    InvalidCodeError,
    NeluaGenerator,
    Order,
    UnknownBlockTypeError,
    UnknownOperatorError,
    register,
    workspace_to_code,
)
from neluablocks.serialization import json_to_workspace

HEADER = 'require "string"\nrequire "math"\nrequire "vector"\nrequire "io"\n\n\n'

_ids = itertools.count()


def block(type, fields=None, inputs=None, **extra):
    spec = {"id": f"b{next(_ids)}", "type": type}
    if fields:
        spec["fields"] = fields
    if inputs:
        spec["inputs"] = {name: {"block": child} for name, child in inputs.items()}
    spec.update(extra)
    return spec


def num(value):
    return block("math_number", {"NUM": value})


def arith(op, a, b):
    return block("math_arithmetic", {"OP": op}, {"A": a, "B": b})


def text(value):
    return block("text", {"TEXT": value})


def print_(value, **extra):
    return block("text_print", inputs={"TEXT": value}, **extra)


def generate(blocks, variables=(), **options):
    data = {"name": "test", "variables": list(variables), "blocks": blocks}
    config = GeneratorConfig.from_dict(options)
    return NeluaGenerator(config).workspace_to_code(json_to_workspace(data))


class TestExpressionComposer:

    def test_naked_value_becomes_assignment(self):
        assert generate([arith("ADD", num(5), num(3))]) == HEADER + "local _ = 5 + 3\n"

    def test_looser_inner_expression_is_parenthesised(self):
        code = generate([arith("MULTIPLY", arith("ADD", num(1), num(2)), num(3))])
        assert code == HEADER + "local _ = (1 + 2) * 3\n"

    def test_tighter_inner_expression_is_bare(self):
        code = generate([arith("ADD", arith("MULTIPLY", num(1), num(2)), num(3))])
        assert code == HEADER + "local _ = 1 * 2 + 3\n"

    def test_right_operand_of_minus_keeps_parens(self):
        code = generate([arith("MINUS", num(1), arith("MINUS", num(2), num(3)))])
        assert code == HEADER + "local _ = 1 - (2 - 3)\n"

    def test_left_operand_of_minus_is_bare(self):
        code = generate([arith("MINUS", arith("MINUS", num(1), num(2)), num(3))])
        assert code == HEADER + "local _ = 1 - 2 - 3\n"

    def test_power_is_right_associative(self):
        left = generate([arith("POWER", arith("POWER", num(2), num(3)), num(4))])
        right = generate([arith("POWER", num(2), arith("POWER", num(3), num(4)))])
        assert left == HEADER + "local _ = (2 ^ 3) ^ 4\n"
        assert right == HEADER + "local _ = 2 ^ 3 ^ 4\n"

    def test_missing_input_uses_default(self):
        code = generate([block("math_arithmetic", {"OP": "ADD"})])
        assert code == HEADER + "local _ = 0 + 0\n"

    def test_negating_a_negative_number_is_not_a_comment(self):
        code = generate([block("math_single", {"OP": "NEG"}, {"NUM": num(-2)})])
        assert code == HEADER + "local _ = - -2\n"

    def test_invalid_order_is_rejected(self):
        workspace = json_to_workspace({"blocks": [arith("ADD", num(1), num(2))]})
        generator = NeluaGenerator()
        ctx = generator.init(workspace)
        top = workspace.get_top_blocks()[0]
        with pytest.raises(InvalidCodeError):
            ctx.value_to_code(top, "A", "high")
        with pytest.raises(InvalidCodeError):
            ctx.value_to_code(top, "A", True)
        assert ctx.value_to_code(top, "A", Order.NONE) == "1"

    def test_statement_in_value_slot_is_rejected(self):
        blocks = [block("variables_set", {"VAR": {"id": "v1"}}, {"VALUE": print_(text("x"))})]
        with pytest.raises(InvalidCodeError):
            generate(blocks, [{"id": "v1", "name": "x"}])


class TestStatementAssembly:

    VARIABLES = [{"id": "v1", "name": "total"}]

    def test_chain_with_comment(self):
        second = print_(block("variables_get", {"VAR": {"id": "v1"}}))
        first = block("variables_set", {"VAR": {"id": "v1"}}, {"VALUE": num(0)},
                      comment="Start here", next={"block": second})
        code = generate([first], self.VARIABLES)
        assert code == HEADER + "-- Start here\nlocal total = 0\nprint(total)\n"

    def test_comments_of_value_children_are_collected(self):
        value = text("hi")
        value["comment"] = "greeting"
        assert generate([print_(value)]) == HEADER + "-- greeting\nprint('hi')\n"

    def test_long_comment_is_wrapped(self):
        comment = "word " * 30
        code = generate([print_(text("x"), comment=comment.strip())], comment_wrap=23)
        comment_lines = [line for line in code.splitlines() if line.startswith("--")]
        assert len(comment_lines) > 1
        assert all(len(line) <= 23 for line in comment_lines)

    def test_naked_value_comment(self):
        value = num(42)
        value["comment"] = "answer"
        assert generate([value]) == HEADER + "-- answer\nlocal _ = 42\n"

    def test_disabled_block_is_skipped(self):
        second = print_(text("b"))
        first = print_(text("a"), enabled=False, next={"block": second})
        assert generate([first]) == HEADER + "print('b')\n"

    def test_statement_prefix_and_suffix(self):
        statement = print_(text("x"))
        statement["id"] = "p1"
        code = generate([statement], statement_prefix="highlight(%1)", statement_suffix="done(%1)")
        assert code == HEADER + "highlight('p1')\nprint('x')\ndone('p1')\n"

    def test_top_level_blocks_are_separated(self):
        code = generate([print_(text("a")), print_(text("b"))])
        assert code == HEADER + "print('a')\n\nprint('b')\n"

    def test_empty_workspace(self):
        assert generate([]) == 'require "string"\nrequire "math"\nrequire "vector"\nrequire "io"\n'

    def test_custom_indent(self):
        loop = block("controls_whileUntil", {"MODE": "WHILE"},
                     {"BOOL": block("logic_boolean", {"BOOL": "TRUE"})})
        loop["inputs"]["DO"] = {"statement": print_(text("x"))}
        code = generate([loop], indent=4)
        assert "while true do\n    print('x')\nend\n" in code


class TestHelpers:

    def test_helper_is_defined_once(self):
        code = generate([block("lists_reverse"), block("lists_reverse")])
        assert code.count("local function list_reverse(") == 1
        assert code.count("list_reverse({})") == 2

    def test_helper_precedes_code(self):
        code = generate([block("lists_reverse")])
        assert code.index("local function list_reverse(") < code.index("local _ = list_reverse({})")

    def test_helper_name_avoids_variables(self):
        code = generate([block("lists_reverse")], [{"id": "v1", "name": "list_reverse"}])
        assert "local function list_reverse2(" in code
        assert "local _ = list_reverse2({})" in code

    def test_generate_reports_helpers(self):
        workspace = json_to_workspace({"blocks": [
            block("lists_reverse"),
            block("text_reverse"),
            block("math_number_property", {"PROPERTY": "PRIME"}, {"NUMBER_TO_CHECK": num(7)}),
        ]})
        program = NeluaGenerator().generate(workspace)
        assert program.helpers == ["list_reverse", "math_isPrime"]
        assert "math_isPrime(7)" in program.code


class TestDriver:

    def _workspace(self):
        loop = block("controls_whileUntil", {"MODE": "WHILE"},
                     {"BOOL": block("logic_boolean", {"BOOL": "TRUE"})})
        loop["inputs"]["DO"] = {"statement": block("controls_flow_statements", {"FLOW": "CONTINUE"})}
        return json_to_workspace({
            "variables": [{"id": "v1", "name": "count"}],
            "blocks": [loop, block("lists_reverse"),
                       block("controls_repeat_ext", {"TIMES": 3})],
        })

    def test_passes_are_idempotent(self):
        workspace = self._workspace()
        generator = NeluaGenerator()
        first = generator.workspace_to_code(workspace)
        second = generator.workspace_to_code(workspace)
        assert first == second
        assert workspace_to_code(workspace) == first
        # The user's `count` owns the name, the loop counter is renamed.
        assert "for count2 = 0, 2 do" in first

    def test_finish_resets_pass_state(self):
        generator = NeluaGenerator()
        workspace = self._workspace()
        ctx = generator.init(workspace)
        assert ctx.initialized
        assert ctx.names.is_used("count")
        code = generator.finish(ctx, "print('x')\n")
        assert not ctx.initialized
        assert not ctx.names.is_used("count")
        assert len(ctx.functions) == 0
        assert code.endswith("\nprint('x')\n")

    def test_scrub_naked_value(self):
        assert NeluaGenerator().scrub_naked_value("5 + 3") == "local _ = 5 + 3\n"

    def test_custom_prelude(self):
        config = GeneratorConfig(prelude=('require "io"',))
        code = NeluaGenerator(config).workspace_to_code(
            json_to_workspace({"blocks": [print_(text("x"))]})
        )
        assert code == 'require "io"\n\n\nprint(\'x\')\n'


class TestErrors:

    def test_unknown_block_type(self, caplog):
        with caplog.at_level(logging.ERROR, logger="neluablocks.generator.nelua"):
            with pytest.raises(UnknownBlockTypeError, match="colour_picker"):
                generate([block("colour_picker")])
        assert "failed" in caplog.text

    def test_unknown_operator(self):
        with pytest.raises(UnknownOperatorError):
            generate([block("math_arithmetic", {"OP": "MODULO"})])

    def test_unknown_logic_operation(self):
        with pytest.raises(UnknownOperatorError):
            generate([block("logic_operation", {"OP": "XOR"})])

    def test_errors_carry_the_block(self):
        with pytest.raises(GenerationError) as info:
            generate([block("math_constant", {"CONSTANT": "TAU"})])
        assert info.value.block.type == "math_constant"
        assert "math_constant" in str(info.value)

    def test_duplicate_registration(self):
        with pytest.raises(ValueError):
            register("math_number")(lambda block, ctx: None)

    def test_custom_block_type(self):
        @register("test_beep")
        def beep(block, ctx):
            return "beep()\n"

        try:
            workspace = Workspace()
            workspace.add_top_block(Block("t1", "test_beep"))
            assert workspace_to_code(workspace) == HEADER + "beep()\n"
        finally:
            BLOCK_GENERATORS.pop("test_beep")

    def test_mapping_returning_garbage(self):
        register("test_garbage")(lambda block, ctx: 42)
        try:
            workspace = Workspace()
            workspace.add_top_block(Block("t1", "test_garbage"))
            with pytest.raises(InvalidCodeError):
                workspace_to_code(workspace)
        finally:
            BLOCK_GENERATORS.pop("test_garbage")
