"""
Per-pass generation state and the recursive block walk.

A PassContext owns everything that must not outlive one pass: the name
database, the shared function cache, the top-level output buffer and the
stack of open loop frames. Mapping functions receive it as their second
argument and call back into it to compose child expressions and statements.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple, Union, TYPE_CHECKING

from neluablocks.core.Types import NameType

from .config import GeneratorConfig
from .errors import InvalidCodeError
from .flow import LoopFrame
from .functions import FunctionCache
from .names import Names
from .registry import SELF_INJECTING_TYPES, get_generator
from .strings import prefix_lines, quote, wrap

if TYPE_CHECKING:
    from neluablocks.core.Block import Block

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "-- "

BlockCode = Union[str, Tuple[str, int]]


class PassContext:

    def __init__(self, config: GeneratorConfig, reserved_words: Iterable[str]):
        self.config = config
        self.names = Names(reserved_words)
        self.functions = FunctionCache(self.names, indent=config.indent)
        self.output: List[str] = []
        self.loops: List[LoopFrame] = []
        self.initialized = False

    # ── Statement assembly ────────────────────────────────────────────────

    def block_to_code(self, block: Optional["Block"], this_only: bool = False) -> BlockCode:
        """
        Generate code for `block`.

        Statement blocks yield a string that already includes comments and the
        rest of their next-chain (unless `this_only`). Value blocks yield a
        (code, order) tuple. Missing blocks, and blocks with nothing to emit,
        yield "".
        """
        if not self.initialized:
            logger.warning("block_to_code called outside of an initialised pass")
        if block is None:
            return ""
        if not block.enabled:
            return "" if this_only else self.block_to_code(block.get_next_block())

        func = get_generator(block)
        logger.debug(f"Generating {block.type} '{block.id}'")
        code = func(block, self)

        if isinstance(code, tuple):
            if len(code) != 2 or not isinstance(code[1], int):
                raise InvalidCodeError(f"Invalid expression tuple {code!r}", block)
            return code
        if isinstance(code, str):
            if block.type in SELF_INJECTING_TYPES:
                return self.scrub(block, code, this_only)
            if self.config.statement_prefix:
                code = self.inject_id(self.config.statement_prefix, block) + code
            if self.config.statement_suffix:
                code = code + self.inject_id(self.config.statement_suffix, block)
            return self.scrub(block, code, this_only)
        if code is None:
            return ""
        raise InvalidCodeError(f"Invalid code generated: {code!r}", block)

    def statement_to_code(self, block: "Block", name: str) -> str:
        """Generate the chain plugged into statement input `name`, indented one level."""
        target = block.get_input_target_block(name)
        code = self.block_to_code(target)
        if not isinstance(code, str):
            raise InvalidCodeError(f"Expecting code from statement block in '{name}'", target)
        if code:
            code = prefix_lines(code, self.config.indent)
        return code

    def scrub(self, block: "Block", code: str, this_only: bool = False) -> str:
        """Attach `block`'s comments in front of `code` and append the next-chain."""
        comment_code = ""
        if not block.is_value_child():
            comment = block.get_comment_text()
            if comment:
                comment = wrap(comment, self.config.comment_wrap - 3)
                comment_code += prefix_lines(comment, COMMENT_PREFIX) + "\n"
            # Value inputs only: statement inputs collect their own comments.
            for slot in block.inputs.values():
                if slot.is_value() and slot.target is not None:
                    nested = self.all_nested_comments(slot.target)
                    if nested:
                        comment_code += prefix_lines(nested, COMMENT_PREFIX)

        next_code = "" if this_only else self.block_to_code(block.get_next_block())
        if not isinstance(next_code, str):
            raise InvalidCodeError("Value block connected as next statement", block.get_next_block())
        return comment_code + code + next_code

    @staticmethod
    def all_nested_comments(block: "Block") -> str:
        comments = [b.get_comment_text() for b in block.get_descendants() if b.get_comment_text()]
        if comments:
            comments.append("")
        return "\n".join(comments)

    # ── Expression composition ────────────────────────────────────────────

    def value_to_code(self, block: "Block", name: str, order: int, default: str = "") -> str:
        """
        Generate the expression plugged into value input `name`.

        The result is parenthesised when its own order is looser than `order`.
        An empty input yields `default` untouched.
        """
        if isinstance(order, bool) or not isinstance(order, int):
            raise InvalidCodeError(f"Expecting valid order, got {order!r}", block)
        target = block.get_input_target_block(name)
        if target is None:
            return default
        result = self.block_to_code(target)
        if result == "":
            return default
        if not isinstance(result, tuple):
            raise InvalidCodeError(f"Expecting tuple from value block in '{name}'", target)
        code, inner_order = result
        if not code:
            return default
        if inner_order > order:
            code = f"({code})"
        return code

    # ── Names and helpers ─────────────────────────────────────────────────

    def variable_name(self, key: Optional[str]) -> str:
        return self.names.get_name(key or "", NameType.VARIABLE)

    def procedure_name(self, key: Optional[str]) -> str:
        return self.names.get_name(key or "", NameType.PROCEDURE)

    def temporary_name(self, label: str) -> str:
        return self.names.get_distinct_name(label, NameType.TEMPORARY)

    def provide_function(self, key: str, body: Union[str, Sequence[str]]) -> str:
        return self.functions.provide(key, body)

    # ── Injection ─────────────────────────────────────────────────────────

    def inject_id(self, template: str, block: "Block") -> str:
        return template.replace("%1", quote(block.id))

    def add_loop_trap(self, branch: str, block: "Block") -> str:
        """Wrap a loop or procedure body with the configured trap/prefix/suffix."""
        config = self.config
        if config.infinite_loop_trap:
            branch = prefix_lines(self.inject_id(config.infinite_loop_trap, block), config.indent) + branch
        if config.statement_suffix:
            branch = prefix_lines(self.inject_id(config.statement_suffix, block), config.indent) + branch
        if config.statement_prefix:
            branch = branch + prefix_lines(self.inject_id(config.statement_prefix, block), config.indent)
        return branch


__all__ = ["COMMENT_PREFIX", "PassContext"]
