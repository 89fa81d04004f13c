"""
Loop and flow synthesis.

Nelua has no `continue`, so a continue is emitted as a `goto` to a label
placed at the very end of the loop body. Every loop body is generated inside
a LoopFrame pushed on the pass context; a continue marks the innermost open
frame, and only marked frames get a label.

Bounded numeric loops fix their direction once, before the loop starts: the
step is signed statically when every bound is a literal, otherwise by a single
runtime comparison of bounds that were captured in temporaries.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from neluablocks.core.Types import LOOP_TYPES, NameType

from .errors import UnknownOperatorError
from .strings import is_number, number_literal

if TYPE_CHECKING:
    from neluablocks.core.Block import Block
    from .context import PassContext

logger = logging.getLogger(__name__)

CONTINUE_LABEL = "continue"

_IDENTIFIER_RE = re.compile(r"^\w+$")


@dataclass
class LoopFrame:
    block: "Block"
    label: Optional[str] = None

    @property
    def has_continue(self) -> bool:
        return self.label is not None


def _is_simple(expression: str) -> bool:
    """Literal numbers and bare identifiers can be evaluated twice safely."""
    return is_number(expression) or bool(_IDENTIFIER_RE.match(expression))


# ── Loop bodies ───────────────────────────────────────────────────────────────

def loop_body(ctx: "PassContext", block: "Block", name: str = "DO") -> str:
    """Generate the statement input `name` of a loop block as its body."""
    frame = LoopFrame(block)
    ctx.loops.append(frame)
    try:
        branch = ctx.statement_to_code(block, name)
    finally:
        ctx.loops.pop()
    branch = ctx.add_loop_trap(branch, block)
    if frame.has_continue:
        branch += f"{ctx.config.indent}::{frame.label}::\n"
    return branch


def continue_statement(ctx: "PassContext", block: "Block") -> str:
    if not ctx.loops:
        logger.warning(f"Continue block '{block.id}' is not inside a loop")
        return f"goto {CONTINUE_LABEL}\n"
    frame = ctx.loops[-1]
    if frame.label is None:
        frame.label = ctx.names.get_distinct_name(CONTINUE_LABEL, NameType.TEMPORARY)
    return f"goto {frame.label}\n"


def surround_loop(block: "Block") -> Optional["Block"]:
    parent = block.get_surround_parent()
    while parent is not None:
        if parent.type in LOOP_TYPES:
            return parent
        parent = parent.get_surround_parent()
    return None


# ── Loop shapes ───────────────────────────────────────────────────────────────

def repeat_loop(ctx: "PassContext", block: "Block", repeats: str) -> str:
    """Count-controlled loop running `repeats` times."""
    if is_number(repeats):
        upper = str(int(float(repeats)) - 1)
    else:
        upper = f"math.floor({repeats}) - 1"
    branch = loop_body(ctx, block)
    loop_var = ctx.names.get_distinct_name("count", NameType.TEMPORARY)
    return f"for {loop_var} = 0, {upper} do\n{branch}end\n"


def while_loop(ctx: "PassContext", block: "Block", condition: str) -> str:
    branch = loop_body(ctx, block)
    return f"while {condition} do\n{branch}end\n"


def for_range_loop(ctx: "PassContext", block: "Block", variable: str,
                   start: str, end: str, step: str) -> str:
    """Bounded numeric loop from `start` to `end` (inclusive) by |`step`|."""
    branch = loop_body(ctx, block)
    code = ""
    if is_number(start) and is_number(end) and is_number(step):
        increment = number_literal(abs(float(step)))
        if float(start) > float(end):
            increment = "-" + increment
    else:
        # Bounds are evaluated once here and once in the loop header.
        if not _is_simple(start):
            start_var = ctx.names.get_distinct_name(f"{variable}_start", NameType.TEMPORARY)
            code += f"local {start_var} = {start}\n"
            start = start_var
        if not _is_simple(end):
            end_var = ctx.names.get_distinct_name(f"{variable}_end", NameType.TEMPORARY)
            code += f"local {end_var} = {end}\n"
            end = end_var
        increment = ctx.names.get_distinct_name(f"{variable}_inc", NameType.TEMPORARY)
        if is_number(step):
            code += f"local {increment} = {number_literal(abs(float(step)))}\n"
        else:
            code += f"local {increment} = math.abs({step})\n"
        code += f"if {start} > {end} then\n"
        code += f"{ctx.config.indent}{increment} = -{increment}\n"
        code += "end\n"
    code += f"for {variable} = {start}, {end}, {increment} do\n{branch}end\n"
    return code


def for_each_loop(ctx: "PassContext", block: "Block", variable: str, collection: str) -> str:
    branch = loop_body(ctx, block)
    return f"for _, {variable} in ipairs({collection}) do\n{branch}end\n"


def flow_statement(ctx: "PassContext", block: "Block", flow: str) -> str:
    """Break out of, or continue, the innermost loop."""
    xfix = ""
    config = ctx.config
    if config.statement_prefix:
        xfix += ctx.inject_id(config.statement_prefix, block)
    if config.statement_suffix:
        # The regular suffix would be skipped by the jump.
        xfix += ctx.inject_id(config.statement_suffix, block)
    if config.statement_prefix:
        loop = surround_loop(block)
        if loop is not None:
            # The loop's own prefix at the end of its body is skipped too.
            xfix += ctx.inject_id(config.statement_prefix, loop)

    if flow == "BREAK":
        return xfix + "break\n"
    if flow == "CONTINUE":
        return xfix + continue_statement(ctx, block)
    raise UnknownOperatorError(f"Unknown flow statement '{flow}'", block)


__all__ = [
    "CONTINUE_LABEL",
    "LoopFrame",
    "continue_statement",
    "flow_statement",
    "for_each_loop",
    "for_range_loop",
    "loop_body",
    "repeat_loop",
    "surround_loop",
    "while_loop",
]
