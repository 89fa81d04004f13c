from __future__ import annotations

import re
from typing import TYPE_CHECKING

from neluablocks.generator.errors import GenerationError
from neluablocks.generator.functions import FUNCTION_NAME_PLACEHOLDER
from neluablocks.generator.strings import number_literal

if TYPE_CHECKING:
    from neluablocks.core.Block import Block

EMPTY_STRING = "''"
EMPTY_LIST = "{}"

# Header line shared by every helper body.
HELPER = f"local function {FUNCTION_NAME_PLACEHOLDER}"

_IDENTIFIER_RE = re.compile(r"^\w+$")


def is_identifier(code: str) -> bool:
    """A bare name may be evaluated more than once."""
    return bool(_IDENTIFIER_RE.match(code))


def number_field(block: "Block", name: str) -> float:
    raw = block.get_field_value(name)
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise GenerationError(f"Field '{name}' is not a number: {raw!r}", block) from None


def number_field_literal(block: "Block", name: str) -> str:
    value = number_field(block, name)
    try:
        return number_literal(value)
    except ValueError as exc:
        raise GenerationError(str(exc), block) from None


def state_count(block: "Block", key: str) -> int:
    """Non-negative integer from the block's mutation data, 0 when absent."""
    raw = block.extra_state.get(key, 0)
    try:
        if isinstance(raw, bool) or not isinstance(raw, (int, str)):
            raise ValueError(raw)
        count = int(raw)
    except ValueError:
        raise GenerationError(f"extraState.{key} is not a count: {raw!r}", block) from None
    if count < 0:
        raise GenerationError(f"extraState.{key} is negative: {raw!r}", block)
    return count


def item_count(block: "Block", prefix: str = "ADD") -> int:
    """Number of ADDn-style inputs, from the mutation or from the inputs present."""
    count = state_count(block, "itemCount")
    pattern = re.compile(rf"^{prefix}(\d+)$")
    for input_name in block.inputs:
        match = pattern.match(input_name)
        if match:
            count = max(count, int(match.group(1)) + 1)
    return count
