"""
Block type -> mapping function table.

Mapping functions register themselves at import time:

    @register("math_number")
    def math_number(block, ctx):
        ...

A mapping function receives the block and the pass context and returns one of
    str               statement code
    (str, Order)      expression code and its binding strength
    None              nothing to emit here (e.g. definitions stored in the cache)
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Set, Tuple, Union, TYPE_CHECKING

from .errors import UnknownBlockTypeError

if TYPE_CHECKING:
    from neluablocks.core.Block import Block
    from .context import PassContext

GeneratedCode = Union[str, Tuple[str, int], None]
BlockGenerator = Callable[["Block", "PassContext"], GeneratedCode]

BLOCK_GENERATORS: Dict[str, BlockGenerator] = {}

# Types that inject the statement prefix/suffix themselves (around branches
# or jumps) instead of having the assembler wrap their whole code.
SELF_INJECTING_TYPES: Set[str] = set()


def register(*type_names: str,
             self_injecting: bool = False) -> Callable[[BlockGenerator], BlockGenerator]:
    """Decorator to register a mapping function under one or more block types."""
    def decorator(func: BlockGenerator) -> BlockGenerator:
        for type_name in type_names:
            if BLOCK_GENERATORS.get(type_name):
                raise ValueError(f"Block type '{type_name}' is already registered.")
            BLOCK_GENERATORS[type_name] = func
            if self_injecting:
                SELF_INJECTING_TYPES.add(type_name)
        return func
    return decorator


def get_generator(block: "Block") -> BlockGenerator:
    func: Optional[BlockGenerator] = BLOCK_GENERATORS.get(block.type)
    if func is None:
        raise UnknownBlockTypeError(
            f"Nelua does not know how to generate code for block type '{block.type}'",
            block,
        )
    return func


def registered_types() -> List[str]:
    return sorted(BLOCK_GENERATORS)


__all__ = ["BLOCK_GENERATORS", "BlockGenerator", "GeneratedCode", "SELF_INJECTING_TYPES",
           "get_generator", "register", "registered_types"]
