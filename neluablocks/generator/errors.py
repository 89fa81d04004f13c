"""
Errors raised during a generation pass.

Every one of them aborts the pass: no partial program text is returned.
An unconnected input is never an error, the mapping function falls back to
its default literal instead.
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from neluablocks.core.Block import Block


class GenerationError(Exception):
    """Base class for all failures of a generation pass."""

    def __init__(self, message: str, block: Optional["Block"] = None):
        if block is not None:
            message = f"{message} (block '{block.id}' of type '{block.type}')"
        super().__init__(message)
        self.block = block


class UnknownBlockTypeError(GenerationError):
    """No mapping function is registered for a block type."""


class UnknownOperatorError(GenerationError):
    """A selector field names an operation the mapping does not know."""


class UnhandledSlotConfigurationError(GenerationError):
    """A combination of mode/anchor fields that no mapping rule covers."""


class InvalidCodeError(GenerationError):
    """A mapping function returned the wrong shape, or an invalid order was requested."""


__all__ = [
    "GenerationError",
    "InvalidCodeError",
    "UnhandledSlotConfigurationError",
    "UnknownBlockTypeError",
    "UnknownOperatorError",
]
