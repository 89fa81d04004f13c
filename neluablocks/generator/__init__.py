"""
Nelua Block Generator
=====================
Turns a Workspace of visual-program blocks into Nelua source code.

Pipeline:
    Workspace  →  [NeluaGenerator.init]    →  PassContext (names primed)
    top blocks →  [PassContext.block_to_code] →  statement text + helpers
    text       →  [NeluaGenerator.finish]  →  prelude + definitions + code

Mapping functions for individual block types live in neluablocks.blocks and
register themselves in BLOCK_GENERATORS when that package is imported.

Public API
----------
    from neluablocks.generator import workspace_to_code

    source = workspace_to_code(workspace)
    with open("program.nelua", "w") as f:
        f.write(source)
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

import neluablocks.blocks  # noqa: F401  (populates BLOCK_GENERATORS)

from .config import GeneratorConfig
from .context import PassContext
from .errors import (
    GenerationError,
    InvalidCodeError,
    UnhandledSlotConfigurationError,
    UnknownBlockTypeError,
    UnknownOperatorError,
)
from .nelua import GeneratedProgram, NeluaGenerator, RESERVED_WORDS
from .order import Order
from .registry import BLOCK_GENERATORS, register, registered_types

if TYPE_CHECKING:
    from neluablocks.core.Workspace import Workspace


def workspace_to_code(
    workspace: "Workspace",
    config: Optional[GeneratorConfig] = None,
) -> str:
    """
    Generate a complete Nelua program for `workspace`.

    Args:
        workspace:  The blocks and variables to translate.
        config:     Indentation, comment wrapping and injection templates.
                    Defaults to GeneratorConfig().

    Returns:
        Program text: the prelude, every helper and procedure definition,
        then the top-level statements, ending in a single newline.
    """
    return NeluaGenerator(config).workspace_to_code(workspace)


__all__ = [
    "BLOCK_GENERATORS",
    "GeneratedProgram",
    "GenerationError",
    "GeneratorConfig",
    "InvalidCodeError",
    "NeluaGenerator",
    "Order",
    "PassContext",
    "RESERVED_WORDS",
    "UnhandledSlotConfigurationError",
    "UnknownBlockTypeError",
    "UnknownOperatorError",
    "register",
    "registered_types",
    "workspace_to_code",
]
