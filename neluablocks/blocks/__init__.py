"""
Reference mapping functions, one module per block category.

Importing this package registers every mapping in
neluablocks.generator.registry.BLOCK_GENERATORS.
"""

from . import lists, logic, loops, math, procedures, text, variables  # noqa: F401
