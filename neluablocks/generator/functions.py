"""
Shared function cache.

Helper functions are requested by logical key. The first request renders the
body and reserves a name; every later request with the same key gets that
name back, so the definition is emitted once no matter how many blocks need
it.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Sequence, Union

from neluablocks.core.Types import NameType

from .names import Names

logger = logging.getLogger(__name__)

# Stand-in for the helper's own name inside its body. Unlikely to ever appear
# in real code.
FUNCTION_NAME_PLACEHOLDER = "{leCUI8hutHZI4480Dc}"

_LEADING_INDENT_RE = re.compile(r"^((?:  )+)", re.MULTILINE)


class FunctionCache:
    """Ordered store of helper and procedure definitions for one pass."""

    def __init__(self, names: Names, indent: str = "  "):
        self.names = names
        self.indent = indent
        self._definitions: Dict[str, str] = {}
        self._function_names: Dict[str, str] = {}

    def reset(self) -> None:
        self._definitions = {}
        self._function_names = {}

    def provide(self, key: str, body: Union[str, Sequence[str]]) -> str:
        """
        Return the name of the helper registered under `key`, defining it from
        `body` on first use.

        `body` is written with two-space indents and uses
        FUNCTION_NAME_PLACEHOLDER wherever the function's own name belongs.
        """
        if key in self._function_names:
            return self._function_names[key]

        function_name = self.names.get_distinct_name(key, NameType.PROCEDURE)
        text = body if isinstance(body, str) else "\n".join(body)
        text = text.strip().replace(FUNCTION_NAME_PLACEHOLDER, function_name)
        if self.indent != "  ":
            text = _LEADING_INDENT_RE.sub(
                lambda m: self.indent * (len(m.group(1)) // 2), text
            )

        self._function_names[key] = function_name
        self._definitions[key] = text
        logger.debug(f"Defined helper '{function_name}' for key '{key}'")
        return function_name

    def define(self, key: str, code: str) -> None:
        """Store an already rendered definition, e.g. a user procedure."""
        if key in self._definitions:
            logger.warning(f"Definition '{key}' replaced")
        self._definitions[key] = code

    def definitions(self) -> List[str]:
        """All definitions in first-registration order."""
        return list(self._definitions.values())

    def function_names(self) -> Dict[str, str]:
        return dict(self._function_names)

    def __len__(self) -> int:
        return len(self._definitions)


__all__ = ["FUNCTION_NAME_PLACEHOLDER", "FunctionCache"]
