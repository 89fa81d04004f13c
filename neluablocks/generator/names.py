"""
Name database for a generation pass.

Hands out identifiers that are legal in the target language, never equal a
reserved word, and never collide with each other, whatever namespace they were
requested in.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, Optional, Set, TYPE_CHECKING
from urllib.parse import quote as uri_quote

from neluablocks.core.Types import NameType

if TYPE_CHECKING:
    from neluablocks.core.Workspace import Workspace

logger = logging.getLogger(__name__)

# Characters encodeURI leaves alone. Everything else is percent-escaped first
# so that distinct non-ASCII labels stay distinct after sanitising.
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#"
_NON_WORD_RE = re.compile(r"[^A-Za-z0-9_]")

UNNAMED = "unnamed"


class Names:
    """Collision-free identifier allocator, memoised by (key, namespace)."""

    def __init__(self, reserved_words: Iterable[str]):
        self.reserved_words: frozenset[str] = frozenset(reserved_words)
        self._db: Dict[NameType, Dict[str, str]] = {}
        self._used: Set[str] = set()
        self._workspace: Optional["Workspace"] = None

    def reset(self) -> None:
        """Forget every binding. Must run between independent passes."""
        self._db = {}
        self._used = set()
        self._workspace = None

    # ── Priming ───────────────────────────────────────────────────────────

    def set_variable_map(self, workspace: Optional["Workspace"]) -> None:
        self._workspace = workspace

    def populate_variables(self, workspace: "Workspace") -> None:
        for variable in workspace.get_all_variables():
            self.get_name(variable.id, NameType.VARIABLE)

    def populate_procedures(self, workspace: "Workspace") -> None:
        for proc_name in workspace.get_procedure_names():
            self.get_name(proc_name, NameType.PROCEDURE)

    # ── Allocation ────────────────────────────────────────────────────────

    def get_name(self, key: str, name_type: NameType) -> str:
        """
        Return the identifier bound to `key` in `name_type`, allocating it on
        first use. Keys are case-insensitive. In the variable namespace a key
        that is a workspace variable id is resolved to its display name first.
        """
        label = key
        if name_type == NameType.VARIABLE and self._workspace is not None:
            variable = self._workspace.get_variable_by_id(key)
            if variable is not None:
                label = variable.name

        normalized = label.lower()
        type_db = self._db.setdefault(name_type, {})
        if normalized not in type_db:
            type_db[normalized] = self.get_distinct_name(label, name_type)
        return type_db[normalized]

    def get_distinct_name(self, label: str, name_type: NameType) -> str:
        """Allocate a name seeded from `label` that has never been handed out."""
        base = self.safe_name(label)
        suffix = 0
        candidate = base
        while candidate in self._used or candidate in self.reserved_words:
            suffix = suffix + 1 if suffix else 2
            candidate = f"{base}{suffix}"
        self._used.add(candidate)
        logger.debug(f"Allocated {name_type.value.lower()} name '{candidate}' for '{label}'")
        return candidate

    @staticmethod
    def safe_name(label: str) -> str:
        """Turn a human label into a legal identifier (not yet collision-checked)."""
        if not label:
            return UNNAMED
        name = uri_quote(label.replace(" ", "_"), safe=_URI_SAFE)
        name = _NON_WORD_RE.sub("_", name)
        if name[0].isdigit():
            name = "my_" + name
        return name

    def is_used(self, name: str) -> bool:
        return name in self._used


__all__ = ["Names", "UNNAMED"]
