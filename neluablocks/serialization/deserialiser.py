"""
Workspace JSON Deserialiser
===========================
Builds a live Workspace (blocks wired to each other, variable map filled in)
from the JSON format described in neluablocks/serialization/schema.py.

Pipeline
--------
    workspace.json  →  [schema.validate]                 →  checked dict
    dict            →  [deserialiser.json_to_workspace]  →  Workspace
    Workspace       →  [generator.workspace_to_code]     →  Nelua source str

Variable fields
---------------
Fields such as VAR are stored as ``{"id": "<variable id>"}``; the block keeps
only the id, which the name allocator resolves through the workspace's
variable map. Procedure parameters listed in ``extraState.params`` with an id
and a name are added to the variable map when the file does not declare them.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from neluablocks.core.Block import Block
from neluablocks.core.Workspace import Workspace

logger = logging.getLogger(__name__)


def _field_value(value: Any) -> Any:
    if isinstance(value, dict):
        return value.get("id")
    return value


def _parse_block(spec: Dict[str, Any], workspace: Workspace) -> Block:
    block = Block(
        id=spec["id"],
        type=spec["type"],
        fields={name: _field_value(value) for name, value in spec.get("fields", {}).items()},
        comment=spec.get("comment"),
        enabled=spec.get("enabled", True),
        extra_state=spec.get("extraState"),
    )

    for param in block.extra_state.get("params", []):
        if isinstance(param, dict) and param.get("id") and param.get("name"):
            if workspace.get_variable_by_id(param["id"]) is None:
                logger.debug(f"Declaring parameter '{param['name']}' of '{block.id}'")
                workspace.create_variable(param["name"], id=param["id"])

    for name, slot in spec.get("inputs", {}).items():
        if "statement" in slot:
            block.connect_statement(name, _parse_block(slot["statement"], workspace))
        else:
            block.connect_value(name, _parse_block(slot["block"], workspace))

    nxt = spec.get("next")
    if nxt is not None:
        block.connect_next(_parse_block(nxt["block"], workspace))
    return block


def json_to_workspace(source: Union[str, Path, Dict[str, Any]]) -> Workspace:
    """
    Parse a workspace JSON description and return a Workspace.

    Args:
        source: One of:
            - A file path (str or Path) to a JSON file.
            - A pre-parsed dict matching the workspace JSON schema.

    Returns:
        A Workspace ready to pass to ``generator.workspace_to_code``.

    Raises:
        FileNotFoundError: If a path is given and the file does not exist.
        KeyError / ValueError: If required fields are missing in the JSON.
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
    else:
        data = source

    workspace = Workspace(data.get("name", "workspace"))
    for variable in data.get("variables", []):
        workspace.create_variable(variable["name"], id=variable["id"], type=variable.get("type", ""))

    for block_spec in data["blocks"]:
        workspace.add_top_block(_parse_block(block_spec, workspace))

    logger.debug(
        f"Loaded workspace '{workspace.name}' with {len(workspace.top_blocks)} top-level "
        f"block(s) and {len(workspace.variables)} variable(s)"
    )
    return workspace


__all__ = ["json_to_workspace"]
