"""
Workspace JSON Schema + Validator
=================================
Defines the serialisation format of a block workspace and provides a
lightweight validator that runs without any third-party JSON Schema library.

Canonical JSON format
---------------------

    {
      "name": "counter",                          // human label (str, optional)
      "variables": [                              // (list, optional)
        { "id": "v1", "name": "count" }           // id and name (str, required)
      ],
      "blocks": [                                 // top-level blocks, in order
        {
          "id":      "b1",                        // unique in the file (str, required)
          "type":    "variables_set",             // registered block type (str, required)
          "fields":  { "VAR": { "id": "v1" } },   // field values (dict, optional)
          "inputs":  {                            // (dict, optional)
            "VALUE": { "block": { ... } },        //   value input
            "DO":    { "statement": { ... } }     //   statement input
          },
          "next":       { "block": { ... } },     // following statement (optional)
          "comment":    "Reset the counter",      // (str, optional)
          "enabled":    true,                     // (bool, optional, default true)
          "extraState": { "itemCount": 3 }        // mutation data (dict, optional)
        }
      ]
    }

A field value is either a scalar or, for variable fields, an object carrying
the variable "id".
"""

from __future__ import annotations

import json
import warnings
from pathlib import Path
from typing import Any, Dict, List, Set, Union

from neluablocks.generator.registry import registered_types


# ── Validation helpers ────────────────────────────────────────────────────────

class SchemaError(ValueError):
    """Raised when workspace JSON fails structural validation."""


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise SchemaError(message)


def _require_keys(obj: Dict, keys: List[str], context: str) -> None:
    for key in keys:
        _require(key in obj, f"{context}: missing required field '{key}'")


def _validate_block(block: Any, ctx: str, block_ids: Set[str], known: Set[str],
                    strict: bool) -> None:
    _require(isinstance(block, dict), f"{ctx}: each block must be a JSON object")
    _require_keys(block, ["id", "type"], ctx)
    _require(isinstance(block["id"], str), f"{ctx}.id must be a string")
    _require(isinstance(block["type"], str), f"{ctx}.type must be a string")
    _require(block["id"] not in block_ids, f"{ctx}: duplicate block id '{block['id']}'")
    block_ids.add(block["id"])

    if "fields" in block:
        _require(isinstance(block["fields"], dict), f"{ctx}.fields must be an object")
        for name, value in block["fields"].items():
            if isinstance(value, dict):
                _require("id" in value, f"{ctx}.fields.{name}: object field needs an 'id'")
    if "comment" in block:
        _require(block["comment"] is None or isinstance(block["comment"], str),
                 f"{ctx}.comment must be a string")
    if "enabled" in block:
        _require(isinstance(block["enabled"], bool), f"{ctx}.enabled must be a boolean")
    if "extraState" in block:
        _require(isinstance(block["extraState"], dict), f"{ctx}.extraState must be an object")

    type_name = block["type"]
    if type_name not in known:
        msg = f"{ctx}: unknown block type '{type_name}'"
        if strict:
            raise SchemaError(msg)
        warnings.warn(msg + " (generation will fail if it is reached)", stacklevel=4)

    inputs = block.get("inputs", {})
    _require(isinstance(inputs, dict), f"{ctx}.inputs must be an object")
    for name, slot in inputs.items():
        slot_ctx = f"{ctx}.inputs.{name}"
        _require(isinstance(slot, dict), f"{slot_ctx} must be an object")
        kinds = [key for key in ("block", "statement") if key in slot]
        _require(len(kinds) == 1,
                 f"{slot_ctx}: expected exactly one of 'block' or 'statement'")
        _validate_block(slot[kinds[0]], f"{slot_ctx}.{kinds[0]}", block_ids, known, strict)

    if block.get("next") is not None:
        nxt = block["next"]
        _require(isinstance(nxt, dict) and "block" in nxt,
                 f"{ctx}.next must be an object with a 'block'")
        _validate_block(nxt["block"], f"{ctx}.next.block", block_ids, known, strict)


# ── Public validator ─────────────────────────────────────────────────────────

def validate(data: Dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a parsed workspace JSON dict.

    Args:
        data:   A pre-parsed dict (result of json.load / json.loads).
        strict: When True, raise SchemaError for unknown block types.
                When False (default), unknown types produce a warning.

    Raises:
        SchemaError: On any structural violation.
    """
    _require(isinstance(data, dict), "workspace JSON must be a JSON object at the top level")
    _require_keys(data, ["blocks"], "workspace root")

    if "name" in data:
        _require(isinstance(data["name"], str), "name must be a string")
    _require(isinstance(data["blocks"], list), "blocks must be a list")

    variable_ids: Set[str] = set()
    variables = data.get("variables", [])
    _require(isinstance(variables, list), "variables must be a list")
    for i, variable in enumerate(variables):
        ctx = f"variables[{i}]"
        _require(isinstance(variable, dict), f"{ctx}: each variable must be a JSON object")
        _require_keys(variable, ["id", "name"], ctx)
        _require(isinstance(variable["id"], str), f"{ctx}.id must be a string")
        _require(isinstance(variable["name"], str), f"{ctx}.name must be a string")
        _require(variable["id"] not in variable_ids,
                 f"{ctx}: duplicate variable id '{variable['id']}'")
        variable_ids.add(variable["id"])

    known = set(registered_types())
    block_ids: Set[str] = set()
    for i, block in enumerate(data["blocks"]):
        _validate_block(block, f"blocks[{i}]", block_ids, known, strict)


def validate_file(path: Union[str, Path], *, strict: bool = False) -> Dict[str, Any]:
    """
    Load and validate a workspace JSON file.

    Returns:
        The parsed dict on success.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        SchemaError: If the workspace structure is invalid.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    validate(data, strict=strict)
    return data


__all__ = ["SchemaError", "validate", "validate_file"]
