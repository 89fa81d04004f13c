"""
Workspace serialisation: JSON schema validation and loading.

Public API
----------
    from neluablocks.serialization import validate_file, json_to_workspace

    data = validate_file("program.json")
    workspace = json_to_workspace(data)
"""

from .deserialiser import json_to_workspace
from .schema import SchemaError, validate, validate_file

__all__ = ["SchemaError", "json_to_workspace", "validate", "validate_file"]
