from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

import uuid

from .Block import Block
from .Types import PROCEDURE_DEFINITION_TYPES


@dataclass
class VariableModel:
    id: str
    name: str
    type: str = ""


class Workspace:
    """Container for the top-level blocks and the variable map of one program."""

    def __init__(self, name: str = "workspace"):
        self.name = name
        self.top_blocks: List[Block] = []
        self.variables: Dict[str, VariableModel] = {}

    def create_variable(self, name: str, id: Optional[str] = None, type: str = "") -> VariableModel:
        var_id = id or uuid.uuid4().hex
        if var_id in self.variables:
            raise ValueError(f"Variable id '{var_id}' already exists")
        variable = VariableModel(var_id, name, type)
        self.variables[var_id] = variable
        return variable

    def get_variable_by_id(self, var_id: str) -> Optional[VariableModel]:
        return self.variables.get(var_id)

    def get_all_variables(self) -> List[VariableModel]:
        return list(self.variables.values())

    def add_top_block(self, block: Block) -> Block:
        if block.get_parent() is not None:
            raise ValueError(f"Block '{block.id}' is connected and cannot be top-level")
        self.top_blocks.append(block)
        return block

    def get_top_blocks(self) -> List[Block]:
        return list(self.top_blocks)

    def get_all_blocks(self) -> Iterator[Block]:
        for block in self.top_blocks:
            yield from block.get_descendants()

    def get_procedure_names(self) -> List[str]:
        return [
            block.get_field_value("NAME")
            for block in self.get_all_blocks()
            if block.type in PROCEDURE_DEFINITION_TYPES and block.get_field_value("NAME")
        ]
