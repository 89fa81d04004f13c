from typing import Any, Dict, Iterator, List, Optional

import logging

from .Types import InputType


# Get a logger for this module
logger = logging.getLogger(__name__)


class Input:
    """A named slot on a block. Value slots hold expressions, statement slots hold chains."""

    def __init__(self, name: str, type: InputType, owner: 'Block'):
        self.name = name
        self.type = type
        self.owner = owner
        self.target: Optional['Block'] = None

    def is_value(self) -> bool:
        return self.type == InputType.VALUE

    def __repr__(self) -> str:
        return f"Input({self.name!r}, {self.type.name})"


class Block:
    """
    One unit of the visual program.

    Blocks are built up front (by hand or by the JSON deserialiser) and are
    treated as read-only once a generation pass starts.
    """

    def __init__(self,
                 id: str,
                 type: str,
                 fields: Optional[Dict[str, Any]] = None,
                 comment: Optional[str] = None,
                 enabled: bool = True,
                 extra_state: Optional[Dict[str, Any]] = None):
        self.id = id
        self.type = type
        self.fields: Dict[str, Any] = dict(fields) if fields else {}
        self.comment = comment
        self.enabled = enabled
        self.extra_state: Dict[str, Any] = dict(extra_state) if extra_state else {}

        # Insertion ordered: comment collection walks inputs in declaration order.
        self.inputs: Dict[str, Input] = {}
        self.next_block: Optional['Block'] = None

        # Where this block is attached: either a parent input, or the previous
        # block's next connection. Both stay None for top-level blocks.
        self.parent_input: Optional[Input] = None
        self.previous_block: Optional['Block'] = None

    # --- Wiring -----------------------------------------------------------

    def add_input(self, name: str, type: InputType = InputType.VALUE) -> Input:
        if name in self.inputs:
            raise ValueError(f"Block '{self.id}' already has an input named '{name}'")
        slot = Input(name, type, self)
        self.inputs[name] = slot
        return slot

    def connect_value(self, name: str, child: 'Block') -> 'Block':
        """Plug `child` into value input `name`, creating the input if needed."""
        slot = self.inputs.get(name) or self.add_input(name, InputType.VALUE)
        self._attach(slot, child)
        return child

    def connect_statement(self, name: str, child: 'Block') -> 'Block':
        """Plug the statement chain starting at `child` into statement input `name`."""
        slot = self.inputs.get(name) or self.add_input(name, InputType.STATEMENT)
        self._attach(slot, child)
        return child

    def connect_next(self, child: 'Block') -> 'Block':
        if child.parent_input is not None or child.previous_block is not None:
            raise ValueError(f"Block '{child.id}' is already connected")
        self.next_block = child
        child.previous_block = self
        return child

    def _attach(self, slot: Input, child: 'Block') -> None:
        if child.parent_input is not None or child.previous_block is not None:
            raise ValueError(f"Block '{child.id}' is already connected")
        if slot.target is not None:
            logger.debug(f"Replacing block in '{self.id}.{slot.name}'")
            slot.target.parent_input = None
        slot.target = child
        child.parent_input = slot

    # --- Host contract ----------------------------------------------------

    def get_field_value(self, name: str) -> Any:
        return self.fields.get(name)

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def get_input(self, name: str) -> Optional[Input]:
        return self.inputs.get(name)

    def get_input_target_block(self, name: str) -> Optional['Block']:
        slot = self.inputs.get(name)
        return slot.target if slot else None

    def get_next_block(self) -> Optional['Block']:
        return self.next_block

    def get_comment_text(self) -> Optional[str]:
        return self.comment

    def get_vars(self) -> List[str]:
        """
        Variables declared by this block (procedure parameters), as variable
        ids where the editor recorded one and as plain names otherwise.
        """
        params = []
        for param in self.extra_state.get("params", []):
            if isinstance(param, dict):
                param = param.get("id") or param.get("name", "")
            params.append(str(param))
        return params

    def is_value_child(self) -> bool:
        """True when this block is plugged into another block's value input."""
        return self.parent_input is not None and self.parent_input.is_value()

    def get_parent(self) -> Optional['Block']:
        if self.parent_input is not None:
            return self.parent_input.owner
        return self.previous_block

    def get_surround_parent(self) -> Optional['Block']:
        """The block whose input (directly or via a next-chain) contains this one."""
        block: Optional['Block'] = self
        while block is not None:
            if block.parent_input is not None:
                return block.parent_input.owner
            block = block.previous_block
        return None

    def get_children(self) -> List['Block']:
        children = [slot.target for slot in self.inputs.values() if slot.target is not None]
        if self.next_block is not None:
            children.append(self.next_block)
        return children

    def get_descendants(self) -> Iterator['Block']:
        """Depth-first walk over this block and everything attached below it."""
        yield self
        for child in self.get_children():
            yield from child.get_descendants()

    def __repr__(self) -> str:
        return f"Block({self.id!r}, {self.type!r})"
