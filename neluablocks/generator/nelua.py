"""
Nelua target: reserved words, pass driver and program assembly.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, TYPE_CHECKING

from .config import GeneratorConfig
from .context import PassContext
from .errors import GenerationError
from .lifecycle import PassLifecycle
from .order import Order

if TYPE_CHECKING:
    from neluablocks.core.Block import Block
    from neluablocks.core.Workspace import Workspace

logger = logging.getLogger(__name__)

# Not a security feature: it only keeps generated names from clobbering
# built-ins and keywords.
RESERVED_WORDS = frozenset((
    # Special character
    "_,"
    # ComputerCraft-era globals inherited from blockly-lua
    "__inext,assert,bit,colors,colours,coroutine,disk,dofile,error,fs,"
    "fetfenv,getmetatable,gps,help,io,ipairs,keys,loadfile,loadstring,math,"
    "native,next,os,paintutils,pairs,parallel,pcall,peripheral,print,"
    "printError,rawequal,rawget,rawset,read,rednet,redstone,rs,select,"
    "setfenv,setmetatable,sleep,string,term,textutils,tonumber,"
    "tostring,turtle,type,unpack,vector,hashmap,write,xpcall,_VERSION,__indext,"
    "HTTP,"
    # Keywords
    "and,break,do,else,elseif,end,false,for,function,goto,if,in,local,nil,not,or,"
    "repeat,return,then,true,until,while,"
    # Nelua-only keywords
    "global,switch,case,defer,nilptr,"
    # Metamethods
    "add,sub,mul,div,mod,pow,unm,concat,len,eq,lt,le,index,newindex,call,"
    # Basic functions
    "assert,collectgarbage,dofile,error,_G,getmetatable,inpairs,load,"
    "loadfile,next,pairs,pcall,print,rawequal,rawget,rawlen,rawset,select,"
    "setmetatable,tonumber,tostring,type,_VERSION,xpcall,"
    # Modules
    "require,package,string,vector,hashmap,math,bit32,io,file,os,debug"
).split(","))

_LEADING_BLANK_RE = re.compile(r"^\s+\n")
_TRAILING_BLANK_RE = re.compile(r"\n\s+\Z")
_TRAILING_SPACE_RE = re.compile(r"[ \t]+\n")


@dataclass
class GeneratedProgram:
    code: str
    # Names of the shared helpers defined in the program, in emission order.
    helpers: List[str] = field(default_factory=list)


class NeluaGenerator:
    """
    Translates a Workspace into a Nelua program.

    The generator itself holds no pass state: init() hands out a fresh
    PassContext, so one generator can serve any number of passes.
    """

    name = "Nelua"

    def __init__(self, config: Optional[GeneratorConfig] = None):
        self.config = config or GeneratorConfig()
        self.reserved_words = RESERVED_WORDS
        self.lifecycle = PassLifecycle()

    def init(self, workspace: "Workspace") -> PassContext:
        """Start a pass: reserve the names of every variable and procedure up front."""
        ctx = PassContext(self.config, self.reserved_words)
        self.lifecycle.begin(ctx)
        ctx.names.set_variable_map(workspace)
        ctx.names.populate_variables(workspace)
        ctx.names.populate_procedures(workspace)
        return ctx

    def finish(self, ctx: PassContext, code: str) -> str:
        """Prepend the prelude and helper definitions, then reset the pass state."""
        definitions = ctx.functions.definitions()
        logger.debug(f"Emitting {len(ctx.functions)} definition(s)")
        code = self.lifecycle.end(ctx, code)
        prelude = "\n".join(self.config.prelude)
        return prelude + "\n\n" + "\n\n".join(definitions) + "\n" + code

    def scrub_naked_value(self, line: str) -> str:
        """An expression is not a statement in Nelua; assign it to the throwaway `_`."""
        return "local _ = " + line + "\n"

    def workspace_to_code(self, workspace: "Workspace") -> str:
        return self.generate(workspace).code

    def generate(self, workspace: "Workspace") -> GeneratedProgram:
        """Run a full pass over `workspace`."""
        ctx = self.init(workspace)
        try:
            for block in workspace.get_top_blocks():
                line = ctx.block_to_code(block)
                if isinstance(line, tuple):
                    line = self._naked_value(ctx, block, line[0])
                if line:
                    ctx.output.append(line)
            helpers = list(ctx.functions.function_names().values())
            code = self.finish(ctx, "\n".join(ctx.output))
        except GenerationError as exc:
            logger.error(f"Generation of '{workspace.name}' failed: {exc}")
            raise

        code = _LEADING_BLANK_RE.sub("", code)
        code = _TRAILING_BLANK_RE.sub("\n", code)
        code = _TRAILING_SPACE_RE.sub("\n", code)
        return GeneratedProgram(code, helpers)

    def _naked_value(self, ctx: PassContext, block: "Block", code: str) -> str:
        if not code:
            return ""
        line = self.scrub_naked_value(code)
        if self.config.statement_prefix:
            line = ctx.inject_id(self.config.statement_prefix, block) + line
        if self.config.statement_suffix:
            line = line + ctx.inject_id(self.config.statement_suffix, block)
        return ctx.scrub(block, line, this_only=True)


__all__ = ["GeneratedProgram", "NeluaGenerator", "Order", "RESERVED_WORDS"]
