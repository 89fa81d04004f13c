from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Tuple

DEFAULT_PRELUDE: Tuple[str, ...] = (
    'require "string"',
    'require "math"',
    'require "vector"',
    'require "io"',
)


@dataclass
class GeneratorConfig:
    """
    Knobs of the Nelua generator.

    The three templates are injected around statements, at the top of loop
    bodies and at the top of procedure bodies respectively; `%1` in a
    template is replaced by the quoted id of the block being generated.
    """
    indent: str = "  "
    comment_wrap: int = 60
    statement_prefix: Optional[str] = None
    statement_suffix: Optional[str] = None
    infinite_loop_trap: Optional[str] = None
    prelude: Tuple[str, ...] = field(default_factory=lambda: DEFAULT_PRELUDE)

    def __post_init__(self) -> None:
        if self.comment_wrap < 4:
            raise ValueError(f"comment_wrap must be at least 4, got {self.comment_wrap}")
        self.prelude = tuple(self.prelude)
        # Templates are spliced in as whole lines.
        for name in ("statement_prefix", "statement_suffix", "infinite_loop_trap"):
            template = getattr(self, name)
            if template and not template.endswith("\n"):
                setattr(self, name, template + "\n")

    @classmethod
    def from_dict(cls, options: Optional[Mapping[str, Any]]) -> "GeneratorConfig":
        """Build a config from CLI/HTTP options; unknown keys are rejected."""
        if not options:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ValueError(f"Unknown generator option(s): {', '.join(unknown)}")
        kwargs: Dict[str, Any] = dict(options)
        if isinstance(kwargs.get("indent"), int):
            kwargs["indent"] = " " * kwargs["indent"]
        return cls(**kwargs)


__all__ = ["DEFAULT_PRELUDE", "GeneratorConfig"]
