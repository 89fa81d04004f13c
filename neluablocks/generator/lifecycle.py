from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import PassContext

logger = logging.getLogger(__name__)


class PassLifecycle:
    """
    Bookkeeping shared by every target language.

    A target calls begin() from its own init and end() from its own finish;
    everything language-specific happens around those calls.
    """

    def begin(self, ctx: "PassContext") -> None:
        ctx.names.reset()
        ctx.functions.reset()
        ctx.output = []
        ctx.loops = []
        ctx.initialized = True

    def end(self, ctx: "PassContext", code: str) -> str:
        if ctx.loops:
            logger.warning(f"Pass ended with {len(ctx.loops)} loop frame(s) still open")
        ctx.functions.reset()
        ctx.names.reset()
        ctx.loops = []
        ctx.initialized = False
        return code
