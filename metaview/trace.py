"""Debug tracing for rendering passes."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger("metaview.trace")


class ViewTrace:
    """Emits one debug record per pipeline decision when enabled.

    Passed explicitly into the pipeline; a disabled trace costs a boolean check.
    """

    def __init__(self, enabled: bool = False, log: logging.Logger | None = None):
        self.enabled = enabled
        self.log = log or logger

    def event(self, name: str, **fields: Any) -> None:
        if not self.enabled:
            return
        detail = " ".join(f"{k}={v!r}" for k, v in fields.items())
        self.log.debug(f"{name} {detail}".rstrip())


NULL_TRACE = ViewTrace(enabled=False)
