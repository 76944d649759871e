"""Logger handed to each rocketlet."""

from __future__ import annotations

from typing import Any

import structlog

from rocketlets.utils.logging import get_logger


class RocketletLogger:
    """Per-rocketlet structlog logger.

    Every entry is bound with the rocketlet id so host logs can tell
    rocketlets apart. This is also what a rocketlet sees as ``console()``
    while it is being dispatched.
    """

    def __init__(self, rocketlet_id: str, name: str = "rocketlets.rocketlet") -> None:
        self.rocketlet_id = rocketlet_id
        self._log: structlog.stdlib.BoundLogger = get_logger(name).bind(rocketlet=rocketlet_id)

    def debug(self, event: str, **kw: Any) -> None:
        self._log.debug(event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._log.info(event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._log.warning(event, **kw)

    warn = warning

    def error(self, event: str, **kw: Any) -> None:
        self._log.error(event, **kw)

    def success(self, event: str, **kw: Any) -> None:
        self._log.info(event, success=True, **kw)

    def log(self, event: str, **kw: Any) -> None:
        self._log.info(event, **kw)
