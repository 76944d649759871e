"""Host-mediated module resolution for rocketlets."""

from __future__ import annotations

import importlib
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from rocketlets.errors import ModuleNotAllowedError
from rocketlets.utils.logging import get_logger

log = get_logger(__name__)


class AllowListResolver:
    """``require`` implementation that only hands out allow-listed modules.

    ``overrides`` maps a module name to the object returned for it, so the
    host can give rocketlets a restricted facade instead of the real module.
    The resolver holds no mutable state and can be shared between calls.
    """

    def __init__(
        self,
        allowed: Iterable[str],
        overrides: Mapping[str, Any] | None = None,
    ) -> None:
        self._allowed = frozenset(allowed)
        self._overrides = MappingProxyType(dict(overrides or {}))

    @property
    def allowed(self) -> frozenset[str]:
        return self._allowed

    def __call__(self, module: str) -> Any:
        if module in self._overrides:
            return self._overrides[module]

        top_level = module.split(".", 1)[0]
        if not module or module.startswith(".") or top_level not in self._allowed:
            log.warning("module_denied", module=module)
            raise ModuleNotAllowedError(module)

        return importlib.import_module(module)
