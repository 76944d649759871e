"""Capability registry: which methods a rocketlet exposes, and their arity."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Iterator

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def _is_method_like(attr: Any) -> bool:
    if isinstance(attr, (staticmethod, classmethod)) or inspect.isroutine(attr):
        return True
    return callable(attr) and not hasattr(type(attr), "__get__")


@dataclass(frozen=True)
class MethodSpec:
    name: str
    func: Callable[..., Any]
    min_args: int
    max_args: int | None  # None when the method takes *args
    is_coroutine: bool

    @classmethod
    def from_callable(cls, name: str, func: Callable[..., Any]) -> MethodSpec:
        is_coroutine = inspect.iscoroutinefunction(func)
        try:
            sig = inspect.signature(func)
        except (TypeError, ValueError):
            # Builtins without introspectable signatures accept anything
            return cls(name, func, 0, None, is_coroutine)

        min_args = 0
        max_args: int | None = 0
        for param in sig.parameters.values():
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                max_args = None
            elif param.kind in _POSITIONAL:
                if max_args is not None:
                    max_args += 1
                if param.default is inspect.Parameter.empty:
                    min_args += 1
        return cls(name, func, min_args, max_args, is_coroutine)

    def trim(self, args: tuple[Any, ...]) -> tuple[Any, ...]:
        """Drop trailing arguments the method has no parameter for."""
        if self.max_args is None or len(args) <= self.max_args:
            return args
        return args[: self.max_args]


class CapabilitySet:
    """Method name -> ``MethodSpec``, resolved once when a rocketlet is loaded."""

    def __init__(self, specs: dict[str, MethodSpec]) -> None:
        self._specs = dict(specs)

    @classmethod
    def from_instance(cls, obj: Any) -> CapabilitySet:
        specs: dict[str, MethodSpec] = {}
        for name in dir(obj):
            if name.startswith("_"):
                continue
            try:
                static = inspect.getattr_static(obj, name)
            except AttributeError:
                continue
            # Properties and other descriptors are never evaluated here
            if not _is_method_like(static):
                continue
            specs[name] = MethodSpec.from_callable(name, getattr(obj, name))
        return cls(specs)

    def get(self, name: str) -> MethodSpec | None:
        return self._specs.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._specs))

    def __len__(self) -> int:
        return len(self._specs)
