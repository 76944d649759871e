"""Error taxonomy for the rocketlets host API.

Builder errors come from the data-contract layer. ``ProxyError`` subclasses
are the structural failures raised by ``ProxiedRocketlet`` before or around
a dispatch; anything a rocketlet raises itself is never wrapped.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INSUFFICIENT_ARGUMENTS = "insufficient_arguments"
    TIMEOUT = "timeout"
    PLUGIN = "plugin"


class RocketletError(Exception):
    """Base class for every error raised by this package."""


class MissingRequiredFieldError(RocketletError):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"The \"{field}\" field is required.")


class IndexOutOfRangeError(RocketletError, IndexError):
    def __init__(self, position: int, length: int) -> None:
        self.position = position
        self.length = length
        super().__init__(
            f"No attachment found at the index of \"{position}\" "
            f"(attachments: {length})."
        )


class ProxyError(RocketletError):
    kind: ErrorKind


class MethodNotFoundError(ProxyError, AttributeError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, rocketlet_name: str, rocketlet_id: str, method: str) -> None:
        self.rocketlet_name = rocketlet_name
        self.rocketlet_id = rocketlet_id
        self.method = method
        super().__init__(
            f"The Rocketlet {rocketlet_name} ({rocketlet_id}) "
            f"does not have the method: \"{method}\""
        )


class InsufficientArgumentsError(ProxyError, TypeError):
    kind = ErrorKind.INSUFFICIENT_ARGUMENTS

    def __init__(self, method: str, expected: int, actual: int) -> None:
        self.method = method
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"The method \"{method}\" requires {expected} arguments, "
            f"but only {actual} were passed."
        )


class DispatchTimeoutError(ProxyError, TimeoutError):
    kind = ErrorKind.TIMEOUT

    def __init__(self, method: str, timeout: float) -> None:
        self.method = method
        self.timeout = timeout
        super().__init__(f"The method \"{method}\" timed out after {timeout * 1000:.0f}ms")


class ModuleNotAllowedError(RocketletError, ImportError):
    def __init__(self, module: str) -> None:
        self.module = module
        super().__init__(f"Module \"{module}\" is not available to rocketlets", name=module)


class NoActiveScopeError(RocketletError, LookupError):
    def __init__(self) -> None:
        super().__init__("No rocketlet dispatch is active in this context")
