"""Host side: the proxy rocketlets are called through."""

from rocketlets.server.capabilities import CapabilitySet, MethodSpec
from rocketlets.server.proxied import CallResult, DispatchState, ProxiedRocketlet
from rocketlets.server.resolver import AllowListResolver
from rocketlets.server.sandbox import DispatchScope, console, current_scope, require

__all__ = [
    "AllowListResolver",
    "CallResult",
    "CapabilitySet",
    "DispatchScope",
    "DispatchState",
    "MethodSpec",
    "ProxiedRocketlet",
    "console",
    "current_scope",
    "require",
]
