"""User records."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class User:
    id: str
    username: str
    name: str = ""
    emails: tuple[str, ...] = field(default_factory=tuple)
    active: bool = True
