"""Room records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rocketlets.definition.users import User


class RoomType(str, Enum):
    CHANNEL = "c"
    PRIVATE_GROUP = "p"
    DIRECT_MESSAGE = "d"
    LIVE_CHAT = "l"


@dataclass(frozen=True)
class Room:
    id: str
    display_name: str = ""
    slug_name: str = ""
    type: RoomType = RoomType.CHANNEL
    creator: User | None = None
