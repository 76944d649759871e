"""Message and attachment records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from rocketlets.definition.rooms import Room
from rocketlets.definition.users import User


class AvatarMode(str, Enum):
    NONE = "none"
    EMOJI = "emoji"
    URL = "url"


@dataclass
class MessageAttachmentAuthor:
    name: str = ""
    link: str = ""
    icon: str = ""


@dataclass
class MessageAttachmentTitle:
    value: str = ""
    link: str = ""
    display_download_link: bool = False


@dataclass
class MessageAttachmentField:
    title: str
    value: str
    short: bool = False


@dataclass
class MessageAttachment:
    color: str | None = None
    text: str | None = None
    timestamp: datetime | None = None
    thumbnail_url: str | None = None
    author: MessageAttachmentAuthor | None = None
    title: MessageAttachmentTitle | None = None
    image_url: str | None = None
    audio_url: str | None = None
    video_url: str | None = None
    fields: list[MessageAttachmentField] = field(default_factory=list)
    collapsed: bool = False


@dataclass(frozen=True)
class Message:
    """A finished message, ready to be handed to the persistence layer.

    ``id`` is assigned by whoever stores the message, never by the builder.
    When both ``emoji`` and ``avatar_url`` are set, ``avatar_mode`` records
    which one was set last and ``avatar`` returns that one.
    ``MessageBuilder`` gives each message its own copies of the attachments.
    """

    room: Room
    sender: User
    id: str | None = None
    text: str = ""
    emoji: str | None = None
    avatar_url: str | None = None
    avatar_mode: AvatarMode = AvatarMode.NONE
    alias: str | None = None
    attachments: tuple[MessageAttachment, ...] = ()
    editor: User | None = None
    groupable: bool | None = None

    @property
    def avatar(self) -> str | None:
        if self.avatar_mode is AvatarMode.EMOJI:
            return self.emoji
        if self.avatar_mode is AvatarMode.URL:
            return self.avatar_url
        return None
