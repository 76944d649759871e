"""Fluent builder for outgoing messages."""

from __future__ import annotations

import copy

from rocketlets.definition.messages import AvatarMode, Message, MessageAttachment
from rocketlets.definition.metadata import RocketChatAssociationModel
from rocketlets.definition.rooms import Room
from rocketlets.definition.users import User
from rocketlets.errors import IndexOutOfRangeError, MissingRequiredFieldError


class MessageBuilder:
    """Accumulates message fields and produces an immutable ``Message``.

    A room and a sender must be set before ``get_message()`` can succeed.
    Every setter returns the builder so calls can be chained. A builder has a
    single owner and is not safe for concurrent mutation.
    """

    kind = RocketChatAssociationModel.MESSAGE

    def __init__(self, message: Message | None = None) -> None:
        self._room: Room | None = None
        self._sender: User | None = None
        self._text = ""
        self._emoji: str | None = None
        self._avatar_url: str | None = None
        self._avatar_mode = AvatarMode.NONE
        self._alias: str | None = None
        self._attachments: list[MessageAttachment] = []
        self._editor: User | None = None
        self._groupable: bool | None = None
        if message is not None:
            self.set_data(message)

    def set_data(self, message: Message) -> MessageBuilder:
        """Copy every field of ``message`` except its ``id``."""
        self._room = message.room
        self._sender = message.sender
        self._text = message.text
        self._emoji = message.emoji
        self._avatar_url = message.avatar_url
        self._avatar_mode = message.avatar_mode
        self._alias = message.alias
        self._attachments = copy.deepcopy(list(message.attachments))
        self._editor = message.editor
        self._groupable = message.groupable
        return self

    def set_room(self, room: Room) -> MessageBuilder:
        self._room = room
        return self

    def get_room(self) -> Room | None:
        return self._room

    def set_sender(self, sender: User) -> MessageBuilder:
        self._sender = sender
        return self

    def get_sender(self) -> User | None:
        return self._sender

    def set_text(self, text: str) -> MessageBuilder:
        self._text = text
        return self

    def get_text(self) -> str:
        return self._text

    def set_emoji_avatar(self, emoji: str) -> MessageBuilder:
        """Use an emoji as the avatar; it takes over from any avatar url."""
        self._emoji = emoji
        self._avatar_mode = AvatarMode.EMOJI
        return self

    def get_emoji_avatar(self) -> str | None:
        return self._emoji

    def set_avatar_url(self, avatar_url: str) -> MessageBuilder:
        """Use an image url as the avatar; it takes over from any emoji."""
        self._avatar_url = avatar_url
        self._avatar_mode = AvatarMode.URL
        return self

    def get_avatar_url(self) -> str | None:
        return self._avatar_url

    def set_username_alias(self, alias: str) -> MessageBuilder:
        self._alias = alias
        return self

    def get_username_alias(self) -> str | None:
        return self._alias

    def add_attachment(self, attachment: MessageAttachment) -> MessageBuilder:
        self._attachments.append(attachment)
        return self

    def set_attachments(self, attachments: list[MessageAttachment]) -> MessageBuilder:
        """Replace, and discard, every current attachment."""
        self._attachments = list(attachments)
        return self

    def get_attachments(self) -> list[MessageAttachment]:
        return list(self._attachments)

    def replace_attachment(self, position: int, attachment: MessageAttachment) -> MessageBuilder:
        self._check_position(position)
        self._attachments[position] = attachment
        return self

    def remove_attachment(self, position: int) -> MessageBuilder:
        self._check_position(position)
        del self._attachments[position]
        return self

    def set_editor(self, user: User) -> MessageBuilder:
        """Set the user editing the message; needed when modifying an existing one."""
        self._editor = user
        return self

    def get_editor(self) -> User | None:
        return self._editor

    def set_groupable(self, groupable: bool) -> MessageBuilder:
        self._groupable = groupable
        return self

    def get_groupable(self) -> bool | None:
        return self._groupable

    def get_message(self) -> Message:
        """Snapshot the builder. Attachments are deep-copied into the message."""
        if self._room is None:
            raise MissingRequiredFieldError("room")
        if self._sender is None:
            raise MissingRequiredFieldError("sender")

        return Message(
            room=self._room,
            sender=self._sender,
            text=self._text,
            emoji=self._emoji,
            avatar_url=self._avatar_url,
            avatar_mode=self._avatar_mode,
            alias=self._alias,
            attachments=tuple(copy.deepcopy(self._attachments)),
            editor=self._editor,
            groupable=self._groupable,
        )

    build = get_message

    def _check_position(self, position: int) -> None:
        # Negative positions are out of range, not python-style offsets
        if not 0 <= position < len(self._attachments):
            raise IndexOutOfRangeError(position, len(self._attachments))
