"""Data contracts shared between the host and rocketlets."""

from rocketlets.definition.accessors import MessageBuilder, RocketletLogger
from rocketlets.definition.messages import (
    AvatarMode,
    Message,
    MessageAttachment,
    MessageAttachmentAuthor,
    MessageAttachmentField,
    MessageAttachmentTitle,
)
from rocketlets.definition.metadata import (
    RocketChatAssociationModel,
    RocketletAuthorInfo,
    RocketletInfo,
)
from rocketlets.definition.rocketlet import Rocketlet, RocketletMethod
from rocketlets.definition.rooms import Room, RoomType
from rocketlets.definition.uploads import FileUploadContext, UploadDetails
from rocketlets.definition.users import User

__all__ = [
    "AvatarMode",
    "FileUploadContext",
    "Message",
    "MessageAttachment",
    "MessageAttachmentAuthor",
    "MessageAttachmentField",
    "MessageAttachmentTitle",
    "MessageBuilder",
    "RocketChatAssociationModel",
    "Rocketlet",
    "RocketletAuthorInfo",
    "RocketletInfo",
    "RocketletLogger",
    "RocketletMethod",
    "Room",
    "RoomType",
    "UploadDetails",
    "User",
]
