"""Rocketlet metadata records."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RocketChatAssociationModel(str, Enum):
    ROOM = "room"
    DISCUSSION = "discussion"
    MESSAGE = "message"
    LIVECHAT_MESSAGE = "livechat-message"
    USER = "user"
    FILE = "file"
    MISC = "misc"


class RocketletAuthorInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    support: str = ""
    homepage: str = ""


class RocketletInfo(BaseModel):
    """The manifest a rocketlet ships with."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    name_slug: str = Field(alias="nameSlug")
    version: str
    description: str = ""
    required_api_version: str = Field(alias="requiredApiVersion")
    author: RocketletAuthorInfo
    class_file: str = Field(default="", alias="classFile")
    icon_file: str = Field(default="", alias="iconFile")

    @classmethod
    def from_manifest(cls, data: dict[str, Any]) -> RocketletInfo:
        """Validate a parsed ``rocketlet.json`` style manifest."""
        return cls.model_validate(data)
