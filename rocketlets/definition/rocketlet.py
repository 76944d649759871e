"""Base class every rocketlet extends."""

from __future__ import annotations

from enum import Enum

from rocketlets.definition.accessors.logger import RocketletLogger
from rocketlets.definition.metadata import RocketletAuthorInfo, RocketletInfo


class RocketletMethod(str, Enum):
    """Well-known methods the host dispatches to rocketlets."""

    INITIALIZE = "initialize"
    ON_ENABLE = "on_enable"
    ON_DISABLE = "on_disable"
    SET_STATUS = "set_status"
    CHECK_PRE_MESSAGE_SENT_PREVENT = "check_pre_message_sent_prevent"
    EXECUTE_PRE_MESSAGE_SENT_PREVENT = "execute_pre_message_sent_prevent"
    CHECK_PRE_MESSAGE_SENT_EXTEND = "check_pre_message_sent_extend"
    EXECUTE_PRE_MESSAGE_SENT_EXTEND = "execute_pre_message_sent_extend"
    CHECK_PRE_MESSAGE_SENT_MODIFY = "check_pre_message_sent_modify"
    EXECUTE_PRE_MESSAGE_SENT_MODIFY = "execute_pre_message_sent_modify"
    CHECK_POST_MESSAGE_SENT = "check_post_message_sent"
    EXECUTE_POST_MESSAGE_SENT = "execute_post_message_sent"


class Rocketlet:
    """Identity and logger of a rocketlet.

    Subclasses add the methods the host may call, e.g.
    ``execute_post_message_sent(self, message)``. The host never calls them
    directly; it goes through ``ProxiedRocketlet``.
    """

    def __init__(self, info: RocketletInfo, logger: RocketletLogger | None = None) -> None:
        self._info = info
        self._logger = logger or RocketletLogger(info.id)

    def get_name(self) -> str:
        return self._info.name

    def get_name_slug(self) -> str:
        return self._info.name_slug

    def get_id(self) -> str:
        return self._info.id

    def get_version(self) -> str:
        return self._info.version

    def get_description(self) -> str:
        return self._info.description

    def get_required_api_version(self) -> str:
        return self._info.required_api_version

    def get_author_info(self) -> RocketletAuthorInfo:
        return self._info.author

    def get_info(self) -> RocketletInfo:
        return self._info

    def get_logger(self) -> RocketletLogger:
        return self._logger
