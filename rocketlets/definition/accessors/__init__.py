"""Accessors handed to rocketlets."""

from rocketlets.definition.accessors.logger import RocketletLogger
from rocketlets.definition.accessors.message_builder import MessageBuilder

__all__ = ["MessageBuilder", "RocketletLogger"]
