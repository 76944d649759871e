"""Rocketlets - host API for chat plugins."""

__version__ = "0.1.0"
