"""Channels, settings and the shared context of a minilaser session."""

from .channel import Channel
from .context import Context
from .settings import Settings, config_directory
