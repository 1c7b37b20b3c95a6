from typing import Any, Optional

from .channel import Channel
from .settings import Settings, config_directory


class Context:
    """
    Context is the shared environment of a minilaser session. It owns the named channels used for logging and the
    persistent settings. Components ask the context for their settings with `setting()`, which makes the value an
    attribute of the context and records it so it can be written back on shutdown.
    """

    def __init__(
        self,
        name: str = "minilaser",
        path: str = "device",
        directory: Optional[str] = None,
        ignore_settings: bool = False,
    ):
        self.name = name
        self._path = path
        self.channels = {}
        if directory is None and not ignore_settings:
            directory = config_directory(name)
        self._settings = Settings(directory, f"{name}.cfg", ignore_settings=ignore_settings)
        self._registered = []

    def __repr__(self):
        return f"Context('{self.name}', '{self._path}')"

    @property
    def path(self):
        return self._path

    def channel(self, channel: str, *args, **kwargs) -> Channel:
        if channel not in self.channels:
            self.channels[channel] = Channel(channel, *args, **kwargs)
        elif "timestamp" in kwargs and isinstance(kwargs["timestamp"], bool):
            self.channels[channel].timestamp = kwargs["timestamp"]
        return self.channels[channel]

    def setting(self, setting_type, key, default=None) -> Any:
        """
        Registers a setting.

        If the setting already exists as an attribute, its value remains unchanged.
        If the setting exists in the persistent storage that value is used.
        Otherwise the default is used.

        @param setting_type: int, float, str, bool, list or tuple value
        @param key: name of the setting
        @param default: default value for the setting to have.
        @return: load_value
        """
        if hasattr(self, key) and getattr(self, key) is not None:
            return getattr(self, key)
        load_value = self._settings.read_persistent(setting_type, self._path, key, default)
        if load_value is not None and not isinstance(load_value, setting_type):
            load_value = setting_type(load_value)
        setattr(self, key, load_value)
        if key not in self._registered:
            self._registered.append(key)
        return load_value

    def write_configuration(self):
        """
        Commits every registered setting to the configuration file.
        """
        for key in self._registered:
            value = getattr(self, key, None)
            if value is None:
                continue
            self._settings.write_persistent(self._path, key, value)
        self._settings.write_configuration()

    @property
    def config_file(self):
        return self._settings.config_file
