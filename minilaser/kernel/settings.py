import ast
import os
import platform
from configparser import ConfigParser, MissingSectionHeaderError, NoSectionError
from pathlib import Path
from typing import Any, Optional, Union


def config_directory(name: str, create: bool = False, system: Optional[str] = None) -> str:
    """
    Directory where the configuration of `name` lives, in an OS dependent location the user can write to.

    @param name: application directory name
    @param create: create the directory if it does not exist.
    @param system: override of platform.system(), for testing.
    @return: directory path
    """
    if not system:
        system = platform.system()
    if system == "Darwin":
        directory = os.path.join(os.path.expanduser("~"), "Library", "Application Support", name)
    elif system == "Windows":
        directory = os.path.join(os.path.expandvars("%LOCALAPPDATA%"), name)
    else:
        base = os.environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
        directory = os.path.join(base, name)
    if create:
        os.makedirs(directory, exist_ok=True)
    return directory


class Settings:
    """
    Settings are a thin interface over configparser. Conceptually a dictionary of dictionaries: sections holding
    key/value pairs. Values are stored as strings and converted back to the requested type on read.

    Values are loaded once by `read_configuration` and only committed to disk by `write_configuration`.
    """

    def __init__(self, directory, filename, ignore_settings=False):
        if directory is None:
            self._config_file = None
        else:
            self._config_file = Path(directory).joinpath(filename)
        self._config_dict = {}
        if not ignore_settings:
            self.read_configuration()

    def __contains__(self, item):
        return item in self._config_dict

    @property
    def config_file(self):
        return self._config_file

    def read_configuration(self, targetfile=None):
        if targetfile is None:
            targetfile = self._config_file
        if targetfile is None:
            return
        try:
            parser = ConfigParser()
            parser.read(targetfile, encoding="utf-8")
            for section in parser.sections():
                config_section = self._config_dict.setdefault(section, dict())
                for option in parser.options(section):
                    config_section[option] = parser.get(section, option)
        except (
            PermissionError,
            NoSectionError,
            MissingSectionHeaderError,
            FileNotFoundError,
        ):
            return

    def write_configuration(self, targetfile=None):
        if targetfile is None:
            targetfile = self._config_file
        if targetfile is None:
            return
        parser = ConfigParser()
        for section_key, section in self._config_dict.items():
            parser.add_section(section_key)
            for key, value in section.items():
                parser.set(section_key, key, value.replace("%", "%%"))
        Path(targetfile).parent.mkdir(parents=True, exist_ok=True)
        with open(targetfile, "w", encoding="utf-8") as fp:
            parser.write(fp)

    def read_persistent(
        self,
        t: type,
        section: str,
        key: str,
        default: Union[str, int, float, bool, list, tuple] = None,
    ) -> Any:
        """
        Directly read from persistent storage the value of an item.

        @param t: datatype.
        @param section: storing section
        @param key: reference item
        @param default: default value if item does not exist.
        @return: value
        """
        try:
            value = self._config_dict[section][key]
        except KeyError:
            return default
        try:
            if t == bool:
                return value == "True"
            if t in (list, tuple):
                return t(ast.literal_eval(value))
            return t(value)
        except (ValueError, SyntaxError, TypeError):
            return default

    def write_persistent(self, section: str, key: str, value: Union[str, int, float, bool, list, tuple]):
        self._config_dict.setdefault(section, dict())[key] = str(value)

    def delete_persistent(self, section: str, key: str):
        try:
            del self._config_dict[section][key]
        except KeyError:
            pass

    def keylist(self, section: str):
        return list(self._config_dict.get(section, ()))
