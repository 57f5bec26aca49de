"""
Utilities for loading configuration data and for looking up system settings.

Configuration is typically read from a YAML or JSON file via :py:func:`load_from_file`.  The
PID providers consult system-wide settings (such as the default protocol or the DOI provider
to use) through the :py:class:`SettingsLookup` interface; :py:class:`ConfigSettings` provides
an implementation backed by a dictionary.
"""
import json
from collections.abc import Mapping
from copy import deepcopy
from abc import ABCMeta, abstractmethod

import yaml

from .exceptions import ConfigurationException

__all__ = [ 'load_from_file', 'merge_config', 'Key', 'SettingsLookup', 'ConfigSettings',
            'ConfigurationException' ]

def load_from_file(configfile: str) -> Mapping:
    """
    read the configuration from the given file and return it as a dictionary.  The file
    format is determined by its filename extension; files ending in ".json" are read as
    JSON, and all others as YAML.

    :param str configfile:  the path to the configuration file
    :raises IOError:        if the file cannot be opened
    :raises ConfigurationException:  if the file contents cannot be parsed
    """
    with open(configfile) as fd:
        try:
            if configfile.endswith('.json'):
                out = json.load(fd)
            else:
                out = yaml.safe_load(fd)
        except (ValueError, yaml.YAMLError) as ex:
            raise ConfigurationException("%s: config parsing error: %s" % (configfile, str(ex)), ex)

    if out is None:
        out = {}
    if not isinstance(out, Mapping):
        raise ConfigurationException("%s: config file does not contain a dictionary" % configfile)
    return out

def merge_config(primary: Mapping, defaults: Mapping) -> Mapping:
    """
    merge two configurations, giving precedence to the values in the primary one.  Sub-
    dictionaries are merged recursively; other values in primary simply replace those in
    defaults.  A new dictionary is returned; the inputs are not changed.
    """
    out = deepcopy(defaults)
    for key in primary:
        if key in out and isinstance(out[key], Mapping) and isinstance(primary[key], Mapping):
            out[key] = merge_config(primary[key], out[key])
        else:
            out[key] = deepcopy(primary[key])
    return out

class Key(object):
    """
    the names of the system settings consulted by the PID providers and dispatcher
    """
    Protocol = ":Protocol"
    DoiProvider = ":DoiProvider"
    Authority = ":Authority"
    Shoulder = ":Shoulder"
    IdentifierGenerationStyle = ":IdentifierGenerationStyle"
    DataFilePIDFormat = ":DataFilePIDFormat"

class SettingsLookup(object, metaclass=ABCMeta):
    """
    an interface for looking up the current value of a system setting
    """

    @abstractmethod
    def get_value_for_key(self, key: str, default: str=None) -> str:
        """
        return the value of the setting with the given name, or ``default`` if it is not set
        """
        raise NotImplementedError()

class ConfigSettings(SettingsLookup):
    """
    a SettingsLookup whose values are held in a dictionary (e.g. the ``settings`` section of
    a configuration file).  Setting names may be given with or without their leading colon.
    """

    def __init__(self, settings: Mapping=None):
        if settings is None:
            settings = {}
        if not isinstance(settings, Mapping):
            raise ConfigurationException("settings: not a dictionary: " + str(type(settings)))
        self._settings = {}
        for key, val in settings.items():
            self._settings[key.lstrip(':')] = val

    def get_value_for_key(self, key: str, default: str=None) -> str:
        val = self._settings.get(key.lstrip(':'))
        if val is None:
            return default
        return str(val)
