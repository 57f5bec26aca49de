"""
Provide persistent identifier (PID) management for datasets and data files.

This package parses, validates, generates, and resolves globally unique identifiers (DOIs,
Handles, and the local "PermaLink" scheme) and dispatches identifier-lifecycle operations
(create, register, modify target, delete, check existence) to the backend provider selected
by protocol and configuration.
"""
import logging

from .exceptions import *
from .globalid import (GlobalId, format_identifier_string, test_for_null_terminator,
                       is_valid_global_id, check_doi_authority, parse)

try:
    from .version import __version__
except ImportError:
    __version__ = "(unset)"

_PIDSYSNAME = "Persistent Identifier Management"
_PIDSYSABBREV = "PID"

class PIDSystem(object):
    """
    static information describing the PID management system, used to name loggers and
    to identify the source of exceptions.
    """
    def __init__(self, subsysname="", subsysabbrev=""):
        self.system_name = _PIDSYSNAME
        self.system_abbrev = _PIDSYSABBREV
        self.subsystem_name = subsysname
        self.subsystem_abbrev = subsysabbrev
        self.system_version = __version__

    def getSysLogger(self):
        """
        return the logger that messages from this system should be sent to (or to a descendent
        of it).
        """
        out = logging.getLogger(self.system_abbrev)
        if self.subsystem_abbrev and self.subsystem_abbrev != self.system_abbrev:
            out = out.getChild(self.subsystem_abbrev)
        return out

system = PIDSystem()
