"""
The local identifier service that PID providers consult to determine whether an identifier is
already in use within this system.

PID providers generate new identifiers by repeatedly proposing a candidate, checking that it is
not already in use, and reserving it.  The :py:class:`PIDService` interface supports this by
providing a lock for each identifier scope (i.e. a protocol-authority-shoulder combination) so
that generation within a scope can be serialized, and by refusing to reserve an identifier that
has already been issued so that a conflicting generation can retry.
"""
import os, json, threading
from collections import OrderedDict, ChainMap
from collections.abc import Mapping
from abc import ABCMeta, abstractmethod

from .globalid import GlobalId
from .exceptions import PIDConflictError, StateException
from .utils import LockedFile
from . import system as _sys

syslog = _sys.getSysLogger()

__all__ = [ 'PIDService', 'IssuedPIDRegistry' ]

class PIDService(object, metaclass=ABCMeta):
    """
    an interface to the system's record of identifiers that are in local use
    """

    @abstractmethod
    def is_global_id_locally_unique(self, gid: GlobalId) -> bool:
        """
        return True if no object in this system currently holds the given identifier
        """
        raise NotImplementedError()

    @abstractmethod
    def reserve(self, gid: GlobalId, data: Mapping=None):
        """
        record the given identifier as in use so that it will not be issued again
        :param GlobalId gid:  the identifier to reserve
        :param Mapping data:  any data to store with the identifier
        :raises PIDConflictError:  if the identifier is already in use
        """
        raise NotImplementedError()

    @abstractmethod
    def lock_for(self, scope: str):
        """
        return a (reentrant) lock that serializes identifier generation within the given scope
        """
        raise NotImplementedError()

    @abstractmethod
    def next_sequence(self, scope: str) -> int:
        """
        return the next number in the sequence for the given scope.  Each call returns a
        different number.
        """
        raise NotImplementedError()

class IssuedPIDRegistry(PIDService):
    """
    a PIDService that keeps its record of issued identifiers in memory and, optionally,
    persists it to disk.

    The persisted registry is a two-column TSV file where the first column is the identifier
    (in its canonical string form) and the second is the JSON-encoded data associated with it.

    This class can take a configuration dictionary on construction; the following parameters
    are supported:
    :param str      id_store_file:  the name to give to the file where identifiers are persisted
                                      (default: 'issued-pids.tsv', prefixed by the registry name)
    :param bool cache_on_register:  if True (default), each newly reserved identifier is persisted
                                      immediately upon a call to reserve(); if False, the
                                      identifiers will only be persisted with a call to cache_data().
    :param int     sequence_start:  the first number to return from next_sequence() for any scope
                                      (default: 1)
    :param str      sequence_file:  the name to give to the JSON file where the next number for
                                      each sequence scope is persisted (default:
                                      'pid-sequences.json', prefixed by the registry name)

    When the registry is persisted, the sequence counters are kept in the sequence file so that
    they continue across restarts and are shared by all processes using the same directory.
    All store files are accessed under a LockedFile.
    """

    def __init__(self, parentdir: str=None, config: Mapping=None, name: str=None):
        """
        create the registry.  If a persisted store exists in the given directory, its contents
        will be loaded.
        :param str  parentdir:  a directory where the registry can be saved; if not provided, the
                                  registry will not be persisted.
        :param Mapping config:  the configuration for this registry
        :param str       name:  a name to give to this collection of issued identifiers
        :raises StateException:  if the given parent directory is not an existing directory
        """
        if parentdir and not os.path.isdir(parentdir):
            raise StateException("%s: Not an existing directory" % parentdir)

        if not config:
            config = {}
        if not isinstance(config, Mapping):
            raise TypeError("Configuration not a dictionary: " + str(type(config)))
        self.cfg = config
        self.cache_immediately = self.cfg.get('cache_on_register', True)
        self.name = name

        self.cached = {}
        self.uncached = OrderedDict()
        self.data = ChainMap(self.uncached, self.cached)

        nm = type(self).__name__
        if self.name:
            nm += ":" + self.name
        self.log = syslog.getChild(nm)
        self.lock = threading.RLock()

        self._scope_locks = {}
        self._sequences = {}
        self._seqstart = self.cfg.get('sequence_start', 1)
        if not isinstance(self._seqstart, int):
            raise TypeError("sequence_start: not an int: "+str(self._seqstart))

        self.store = None
        self.seqstore = None
        if parentdir:
            self.store = os.path.join(parentdir,
                                      self.cfg.get('id_store_file', self._defname("issued-pids.tsv")))
            self.seqstore = os.path.join(parentdir,
                                         self.cfg.get('sequence_file',
                                                      self._defname("pid-sequences.json")))

        if self.store and os.path.exists(self.store):
            self.reload_data()
            if not self.data:
                self.log.warning("empty registry persistance restored")

    def _defname(self, base):
        if self.name:
            return "%s-%s" % (self.name, base)
        return base

    def reload_data(self):
        """
        load the contents of the registry from its persisted store into memory
        """
        with self.lock:
            with LockedFile(self.store) as fd:
                self.cached = self._parse(fd)
            self.data = ChainMap(self.uncached, self.cached)

    def _parse(self, fstrm):
        out = {}
        for line in fstrm:
            line = line.strip()
            if not line:
                continue
            parts = line.split("\t", 1)
            val = {}
            if len(parts) > 1:
                try:
                    val = json.loads(parts[1])
                except ValueError:
                    self.log.warning("%s: unparseable data for %s", self.store, parts[0])
            out[parts[0]] = val
        return out

    def cache_data(self):
        """
        persist any pending reserved identifiers to disk
        """
        if not self.store:
            return
        with self.lock:
            if not self.uncached:
                self.log.debug("No uncached identifiers detected")
                return
            with LockedFile(self.store, 'a') as fd:
                for key in list(self.uncached.keys()):
                    fd.write(key)
                    fd.write("\t")
                    fd.write(json.dumps(self.uncached[key]))
                    fd.write("\n")
                    self.cached[key] = self.uncached[key]
                    del self.uncached[key]

    def is_global_id_locally_unique(self, gid: GlobalId) -> bool:
        return not self.registered(gid)

    def reserve(self, gid: GlobalId, data: Mapping=None):
        key = self._key(gid)
        with self.lock:
            if key in self.data:
                raise PIDConflictError(key)
            if data is None:
                data = {}
            self.uncached[key] = dict(data)
            if self.cache_immediately:
                self.cache_data()

    def lock_for(self, scope: str):
        with self.lock:
            if scope not in self._scope_locks:
                self._scope_locks[scope] = threading.RLock()
            return self._scope_locks[scope]

    def next_sequence(self, scope: str) -> int:
        with self.lock:
            out = self._sequences.get(scope, self._seqstart)
            if not self.seqstore:
                self._sequences[scope] = out + 1
                return out

            # the file holds the next number to issue for each scope; 'a+' creates it if needed
            with LockedFile(self.seqstore, 'a+') as fd:
                fd.seek(0)
                seqs = self._parse_sequences(fd.read())
                out = max(out, seqs.get(scope, self._seqstart))
                seqs[scope] = out + 1
                fd.seek(0)
                fd.truncate()
                json.dump(seqs, fd, indent=2)

            self._sequences[scope] = out + 1
            return out

    def _parse_sequences(self, content):
        if not content.strip():
            return {}
        try:
            seqs = json.loads(content)
        except ValueError:
            self.log.warning("%s: unparseable sequence data; restarting sequences", self.seqstore)
            return {}
        if not isinstance(seqs, Mapping):
            self.log.warning("%s: sequence data is not an object; restarting sequences",
                             self.seqstore)
            return {}
        return dict((k, v) for k, v in seqs.items() if isinstance(v, int))

    def _key(self, gid):
        if isinstance(gid, GlobalId):
            return gid.as_string()
        return str(gid)

    def registered(self, gid) -> bool:
        """
        return True if the given identifier has already been reserved
        :param gid:  the identifier, either as a GlobalId or its canonical string form
        """
        return self._key(gid) in self.data

    def get_data(self, gid):
        """
        return the data for a given identifier or None if it has not been reserved
        """
        return self.data.get(self._key(gid))

    def iter(self):
        """
        return an iterator for the set of reserved identifiers (as strings)
        """
        return iter(self.data.keys())
