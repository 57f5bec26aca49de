"""
A simulated PID registry client, for testing and demonstration deployments.

:py:class:`SimRegistryClient` keeps its registered identifiers in memory and behaves like a
well-behaved remote registry service.  It can be put into a failing state to simulate an
unavailable service.
"""
import threading
from collections import OrderedDict
from collections.abc import Mapping
from copy import deepcopy

from .clients import RegistryClient
from .exceptions import PIDRegistryServerError, PIDRegistryClientError, PIDNotFound

__all__ = [ 'SimRegistryClient' ]

class SimRegistryClient(RegistryClient):
    """
    an in-memory simulation of a PID registry service.  Each operation invoked is recorded (as
    an operation-name, identifier pair) in the ``calls`` list.
    """

    def __init__(self, endpoint: str="https://registry.example.com/", failing: bool=False):
        self._endpoint = endpoint
        self.failing = failing
        self.records = OrderedDict()
        self.calls = []
        self._lock = threading.Lock()

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def _enter(self, op, pid):
        self.calls.append((op, pid))
        if self.failing:
            raise PIDRegistryServerError(pid, 503, "Service Unavailable")

    def exists(self, pid: str) -> bool:
        with self._lock:
            self._enter("exists", pid)
            return pid in self.records

    def reserve(self, pid: str, metadata: Mapping) -> str:
        with self._lock:
            self._enter("reserve", pid)
            if pid in self.records:
                raise PIDRegistryClientError(pid, 409, "Conflict")
            md = deepcopy(dict(metadata or {}))
            md.setdefault("_status", "reserved")
            self.records[pid] = md
            return "success: " + pid

    def get_metadata(self, pid: str) -> Mapping:
        with self._lock:
            self._enter("get_metadata", pid)
            if pid not in self.records:
                raise PIDNotFound(pid)
            return deepcopy(self.records[pid])

    def update(self, pid: str, metadata: Mapping):
        with self._lock:
            self._enter("update", pid)
            if pid not in self.records:
                raise PIDNotFound(pid)
            self.records[pid].update(deepcopy(dict(metadata)))

    def publicize(self, pid: str, metadata: Mapping):
        with self._lock:
            self._enter("publicize", pid)
            md = self.records.setdefault(pid, {})
            md.update(deepcopy(dict(metadata)))
            md["_status"] = "public"

    def delete(self, pid: str):
        with self._lock:
            self._enter("delete", pid)
            if pid not in self.records:
                raise PIDNotFound(pid)
            del self.records[pid]
